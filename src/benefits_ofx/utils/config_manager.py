"""Configuration management for statement exports."""

import json
import os
from dataclasses import fields
from typing import Dict, Any, Optional

import yaml
import logging

from ..models.core import FetchConfig


logger = logging.getLogger(__name__)

PROVIDERS = ('caju', 'flash')


class ConfigManager:
    """Loads and validates export configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[FetchConfig] = None

    def load_config(self, force_reload: bool = False) -> FetchConfig:
        """Load configuration from file or return defaults

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            FetchConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()
        known = {f.name for f in fields(FetchConfig)}

        for key in config_data:
            if key not in known:
                logger.warning(f"Unknown configuration key: {key}")

        self._config_cache = FetchConfig(**{k: v for k, v in config_data.items() if k in known})
        return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.debug("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations

        Returns:
            Path to configuration file or None if not found
        """
        if self.config_path:
            return self.config_path

        search_paths = [
            'benefits_ofx.json',
            'benefits_ofx.yml',
            'benefits_ofx.yaml',
            'config/benefits_ofx.json',
            'config/benefits_ofx.yml',
            'config/benefits_ofx.yaml',
            os.path.expanduser('~/.benefits_ofx/config.json'),
            os.path.expanduser('~/.benefits_ofx/config.yml'),
            os.path.expanduser('~/.benefits_ofx/config.yaml'),
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Any) -> None:
        """Validate configuration data structure

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        if 'provider' in data and data['provider'] not in PROVIDERS:
            raise ValueError(f"provider must be one of {', '.join(PROVIDERS)}")

        for str_key in ['caju_base_url', 'user_id', 'employee_id', 'flash_company_id',
                        'flash_username', 'flash_auth_url', 'flash_web_auth_url',
                        'flash_bff_url', 'log_directory']:
            if data.get(str_key) is not None and not isinstance(data[str_key], str):
                raise ValueError(f"{str_key} must be a string")

        timeout = data.get('request_timeout')
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise ValueError("request_timeout must be a number")
            if timeout <= 0:
                raise ValueError("request_timeout must be positive")

    def update_config(self, updates: Dict[str, Any]) -> FetchConfig:
        """Apply overrides, e.g. from command-line options; None values are ignored

        Args:
            updates: Dictionary of configuration updates
        """
        config = self.load_config()

        for key, value in updates.items():
            if value is None:
                continue
            if hasattr(config, key):
                setattr(config, key, value)
                logger.debug(f"Updated configuration: {key}")
            else:
                logger.warning(f"Unknown configuration key: {key}")

        return config
