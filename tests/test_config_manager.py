"""Tests for configuration management."""

import json
import os
import tempfile
import unittest

import yaml

from benefits_ofx.utils.config_manager import ConfigManager
from benefits_ofx.models.core import FetchConfig


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, 'test_config.json')

    def tearDown(self):
        """Clean up test fixtures"""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_default_config_loading(self):
        """Test loading default configuration when no file exists"""
        manager = ConfigManager(config_path="nonexistent_file.json")
        config = manager.load_config()

        self.assertIsInstance(config, FetchConfig)
        self.assertEqual(config.provider, "flash")
        self.assertEqual(config.caju_base_url, "https://apigw.caju.com.br")
        self.assertIsNone(config.employee_id)
        self.assertIsNone(config.request_timeout)

    def test_json_config_loading(self):
        """Test loading configuration from JSON file"""
        test_config = {
            "provider": "caju",
            "user_id": "user-1",
            "employee_id": "emp-1",
            "request_timeout": 15,
        }
        with open(self.config_file, 'w') as f:
            json.dump(test_config, f)

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config.provider, "caju")
        self.assertEqual(config.user_id, "user-1")
        self.assertEqual(config.employee_id, "emp-1")
        self.assertEqual(config.request_timeout, 15)

    def test_yaml_config_loading(self):
        """Test loading configuration from YAML file"""
        path = self._write('config.yaml', yaml.safe_dump({
            "flash_company_id": "company-1",
            "flash_username": "alice",
        }))

        config = ConfigManager(config_path=path).load_config()

        self.assertEqual(config.provider, "flash")
        self.assertEqual(config.flash_company_id, "company-1")
        self.assertEqual(config.flash_username, "alice")

    def test_unknown_keys_are_ignored(self):
        """Test that unrecognized keys do not break loading"""
        path = self._write('config.json', json.dumps({"employee_id": "emp-1", "colour": "blue"}))

        config = ConfigManager(config_path=path).load_config()

        self.assertEqual(config.employee_id, "emp-1")
        self.assertFalse(hasattr(config, "colour"))

    def test_invalid_config_falls_back_to_defaults(self):
        """Test that invalid files are reported and defaults used"""
        for content in ['{"provider": "nubank"}',
                        '{"request_timeout": -1}',
                        '{"request_timeout": true}',
                        '{"employee_id": 42}',
                        '["not", "a", "dict"]',
                        '{not json']:
            path = self._write('bad.json', content)
            with self.assertLogs('benefits_ofx.utils.config_manager', level='ERROR'):
                config = ConfigManager(config_path=path).load_config()
            self.assertEqual(config, FetchConfig())

    def test_unsupported_format(self):
        """Test that unsupported extensions are skipped"""
        path = self._write('config.ini', "[section]\nprovider = caju\n")

        config = ConfigManager(config_path=path).load_config()

        self.assertEqual(config, FetchConfig())

    def test_config_is_cached(self):
        """Test that load_config caches until forced"""
        with open(self.config_file, 'w') as f:
            json.dump({"employee_id": "first"}, f)
        manager = ConfigManager(config_path=self.config_file)
        self.assertEqual(manager.load_config().employee_id, "first")

        with open(self.config_file, 'w') as f:
            json.dump({"employee_id": "second"}, f)

        self.assertEqual(manager.load_config().employee_id, "first")
        self.assertEqual(manager.load_config(force_reload=True).employee_id, "second")

    def test_update_config(self):
        """Test command-line style overrides"""
        with open(self.config_file, 'w') as f:
            json.dump({"user_id": "from-file", "employee_id": "emp-file"}, f)
        manager = ConfigManager(config_path=self.config_file)

        config = manager.update_config({
            "user_id": "from-flag",
            "employee_id": None,
            "provider": "caju",
        })

        self.assertEqual(config.user_id, "from-flag")
        self.assertEqual(config.employee_id, "emp-file")
        self.assertEqual(config.provider, "caju")


if __name__ == '__main__':
    unittest.main()
