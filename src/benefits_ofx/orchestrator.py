"""Drives one export: provider login, month fetch, conversion and OFX output."""

import logging
import sys
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from pydantic import SecretStr

from .exceptions import ConfigurationError, TransportError
from .models.core import FetchConfig, Statement
from .providers.base import StatementProvider
from .providers.caju import CajuClient
from .providers.flash import FlashClient
from .writers.ofx_writer import OFXWriter


logger = logging.getLogger(__name__)


@dataclass
class Credentials:
    """Secrets supplied at run time, never read from the config file"""
    bearer_token: Optional[SecretStr] = None
    refresh_token: Optional[SecretStr] = None
    flash_password: Optional[SecretStr] = None
    flash_override_token: Optional[SecretStr] = None


def _require(**values) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required setting(s): {', '.join(missing)}")


def login_caju(config: FetchConfig,
               credentials: Credentials,
               session: Optional[requests.Session] = None) -> CajuClient:
    _require(
        user_id=config.user_id,
        employee_id=config.employee_id,
        bearer_token=credentials.bearer_token,
        refresh_token=credentials.refresh_token,
    )
    client = CajuClient(
        config.caju_base_url,
        config.user_id,
        config.employee_id,
        session=session,
        timeout=config.request_timeout,
    )
    client.login(credentials.bearer_token, credentials.refresh_token)
    return client


def login_flash(config: FetchConfig,
                credentials: Credentials,
                read_code: Callable[[], str],
                session: Optional[requests.Session] = None,
                attempts: int = 1) -> FlashClient:
    """Log in to Flash, asking ``read_code`` for the SMS code.

    A code the server rejects is asked for again, up to ``attempts`` times,
    without restarting the login. Connection failures are not retried.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    _require(flash_company_id=config.flash_company_id, employee_id=config.employee_id)
    options = dict(
        session=session,
        timeout=config.request_timeout,
        auth_url=config.flash_auth_url,
        web_auth_url=config.flash_web_auth_url,
        bff_url=config.flash_bff_url,
    )

    if credentials.flash_override_token is not None:
        logger.info("Using override token")
        return FlashClient.with_token(
            credentials.flash_override_token,
            config.flash_company_id,
            config.employee_id,
            **options
        )

    _require(flash_username=config.flash_username, flash_password=credentials.flash_password)
    client = FlashClient(
        config.flash_username,
        credentials.flash_password,
        config.flash_company_id,
        config.employee_id,
        **options
    )
    client.initiate_auth()

    for attempt in range(1, attempts + 1):
        try:
            client.finish_login(read_code())
            break
        except TransportError as e:
            # only a server answer means the code itself was rejected
            if e.status_code is None or attempt == attempts:
                raise
            logger.warning(f"Second factor rejected ({e.status_code}), try again")

    return client


def build_provider(config: FetchConfig,
                   credentials: Credentials,
                   read_code: Callable[[], str],
                   session: Optional[requests.Session] = None,
                   attempts: int = 1) -> StatementProvider:
    """Create the configured provider and drive its login to completion"""
    if config.provider == "caju":
        return login_caju(config, credentials, session=session)
    if config.provider == "flash":
        return login_flash(config, credentials, read_code, session=session, attempts=attempts)
    raise ConfigurationError(f"Unknown provider: {config.provider}")


class StatementExporter:
    """Fetches a month from a logged-in provider and renders it as OFX"""

    def __init__(self, provider: StatementProvider, writer: Optional[OFXWriter] = None):
        self.provider = provider
        self.writer = writer or OFXWriter()

    def fetch_statement(self, month: int, year: Optional[int] = None) -> Statement:
        items = self.provider.fetch_month(month, year)
        return self.provider.convert(items)

    def export_month(self, month: int, year: Optional[int] = None) -> str:
        """Return the OFX document for a month; any failure propagates"""
        statement = self.fetch_statement(month, year)
        logger.info(
            f"Converted {len(statement.transactions)} {self.provider.name} transactions"
        )
        return self.writer.serialize(statement)


def write_output(document: str, filename: Optional[str] = None) -> None:
    """Write a document to ``filename`` (truncating it) or to stdout"""
    if filename is None:
        sys.stdout.write(document)
        sys.stdout.flush()
        return

    with open(filename, 'w', encoding='utf-8') as f:
        f.write(document)
