"""Command-line interface for exporting benefits card statements as OFX."""

import sys
from datetime import datetime
from typing import Optional, Dict, Any

import click
import logging
from dotenv import load_dotenv
from pydantic import SecretStr

from .exceptions import BenefitsOfxError
from .orchestrator import Credentials, StatementExporter, build_provider, write_output
from .utils.config_manager import ConfigManager, PROVIDERS
from .utils.dates import month_name, parse_month, resolve_year
from .utils.error_handler import ErrorCategory, ErrorHandler, handle_export_error


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr
)
logger = logging.getLogger(__name__)

SMS_CODE_ATTEMPTS = 3


def _secret(value: Optional[str]) -> Optional[SecretStr]:
    return SecretStr(value) if value else None


class BenefitsOfxCLI:
    """Ties configuration, error reporting and the export together"""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.update_config(overrides or {})
        self.error_handler = ErrorHandler(self.config.log_directory, enable_console=False)

    def resolve_month(self, value: str) -> int:
        """Parse the month argument, falling back to the current month"""
        try:
            return parse_month(value)
        except ValueError:
            current = datetime.now().month
            self.error_handler.log_warning(
                f"Invalid month {value!r}, using {month_name(current)}",
                "INVALID_MONTH",
                ErrorCategory.DATA_CONVERSION,
                context={'value': value}
            )
            logger.warning(f"Invalid month {value!r}, using {month_name(current)}")
            return current

    def export(self,
               month: int,
               year: int,
               credentials: Credentials,
               output: Optional[str] = None) -> None:
        """Log in, fetch the month and write the OFX document"""
        provider = build_provider(
            self.config,
            credentials,
            read_code=lambda: click.prompt("Enter TOTP"),
            attempts=SMS_CODE_ATTEMPTS,
        )
        document = StatementExporter(provider).export_month(month, year)
        write_output(document, output)
        self.error_handler.log_info(
            f"Exported {provider.name} statement for {month_name(month)}/{year}",
            context={'provider': provider.name, 'month': month, 'year': year, 'output': output}
        )


@click.command()
@click.argument('month')
@click.argument('year', type=int, required=False)
@click.option('--provider', type=click.Choice(PROVIDERS, case_sensitive=False), envvar='PROVIDER',
              help='Statement provider (default: flash)')
@click.option('--base-url', envvar='BASE_URL', help='Caju API base URL')
@click.option('--bearer-token', envvar='BEARER_TOKEN', help='Caju bearer token')
@click.option('--refresh-token', envvar='REFRESH_TOKEN', help='Caju refresh token')
@click.option('--user-id', envvar='USER_ID', help='Caju user id')
@click.option('--employee-id', envvar='EMPLOYEE_ID', help='Employee id')
@click.option('--flash-username', envvar='FLASH_USERNAME', help='Flash login')
@click.option('--flash-password', envvar='FLASH_PASSWORD', help='Flash password')
@click.option('--flash-override-token', envvar='FLASH_AUTH_OVERRIDE_TOKEN',
              help='Flash application token; skips the SMS login')
@click.option('--flash-company', envvar='FLASH_COMPANY_ID', help='Flash company id')
@click.option('--output', '-o', type=click.Path(dir_okay=False, writable=True),
              help='Output file (default: stdout)')
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(month, year, provider, base_url, bearer_token, refresh_token, user_id, employee_id,
        flash_username, flash_password, flash_override_token, flash_company, output, config, verbose):
    """Export the MONTH [YEAR] statement of a benefits card as OFX.

    MONTH is 1-12 or an English month name; YEAR defaults to the current year.
    """

    # Set up logging level
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cli_instance = BenefitsOfxCLI(config, {
        'provider': provider.lower() if provider else None,
        'caju_base_url': base_url,
        'user_id': user_id,
        'employee_id': employee_id,
        'flash_username': flash_username,
        'flash_company_id': flash_company,
    })
    credentials = Credentials(
        bearer_token=_secret(bearer_token),
        refresh_token=_secret(refresh_token),
        flash_password=_secret(flash_password),
        flash_override_token=_secret(flash_override_token),
    )

    month_number = cli_instance.resolve_month(month)
    year = resolve_year(year)

    try:
        cli_instance.export(month_number, year, credentials, output)
    except (BenefitsOfxError, OSError) as e:
        handle_export_error(cli_instance.error_handler, e, provider=cli_instance.config.provider)
        click.echo(f"✗ Export failed: {e}", err=True)
        sys.exit(1)

    if output:
        click.echo(f"Wrote ofx for {month_name(month_number)}/{year} at {output}", err=True)


def main():
    """Console entry point; reads a .env file before parsing options"""
    load_dotenv()
    cli()


if __name__ == '__main__':
    main()
