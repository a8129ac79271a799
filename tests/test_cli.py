"""Tests for the command-line interface."""

import json
import os
from datetime import datetime

import pytest
from click.testing import CliRunner

from benefits_ofx import cli as cli_module
from benefits_ofx.cli import cli
from benefits_ofx.exceptions import ConfigurationError
from benefits_ofx.providers.flash import statement as flash


ENV_VARS = (
    'PROVIDER', 'BASE_URL', 'BEARER_TOKEN', 'REFRESH_TOKEN', 'USER_ID', 'EMPLOYEE_ID',
    'FLASH_USERNAME', 'FLASH_PASSWORD', 'FLASH_AUTH_OVERRIDE_TOKEN', 'FLASH_COMPANY_ID',
)


class StubProvider:
    name = "Flash"

    def __init__(self):
        self.requested = []

    def fetch_month(self, month, year=None):
        self.requested.append((month, year))
        return [flash.FlashTransaction.model_validate({
            '_id': 'f-1',
            'date': '2023-06-20T10:00:00.000Z',
            'amount': 990,
            'description': 'Padaria',
            'status': 'COMPLETED',
            'type': 'OPEN_LOOP_PAYMENT',
        })]

    def convert(self, items):
        return flash.convert(items)


class TestCLI:
    """Test cases for the benefits-ofx command"""

    def setup_method(self):
        """Set up test fixtures"""
        self.runner = CliRunner()
        self.env = {name: None for name in ENV_VARS}
        self.provider = StubProvider()
        self.build_calls = []

    @pytest.fixture(autouse=True)
    def stub_provider(self, monkeypatch):
        def fake_build_provider(config, credentials, read_code, **kwargs):
            self.build_calls.append((config, credentials, read_code))
            return self.provider

        monkeypatch.setattr(cli_module, 'build_provider', fake_build_provider)

    def invoke(self, args, **kwargs):
        return self.runner.invoke(cli, ['-c', 'missing.json'] + args, env=self.env, **kwargs)

    def test_writes_file(self):
        with self.runner.isolated_filesystem():
            result = self.invoke(['june', '2023', '-o', 'june.ofx'])

            assert result.exit_code == 0, result.output
            assert "Wrote ofx for June/2023 at june.ofx" in result.output
            with open('june.ofx', encoding='utf-8') as f:
                document = f.read()

        assert "<TRNAMT>-9.90</TRNAMT>" in document
        assert self.provider.requested == [(6, 2023)]

    def test_successful_export_is_logged(self):
        with self.runner.isolated_filesystem():
            with open('benefits_ofx.json', 'w', encoding='utf-8') as f:
                json.dump({'log_directory': 'logs'}, f)

            result = self.runner.invoke(
                cli, ['-c', 'benefits_ofx.json', 'june', '2023', '-o', 'june.ofx'], env=self.env
            )

            assert result.exit_code == 0, result.output
            log_files = os.listdir('logs')
            with open(os.path.join('logs', log_files[0]), encoding='utf-8') as f:
                records = [json.loads(line) for line in f if line.strip()]

        assert records[-1]['message'] == "Exported Flash statement for June/2023"
        assert records[-1]['context'] == {
            'provider': 'Flash', 'month': 6, 'year': 2023, 'output': 'june.ofx'
        }

    def test_writes_stdout(self):
        result = self.invoke(['6', '2023'])

        assert result.exit_code == 0, result.output
        assert "<OFX>" in result.output
        assert "Wrote ofx" not in result.output

    def test_year_defaults_to_current(self):
        result = self.invoke(['JanUaRY'])

        assert result.exit_code == 0, result.output
        assert self.provider.requested == [(1, datetime.now().year)]

    def test_invalid_month_uses_current_month(self):
        result = self.invoke(['Smarch', '2023'])

        assert result.exit_code == 0, result.output
        assert self.provider.requested == [(datetime.now().month, 2023)]

    def test_options_from_environment(self):
        self.env.update({
            'PROVIDER': 'caju',
            'BEARER_TOKEN': 'bearer',
            'REFRESH_TOKEN': 'refresh',
            'USER_ID': 'user-1',
            'EMPLOYEE_ID': 'emp-1',
            'BASE_URL': 'https://caju.example',
        })

        result = self.invoke(['6', '2023'])

        assert result.exit_code == 0, result.output
        config, credentials, _ = self.build_calls[0]
        assert config.provider == "caju"
        assert config.user_id == "user-1"
        assert config.employee_id == "emp-1"
        assert config.caju_base_url == "https://caju.example"
        assert credentials.bearer_token.get_secret_value() == "bearer"
        assert credentials.refresh_token.get_secret_value() == "refresh"
        assert credentials.flash_password is None

    def test_flash_options(self):
        result = self.invoke([
            '6', '2023',
            '--flash-username', 'alice',
            '--flash-password', 's3cret',
            '--flash-company', 'company-1',
            '--employee-id', 'emp-1',
        ])

        assert result.exit_code == 0, result.output
        config, credentials, _ = self.build_calls[0]
        assert config.provider == "flash"
        assert config.flash_username == "alice"
        assert config.flash_company_id == "company-1"
        assert credentials.flash_password.get_secret_value() == "s3cret"
        assert credentials.flash_override_token is None

    def test_sms_code_is_prompted(self, monkeypatch):
        codes = []

        def fake_build_provider(config, credentials, read_code, **kwargs):
            codes.append(read_code())
            return self.provider

        monkeypatch.setattr(cli_module, 'build_provider', fake_build_provider)

        result = self.invoke(['6', '2023'], input="123456\n")

        assert result.exit_code == 0, result.output
        assert codes == ["123456"]
        assert "Enter TOTP" in result.output

    def test_export_failure_exits_non_zero(self, monkeypatch):
        def failing_build_provider(config, credentials, read_code, **kwargs):
            raise ConfigurationError("Missing required setting(s): flash_company_id")

        monkeypatch.setattr(cli_module, 'build_provider', failing_build_provider)

        result = self.invoke(['6', '2023'])

        assert result.exit_code == 1
        assert "Export failed: Missing required setting(s): flash_company_id" in result.output

    def test_rejects_unknown_provider(self):
        result = self.invoke(['6', '2023', '--provider', 'nubank'])

        assert result.exit_code == 2
        assert self.build_calls == []
