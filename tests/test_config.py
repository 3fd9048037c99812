"""Tests for configuration module."""

import os
from unittest.mock import patch

import pytest

from core.config import (
    DEFAULT_CREDENTIALS_FILE,
    AppConfig,
    ConfigurationError,
    SheetsConfig,
    _mask_secret,
    load_config_from_env,
    parse_json_from_env,
)
from core.secrets import (
    MISSING_CREDENTIALS_DEVELOPMENT,
    MISSING_CREDENTIALS_PRODUCTION,
    has_sheets_credentials,
    load_sheets_credentials,
)


class TestMaskSecret:
    """Tests for secret masking utility."""

    def test_mask_normal_secret(self):
        """Test masking of normal length secret."""
        assert _mask_secret("abcdefghij") == "abcd******"

    def test_mask_short_secret(self):
        """Test masking of short secret."""
        assert _mask_secret("abc") == "***"

    def test_mask_empty_secret(self):
        """Test masking of empty secret."""
        assert _mask_secret("") == "<empty>"


class TestParseJsonFromEnv:
    """Tests for JSON credentials in environment variables."""

    def test_escaped_newlines(self):
        """Test literal \\n sequences in a private key are restored."""
        raw = '{"private_key": "-----BEGIN KEY-----\\nabc\\n-----END KEY-----", "client_email": "x@y"}'
        parsed = parse_json_from_env(raw)

        assert parsed["client_email"] == "x@y"
        assert "\n" in parsed["private_key"]

    @pytest.mark.parametrize("value", [None, "", "not json", "[1, 2]"])
    def test_invalid_values(self, value):
        assert parse_json_from_env(value) is None


class TestSheetsConfig:
    """Tests for SheetsConfig validation."""

    def test_valid_config(self):
        config = SheetsConfig(spreadsheet_id="abc", credentials_json={"client_email": "svc@x"})
        assert config.validate() == []

    def test_missing_spreadsheet_id(self):
        config = SheetsConfig(credentials_json={"client_email": "svc@x"})
        assert any("GOOGLE_SHEETS_SPREADSHEET_ID" in e for e in config.validate())

    def test_missing_credentials(self, tmp_path):
        config = SheetsConfig(spreadsheet_id="abc", credentials_file=str(tmp_path / "none.json"))
        assert any("GOOGLE_SHEETS_CREDENTIALS_JSON" in e for e in config.validate())

    def test_relative_credentials_path(self):
        path = SheetsConfig().resolve_credentials_path()
        assert path.is_absolute()
        assert path.name == "google-sheets-credentials.json"

    def test_repr_masks_spreadsheet_id(self):
        config = SheetsConfig(spreadsheet_id="1234567890", credentials_json={"client_email": "svc@x"})
        text = repr(config)
        assert "1234567890" not in text
        assert "svc@x" in text


class TestAppConfig:
    """Tests for AppConfig."""

    def test_is_production(self):
        assert AppConfig(environment="production").is_production
        assert not AppConfig(environment="development").is_production

    def test_validate_without_sheets(self):
        AppConfig().validate()

    def test_validate_requires_sheets(self, tmp_path):
        config = AppConfig(sheets=SheetsConfig(credentials_file=str(tmp_path / "none.json")))
        with pytest.raises(ConfigurationError):
            config.validate(require_sheets=True)

    def test_validate_log_format(self):
        with pytest.raises(ConfigurationError, match="LOG_FORMAT"):
            AppConfig(log_format="xml").validate()


class TestLoadConfigFromEnv:
    """Tests for loading config from environment."""

    def test_load_sheets_settings(self):
        env = {
            "GOOGLE_SHEETS_SPREADSHEET_ID": "sheet-123",
            "GOOGLE_SHEETS_SHEET_NAME": "Graded",
            "GOOGLE_SHEETS_CREDENTIALS_JSON": '{"client_email": "svc@example.com"}',
            "APP_ENV": "Production",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            config = load_config_from_env()

        assert config.sheets.spreadsheet_id == "sheet-123"
        assert config.sheets.sheet_name == "Graded"
        assert config.sheets.credentials_json == {"client_email": "svc@example.com"}
        assert config.environment == "production"
        assert config.log_level == "DEBUG"

    def test_defaults(self):
        env = {
            "GOOGLE_SHEETS_SPREADSHEET_ID": "",
            "GOOGLE_SHEETS_SHEET_NAME": "",
            "GOOGLE_SHEETS_CREDENTIALS_JSON": "",
            "CARD_STORE_PATH": "",
        }
        with patch.dict(os.environ, env):
            os.environ.pop("GOOGLE_SHEETS_SERVICE_ACCOUNT_KEY", None)
            config = load_config_from_env()

        assert config.sheets.credentials_file == DEFAULT_CREDENTIALS_FILE
        assert config.sheets.credentials_json is None
        assert config.card_store_path is None

    def test_card_store_path(self):
        with patch.dict(os.environ, {"CARD_STORE_PATH": "/tmp/cards.db"}):
            config = load_config_from_env()

        assert config.card_store_path == "/tmp/cards.db"


class TestAppStartup:
    """Tests for configuration checks when the app is built."""

    def test_bad_log_format_stops_startup(self):
        from api.main import create_app
        from core.config import reset_config

        reset_config()
        try:
            with patch.dict(os.environ, {"LOG_FORMAT": "xml"}):
                with pytest.raises(ConfigurationError, match="LOG_FORMAT"):
                    create_app()
        finally:
            reset_config()

    def test_valid_config_builds_app(self):
        from api.main import create_app
        from core.config import reset_config

        reset_config()
        try:
            with patch.dict(os.environ, {"LOG_FORMAT": "text"}):
                app = create_app()
        finally:
            reset_config()

        assert app.title == "Card Listing Export"


class TestSheetsCredentials:
    """Tests for service account loading."""

    def test_missing_credentials_development(self, tmp_path):
        config = AppConfig(sheets=SheetsConfig(credentials_file=str(tmp_path / "none.json")))

        assert has_sheets_credentials(config) is False
        with pytest.raises(ConfigurationError) as exc:
            load_sheets_credentials(config)
        assert str(exc.value) == MISSING_CREDENTIALS_DEVELOPMENT

    def test_missing_credentials_production(self, tmp_path):
        config = AppConfig(
            sheets=SheetsConfig(credentials_file=str(tmp_path / "none.json")),
            environment="production",
        )

        with pytest.raises(ConfigurationError) as exc:
            load_sheets_credentials(config)
        assert str(exc.value) == MISSING_CREDENTIALS_PRODUCTION

    def test_invalid_credentials_json(self):
        config = AppConfig(sheets=SheetsConfig(credentials_json={"client_email": "svc@x"}))

        assert has_sheets_credentials(config) is True
        with pytest.raises(ConfigurationError, match="not a valid service account"):
            load_sheets_credentials(config)
