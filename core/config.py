"""Centralized configuration management with validation."""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any

from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


DEFAULT_CREDENTIALS_FILE = "./credentials/google-sheets-credentials.json"
DEFAULT_SHEET_NAME = "Cards"

PROJECT_ROOT = Path(__file__).parent.parent


def _mask_secret(value: str, visible_chars: int = 4) -> str:
    """Mask a secret value for logging, showing only first few chars."""
    if not value:
        return "<empty>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def parse_json_from_env(value: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse a JSON object stored in an env var, un-escaping literal \\n sequences.

    Returns None when the value is empty or not valid JSON.
    """
    if not value:
        return None
    try:
        parsed = json.loads(value.replace("\\n", "\n"), strict=False)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


@dataclass
class SheetsConfig:
    """Google Sheets export configuration."""
    spreadsheet_id: str = ""
    sheet_name: str = ""  # empty: request value, then DEFAULT_SHEET_NAME
    credentials_file: str = DEFAULT_CREDENTIALS_FILE
    credentials_json: Optional[Dict[str, Any]] = None

    def resolve_credentials_path(self) -> Optional[Path]:
        """Resolve the credentials file against the project root when relative."""
        if not self.credentials_file:
            return None
        path = Path(self.credentials_file)
        return path if path.is_absolute() else PROJECT_ROOT / path

    def validate(self) -> List[str]:
        """Validate sheets configuration, return list of errors."""
        errors = []
        if not self.spreadsheet_id:
            errors.append("GOOGLE_SHEETS_SPREADSHEET_ID is not set")
        if not self.credentials_json:
            path = self.resolve_credentials_path()
            if path is None or not path.exists():
                errors.append(
                    "GOOGLE_SHEETS_CREDENTIALS_JSON or GOOGLE_SHEETS_SERVICE_ACCOUNT_KEY is required"
                )
        return errors

    def __repr__(self) -> str:
        client_email = (self.credentials_json or {}).get("client_email", "")
        return (f"SheetsConfig(spreadsheet_id={_mask_secret(self.spreadsheet_id)}, "
                f"sheet_name={self.sheet_name}, credentials_file={self.credentials_file}, "
                f"credentials_json={'<set: ' + client_email + '>' if self.credentials_json else '<empty>'})")


@dataclass
class AppConfig:
    """Main application configuration."""
    sheets: SheetsConfig = field(default_factory=SheetsConfig)

    # Runtime settings
    environment: str = "development"  # "development" or "production"
    log_level: str = "INFO"
    log_format: str = "text"  # "json" or "text"
    card_store_path: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self, require_sheets: bool = False) -> None:
        """Validate all configuration, raise ConfigurationError if invalid."""
        errors = []

        if require_sheets:
            errors.extend(self.sheets.validate())
        if self.log_format not in ("json", "text"):
            errors.append(f"Unknown LOG_FORMAT: {self.log_format}")

        if errors:
            raise ConfigurationError("Configuration errors:\n  - " + "\n  - ".join(errors))

    def __repr__(self) -> str:
        return (f"AppConfig(\n  sheets={self.sheets},\n  environment={self.environment}, "
                f"log_level={self.log_level}, card_store_path={self.card_store_path}\n)")


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables."""
    load_dotenv()

    store_path = os.getenv("CARD_STORE_PATH", "").strip()

    return AppConfig(
        sheets=SheetsConfig(
            spreadsheet_id=os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID", ""),
            sheet_name=os.getenv("GOOGLE_SHEETS_SHEET_NAME", ""),
            credentials_file=os.getenv("GOOGLE_SHEETS_SERVICE_ACCOUNT_KEY", DEFAULT_CREDENTIALS_FILE),
            credentials_json=parse_json_from_env(os.getenv("GOOGLE_SHEETS_CREDENTIALS_JSON")),
        ),
        environment=os.getenv("APP_ENV", "development").lower(),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "text").lower(),
        card_store_path=store_path or None,
    )


# Singleton config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config_from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
