"""Core modules: configuration, logging and Google credentials."""

from core.config import (
    DEFAULT_SHEET_NAME,
    AppConfig,
    ConfigurationError,
    SheetsConfig,
    get_config,
    load_config_from_env,
    reset_config,
)
from core.logging_config import (
    LogContext,
    preview,
    setup_logging,
)
from core.secrets import has_sheets_credentials, load_sheets_credentials

__all__ = [
    # Config
    "AppConfig",
    "SheetsConfig",
    "ConfigurationError",
    "DEFAULT_SHEET_NAME",
    "load_config_from_env",
    "get_config",
    "reset_config",
    # Logging
    "setup_logging",
    "LogContext",
    "preview",
    # Credentials
    "has_sheets_credentials",
    "load_sheets_credentials",
]
