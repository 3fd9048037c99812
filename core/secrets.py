"""
Secrets Management Module

Loads the Google Sheets service account used by the Sheets export.

Environment Variable Mapping:
- GOOGLE_SHEETS_CREDENTIALS_JSON: service account JSON (escaped newlines allowed)
- GOOGLE_SHEETS_SERVICE_ACCOUNT_KEY: path to the service account JSON file

The JSON variable wins when both are set. In production only the JSON
variable is expected; the remediation message reflects that.
"""

import logging

from core.config import AppConfig, ConfigurationError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

MISSING_CREDENTIALS_PRODUCTION = (
    "Google Sheets service account credentials not found. In production, you must set "
    "GOOGLE_SHEETS_CREDENTIALS_JSON environment variable. Copy the entire contents of your "
    "service account JSON file and set it as an environment variable."
)
MISSING_CREDENTIALS_DEVELOPMENT = (
    "Google Sheets service account credentials not found. Check "
    "GOOGLE_SHEETS_SERVICE_ACCOUNT_KEY or GOOGLE_SHEETS_CREDENTIALS_JSON in .env"
)


def missing_credentials_message(config: AppConfig) -> str:
    """Remediation message for absent credentials, by deployment mode."""
    if config.is_production:
        return MISSING_CREDENTIALS_PRODUCTION
    return MISSING_CREDENTIALS_DEVELOPMENT


def load_sheets_credentials(config: AppConfig):
    """Build service account credentials for the Sheets API.

    Priority:
    1. GOOGLE_SHEETS_CREDENTIALS_JSON (parsed into config.sheets.credentials_json)
    2. GOOGLE_SHEETS_SERVICE_ACCOUNT_KEY file path

    Raises:
        ConfigurationError: when neither source is usable
    """
    from google.oauth2 import service_account

    sheets = config.sheets

    if sheets.credentials_json:
        try:
            creds = service_account.Credentials.from_service_account_info(
                sheets.credentials_json, scopes=SHEETS_SCOPES
            )
        except ValueError as e:
            raise ConfigurationError(
                f"GOOGLE_SHEETS_CREDENTIALS_JSON is not a valid service account: {e}"
            ) from e
        logger.debug("Sheets credentials loaded from GOOGLE_SHEETS_CREDENTIALS_JSON")
        return creds

    creds_path = sheets.resolve_credentials_path()
    if creds_path is None or not creds_path.exists():
        logger.error(f"Sheets credentials not found (file: {creds_path})")
        raise ConfigurationError(missing_credentials_message(config))

    try:
        creds = service_account.Credentials.from_service_account_file(
            str(creds_path), scopes=SHEETS_SCOPES
        )
    except ValueError as e:
        raise ConfigurationError(
            f"Service account file {creds_path} is not valid: {e}"
        ) from e
    logger.debug(f"Sheets credentials loaded from {creds_path}")
    return creds


def has_sheets_credentials(config: AppConfig) -> bool:
    """Check if Sheets credentials are configured (without loading them)."""
    if config.sheets.credentials_json:
        return True
    path = config.sheets.resolve_credentials_path()
    return path is not None and path.exists()
