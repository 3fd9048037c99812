"""Health check endpoints."""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_app_config, get_card_store
from core.config import AppConfig
from core.secrets import has_sheets_credentials
from services.card_store import CardRecordStore, InMemoryCardStore, SqliteCardStore

router = APIRouter()

# Version info - updated on build/deploy
APP_VERSION = "1.0.0"
BUILD_TIME = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    build_time: str
    environment: str
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
def health_check(
    config: AppConfig = Depends(get_app_config),
    store: CardRecordStore = Depends(get_card_store),
):
    """
    Health check endpoint.

    Reports:
    - Card store backend and size
    - Google Sheets configuration (spreadsheet id, credentials)
    """
    checks: Dict[str, Any] = {}

    if isinstance(store, SqliteCardStore):
        checks["card_store"] = {"status": "ok", "backend": "sqlite", "cards": store.count()}
    elif isinstance(store, InMemoryCardStore):
        checks["card_store"] = {"status": "ok", "backend": "memory", "cards": len(store)}
    else:
        checks["card_store"] = {"status": "ok", "backend": type(store).__name__}

    sheets_errors = config.sheets.validate()
    checks["google_sheets"] = {
        "status": "configured" if not sheets_errors else "not_configured",
        "spreadsheet_id_set": bool(config.sheets.spreadsheet_id),
        "credentials_found": has_sheets_credentials(config),
        "errors": sheets_errors,
    }

    return HealthResponse(
        status="ok",
        version=APP_VERSION,
        build_time=BUILD_TIME,
        environment=config.environment,
        checks=checks,
    )
