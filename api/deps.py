"""
FastAPI dependency providers.

Tests swap any of these through app.dependency_overrides.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends

from core.config import AppConfig, get_config
from services.card_export import CardExportService
from services.card_store import CardRecordStore, InMemoryCardStore, SqliteCardStore
from services.sheets_exporter import create_sheets_service

logger = logging.getLogger(__name__)

# Process-wide card store, created on first use
_card_store: Optional[CardRecordStore] = None


def get_app_config() -> AppConfig:
    return get_config()


def get_card_store(config: AppConfig = Depends(get_app_config)) -> CardRecordStore:
    """Get the shared card store (SQLite when CARD_STORE_PATH is set)."""
    global _card_store
    if _card_store is None:
        if config.card_store_path:
            logger.info(f"Using SQLite card store at {config.card_store_path}")
            _card_store = SqliteCardStore(config.card_store_path)
        else:
            _card_store = InMemoryCardStore()
    return _card_store


def reset_card_store() -> None:
    """Drop the shared card store (for testing)."""
    global _card_store
    _card_store = None


def get_sheets_service_factory() -> Callable[[AppConfig], object]:
    return create_sheets_service


def get_export_service(
    store: CardRecordStore = Depends(get_card_store),
    config: AppConfig = Depends(get_app_config),
    service_factory: Callable[[AppConfig], object] = Depends(get_sheets_service_factory),
) -> CardExportService:
    return CardExportService(store, config=config, service_factory=service_factory)
