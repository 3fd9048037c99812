"""Services for the card listing export."""

from services.card_store import CardRecordStore, InMemoryCardStore, SqliteCardStore
from services.errors import (
    BadRequestError,
    CardNotFoundError,
    ExportError,
    ExternalServiceError,
    NotFoundError,
    SpreadsheetIdMissingError,
    SpreadsheetNotFoundError,
    ValidationError,
)
from services.field_integrity import Defect, FieldIntegrityValidator, ValidatedCard
from services.row_builder import RowBuilder
from services.csv_exporter import CsvExporter
from services.sheets_exporter import SheetExportResult, SheetsExporter, create_sheets_service
from services.card_export import CardExportService, CsvExport

__all__ = [
    # Storage
    "CardRecordStore",
    "InMemoryCardStore",
    "SqliteCardStore",
    # Errors
    "ExportError",
    "BadRequestError",
    "SpreadsheetIdMissingError",
    "NotFoundError",
    "CardNotFoundError",
    "SpreadsheetNotFoundError",
    "ValidationError",
    "ExternalServiceError",
    # Integrity
    "Defect",
    "FieldIntegrityValidator",
    "ValidatedCard",
    # Export
    "RowBuilder",
    "CsvExporter",
    "SheetsExporter",
    "SheetExportResult",
    "create_sheets_service",
    "CardExportService",
    "CsvExport",
]
