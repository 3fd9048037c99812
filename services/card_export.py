"""
Card export pipeline.

    store.get -> FieldIntegrityValidator -> RowBuilder -> CsvExporter | SheetsExporter

Each call is one synchronous pass with no retries. Failures raise
services.errors.ExportError subclasses (or ConfigurationError for missing
credentials); field corruption in the card is repaired, not raised.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from core.config import DEFAULT_SHEET_NAME, AppConfig, get_config
from core.logging_config import LogContext
from models.card import CardRecord
from services.card_store import CardRecordStore
from services.csv_exporter import CsvExporter
from services.errors import BadRequestError, CardNotFoundError, SpreadsheetIdMissingError
from services.field_integrity import FieldIntegrityValidator, ValidatedCard
from services.sheets_exporter import SheetExportResult, SheetsExporter, create_sheets_service

logger = logging.getLogger(__name__)


@dataclass
class CsvExport:
    filename: str
    content: bytes


class CardExportService:
    """Runs the export pipeline for a single card."""

    def __init__(
        self,
        store: CardRecordStore,
        config: Optional[AppConfig] = None,
        validator: Optional[FieldIntegrityValidator] = None,
        service_factory: Callable[[AppConfig], object] = create_sheets_service,
    ):
        self.store = store
        self.config = config or get_config()
        self.validator = validator or FieldIntegrityValidator(store)
        self.service_factory = service_factory
        self.csv_exporter = CsvExporter()

    def load_validated(self, card_id: Optional[str]) -> ValidatedCard:
        """Fetch a card and run it through integrity validation (repair-on-read)."""
        if not card_id:
            raise BadRequestError("Card ID is required")

        card: Optional[CardRecord] = self.store.get(card_id)
        if card is None:
            logger.warning(f"Card {card_id} not found")
            raise CardNotFoundError(card_id)

        return self.validator.validate(card)

    def export_csv(self, card_id: Optional[str]) -> CsvExport:
        with LogContext(card_id=card_id):
            validated = self.load_validated(card_id)
            content = self.csv_exporter.to_csv(validated)
            return CsvExport(filename=CsvExporter.filename_for(card_id), content=content)

    def resolve_target(self, spreadsheet_id: Optional[str], sheet_name: Optional[str]):
        """Pick the spreadsheet and tab: configured values first, then the request."""
        sheets = self.config.sheets
        resolved_id = sheets.spreadsheet_id or spreadsheet_id
        if not resolved_id:
            raise SpreadsheetIdMissingError()
        resolved_name = sheets.sheet_name or sheet_name or DEFAULT_SHEET_NAME
        return resolved_id, resolved_name

    def export_sheets(
        self,
        card_id: Optional[str],
        spreadsheet_id: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> SheetExportResult:
        with LogContext(card_id=card_id):
            validated = self.load_validated(card_id)
            target_id, target_name = self.resolve_target(spreadsheet_id, sheet_name)

            with LogContext(spreadsheet_id=target_id):
                exporter = SheetsExporter(self.service_factory(self.config))
                result = exporter.export(validated, target_id, target_name)
                logger.info(
                    f"Card {card_id} exported to '{result.sheet_name}' row {result.row} "
                    f"({result.schema.value})"
                )
                return result
