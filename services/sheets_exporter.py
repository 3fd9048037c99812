"""
Google Sheets Exporter - one card per call

Writes a validated card as one row of the destination spreadsheet tab:

    VerifySpreadsheet -> EnsureSheetTab -> ReadHeaderAndData -> ClassifySchema
        -> BuildRow -> MaybeWriteHeader -> WriteRow

The row is built (and validated) before anything is written, so a row that
fails validation leaves the sheet untouched. The data row goes to an exact
range computed from the current row count rather than through the append
API, which keeps column alignment even when the sheet has trailing empty
rows or extra columns.

There are no retries here; the caller decides whether to try again.

Known limitation: next_row comes from a read that is not atomic with the
write, so two concurrent exports to the same tab can pick the same row and
the later write wins.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from core.config import AppConfig
from core.logging_config import preview
from core.secrets import load_sheets_credentials
from schemas.sheet_schema import (
    LISTING_TITLE_INDEX,
    SchemaClassification,
    SheetSchema,
    a1_range,
    classify_header,
    row_range,
)
from services.errors import ExternalServiceError, SpreadsheetNotFoundError
from services.field_integrity import ValidatedCard
from services.row_builder import RowBuilder

logger = logging.getLogger(__name__)

SHEETS_URL_BASE = "https://docs.google.com/spreadsheets/d"

# Used range read on every export; both layouts fit well inside it
DATA_RANGE = "A:Z"


def sheet_url(spreadsheet_id: str) -> str:
    return f"{SHEETS_URL_BASE}/{spreadsheet_id}"


def _http_status(exc: HttpError) -> int:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "resp", None), "status", 0)
    try:
        return int(status)
    except (TypeError, ValueError):
        return 0


def create_sheets_service(config: AppConfig):
    """Build a Sheets v4 API service from the configured service account."""
    from googleapiclient.discovery import build

    credentials = load_sheets_credentials(config)
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


@dataclass
class SheetExportResult:
    """Outcome of one Sheets export."""
    spreadsheet_id: str
    sheet_name: str
    sheet_url: str
    row: int
    schema: SheetSchema
    header_written: bool = False


class SheetsExporter:
    """Exports validated cards to a Google Sheets tab."""

    def __init__(self, service, row_builder: Optional[RowBuilder] = None):
        """
        Args:
            service: Sheets v4 API resource (googleapiclient.discovery.build result)
            row_builder: RowBuilder to use, a default one if omitted
        """
        self.service = service
        self.row_builder = row_builder or RowBuilder()

    def export(self, validated: ValidatedCard, spreadsheet_id: str, sheet_name: str) -> SheetExportResult:
        """Write one card to the next free row of `sheet_name`.

        Raises:
            SpreadsheetNotFoundError: the spreadsheet lookup failed
            ValidationError: the built row violates a row invariant
            ExternalServiceError: any other Sheets API call failed
        """
        metadata = self._verify_spreadsheet(spreadsheet_id)
        self._ensure_sheet_tab(spreadsheet_id, sheet_name, metadata)

        values = self._read_values(spreadsheet_id, sheet_name)
        next_row = len(values) + 1

        classification = classify_header(values[0] if values else None)
        logger.info(
            f"Sheet '{sheet_name}' classified as {classification.schema.value} "
            f"(description column {classification.last_column}, "
            f"header rewrite={classification.needs_header_write}, rows={len(values)})"
        )

        row = self.row_builder.build(validated, classification.description_index)

        header_written = False
        if next_row == 1 or classification.needs_header_write:
            self._write_header(spreadsheet_id, sheet_name, classification, creating=next_row == 1)
            header_written = True
            if next_row == 1:
                next_row = 2

        self._write_row(spreadsheet_id, sheet_name, next_row, row, classification)

        return SheetExportResult(
            spreadsheet_id=spreadsheet_id,
            sheet_name=sheet_name,
            sheet_url=sheet_url(spreadsheet_id),
            row=next_row,
            schema=classification.schema,
            header_written=header_written,
        )

    # =========================================================================
    # Steps
    # =========================================================================

    def _verify_spreadsheet(self, spreadsheet_id: str) -> Dict[str, Any]:
        try:
            return self.service.spreadsheets().get(spreadsheetId=spreadsheet_id).execute()
        except HttpError as e:
            logger.error(f"Spreadsheet lookup failed ({_http_status(e)}): {e}")
            raise SpreadsheetNotFoundError(spreadsheet_id) from e

    def _ensure_sheet_tab(self, spreadsheet_id: str, sheet_name: str, metadata: Dict[str, Any]) -> bool:
        """Add the tab when missing. Returns True if it was created."""
        exists = any(
            sheet.get("properties", {}).get("title") == sheet_name
            for sheet in metadata.get("sheets", [])
        )
        if exists:
            return False

        logger.info(f"Creating sheet tab: {sheet_name}")
        body = {"requests": [{"addSheet": {"properties": {"title": sheet_name}}}]}
        self._call(
            "add sheet tab",
            self.service.spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id, body=body),
        )
        return True

    def _read_values(self, spreadsheet_id: str, sheet_name: str) -> List[List[str]]:
        result = self._call(
            "read sheet data",
            self.service.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id,
                range=a1_range(sheet_name, DATA_RANGE),
            ),
        )
        return result.get("values", [])

    def _write_header(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        classification: SchemaClassification,
        creating: bool,
    ) -> None:
        header_range = row_range(sheet_name, 1, classification.column_count)
        logger.info(
            f"{'Creating' if creating else 'Updating'} header row with range {header_range}"
        )
        self._update(spreadsheet_id, header_range, classification.headers, "write header")

    def _write_row(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        row_number: int,
        row: List[str],
        classification: SchemaClassification,
    ) -> None:
        target = row_range(sheet_name, row_number, len(row))
        desc_index = classification.description_index
        logger.info(
            f"Writing row {row_number} ({len(row)} columns) to {target}: "
            f"Listing Title=\"{preview(row[LISTING_TITLE_INDEX], 50)}\", "
            f"Auto Description[{classification.last_column}]=\"{preview(row[desc_index], 50)}\""
        )
        self._update(spreadsheet_id, target, row, "write row")

    # =========================================================================
    # API helpers
    # =========================================================================

    def _update(self, spreadsheet_id: str, range_name: str, values: List[str], step: str) -> None:
        self._call(
            step,
            self.service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueInputOption="RAW",
                body={"values": [values]},
            ),
        )

    @staticmethod
    def _call(step: str, request) -> Dict[str, Any]:
        try:
            return request.execute()
        except HttpError as e:
            status = _http_status(e)
            logger.error(f"Sheets API call failed during {step} ({status}): {e}")
            raise ExternalServiceError(f"Google Sheets API error during {step}: {e}", status) from e
