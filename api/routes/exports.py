"""
Export API Routes

Export a single card to:
- CSV download (POST /export/csv)
- Google Sheets row (POST /export/sheets)

Errors answer with {"error": ...}. Internal failures are reported
generically; the Sheets route adds "details" outside production.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from api.deps import get_app_config, get_export_service
from core.config import AppConfig, ConfigurationError
from services.card_export import CardExportService
from services.csv_exporter import CsvExporter
from services.errors import ExportError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/export", tags=["Export"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class CsvExportRequest(BaseModel):
    """Request to export a card as CSV."""
    model_config = ConfigDict(populate_by_name=True)

    card_id: Optional[str] = Field(None, alias="cardId")


class SheetsExportRequest(CsvExportRequest):
    """Request to export a card to Google Sheets."""
    spreadsheet_id: Optional[str] = Field(None, alias="spreadsheetId")
    sheet_name: Optional[str] = Field(None, alias="sheetName")


class SheetsExportResponse(BaseModel):
    """Response after a Sheets export."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    spreadsheet_id: str = Field(..., alias="spreadsheetId")
    sheet_name: str = Field(..., alias="sheetName")
    sheet_url: str = Field(..., alias="sheetUrl")
    row: int


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


# =============================================================================
# ROUTES
# =============================================================================

@router.post("/csv")
def export_csv(
    payload: Optional[CsvExportRequest] = None,
    service: CardExportService = Depends(get_export_service),
):
    """
    Export one card as a CSV download.

    Header line plus one data line, 11 fixed columns.
    """
    card_id = payload.card_id if payload else None

    try:
        export = service.export_csv(card_id)
        return Response(
            content=export.content,
            media_type="text/csv",
            headers={"Content-Disposition": CsvExporter.content_disposition(export.filename)},
        )
    except ExportError as e:
        if e.status_code < 500:
            return error_response(e.status_code, e.message)
        logger.error(f"CSV export error: {e}")
        return error_response(500, "CSV export failed")
    except Exception:
        logger.exception("CSV export error")
        return error_response(500, "CSV export failed")


@router.post("/sheets", response_model=SheetsExportResponse)
def export_sheets(
    payload: Optional[SheetsExportRequest] = None,
    service: CardExportService = Depends(get_export_service),
    config: AppConfig = Depends(get_app_config),
):
    """
    Export one card as a row of a Google Sheets tab.

    The spreadsheet comes from GOOGLE_SHEETS_SPREADSHEET_ID, else the request.
    The tab is created when missing and its header row is reconciled with
    the layout already in the sheet.
    """
    payload = payload or SheetsExportRequest()

    try:
        result = service.export_sheets(
            payload.card_id,
            spreadsheet_id=payload.spreadsheet_id,
            sheet_name=payload.sheet_name,
        )
    except ConfigurationError as e:
        logger.error(f"Sheets export configuration error: {e}")
        return error_response(500, str(e))
    except ExportError as e:
        if e.status_code < 500:
            return error_response(e.status_code, e.message)
        logger.error(f"Sheets export error: {e}")
        return error_response(
            500, "Google Sheets export failed",
            details=None if config.is_production else e.message,
        )
    except Exception as e:
        logger.exception("Sheets export error")
        return error_response(
            500, "Google Sheets export failed",
            details=None if config.is_production else str(e),
        )

    return SheetsExportResponse(
        message="Data exported to Google Sheets successfully",
        spreadsheet_id=result.spreadsheet_id,
        sheet_name=result.sheet_name,
        sheet_url=result.sheet_url,
        row=result.row,
    )
