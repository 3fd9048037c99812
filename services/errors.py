"""Export error taxonomy.

Each error carries the HTTP status the API layer answers with. Field-level
corruption in a card is never an error; see services.field_integrity.
"""


class ExportError(Exception):
    """Base class for failures that abort an export call."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(ExportError):
    status_code = 400


class SpreadsheetIdMissingError(BadRequestError):
    """No spreadsheet id in config or request."""

    def __init__(self):
        super().__init__(
            "Google Sheets Spreadsheet ID is required. Set GOOGLE_SHEETS_SPREADSHEET_ID "
            "in .env or provide spreadsheetId in request."
        )


class NotFoundError(ExportError):
    status_code = 404


class CardNotFoundError(NotFoundError):
    def __init__(self, card_id: str):
        super().__init__("Card not found")
        self.card_id = card_id


class SpreadsheetNotFoundError(NotFoundError):
    def __init__(self, spreadsheet_id: str):
        super().__init__(
            f"Spreadsheet not found. Please check the spreadsheet ID: {spreadsheet_id}"
        )
        self.spreadsheet_id = spreadsheet_id


class ValidationError(ExportError):
    """A built row violates a shape or integrity invariant. Always a bug."""


class ExternalServiceError(ExportError):
    """The spreadsheet service rejected a call."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status
