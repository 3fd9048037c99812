"""Single-card CSV export (11 fixed columns)."""
import csv
import io
import logging
from typing import Optional
from urllib.parse import quote

from schemas.sheet_schema import STANDARD_DESCRIPTION_INDEX, STANDARD_HEADERS
from services.field_integrity import ValidatedCard
from services.row_builder import RowBuilder

logger = logging.getLogger(__name__)


class CsvExporter:
    """Serializes one validated card into a header line plus one data line.

    CSV has no prior state to reconcile, so the layout is always the
    11-column standard one.
    """

    def __init__(self, row_builder: Optional[RowBuilder] = None):
        self.row_builder = row_builder or RowBuilder()

    def to_csv(self, validated: ValidatedCard) -> bytes:
        row = self.row_builder.build(validated, STANDARD_DESCRIPTION_INDEX)

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(STANDARD_HEADERS)
        writer.writerow(row)

        logger.info(f"CSV built for card {validated.card.id} ({len(row)} columns)")
        return output.getvalue().encode("utf-8")

    @staticmethod
    def filename_for(card_id: str) -> str:
        return f"card-{card_id}.csv"

    @staticmethod
    def content_disposition(filename: str) -> str:
        """Attachment header value safe for any filename.

        Non-ASCII names get an ASCII fallback plus an RFC 5987 filename*.
        """
        fallback = "".join(
            c if 32 <= ord(c) < 127 and c not in '"\\' else "_" for c in filename
        )
        if fallback == filename:
            return f'attachment; filename="{filename}"'
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
