"""Column-exact row construction for the card export.

The row is the last thing checked before an irreversible external write, so
RowBuilder re-checks the title/description invariants on the finished row and
raises instead of letting a malformed row through.
"""
import logging
from typing import Any, List

from core.logging_config import preview
from schemas.sheet_schema import (
    LEGACY_DESCRIPTION_INDEX,
    LISTING_TITLE_INDEX,
    STANDARD_DESCRIPTION_INDEX,
    column_index_to_letter,
)
from services.errors import ValidationError
from services.field_integrity import ValidatedCard

logger = logging.getLogger(__name__)


def _cell(value: Any) -> str:
    """Coerce a value to a cell string; missing values become empty cells."""
    return "" if value is None else str(value)


class RowBuilder:
    """Builds the ordered cell list for one exported card."""

    SUPPORTED_DESCRIPTION_INDEXES = (STANDARD_DESCRIPTION_INDEX, LEGACY_DESCRIPTION_INDEX)

    def build(self, validated: ValidatedCard, description_index: int) -> List[str]:
        """Build one row with the description at `description_index`.

        11 columns when the description sits in K (index 10), 12 when it sits
        in L (index 11); in the 12-column layout K carries the auto title.

        Raises:
            ValidationError: unsupported index or a violated row invariant
        """
        if description_index not in self.SUPPORTED_DESCRIPTION_INDEXES:
            raise ValidationError(f"Unsupported description column index: {description_index}")

        card = validated.card
        n = card.normalized
        listing_title = _cell(validated.listing_title)
        description = _cell(card.auto_description)

        row = [
            _cell(n.year),
            _cell(n.set),
            _cell(n.card_number),
            listing_title,
            _cell(n.player_first_name),
            _cell(n.player_last_name),
            _cell(n.grading_company),
            _cell(n.grade),
            _cell(n.cert),
            _cell(n.caption),
        ]
        if description_index == LEGACY_DESCRIPTION_INDEX:
            auto_title = card.auto_title if card.auto_title and card.auto_title.strip() else listing_title
            row.append(_cell(auto_title))
        row.append(description)

        self.check(row, description_index)
        return row

    @staticmethod
    def check(row: List[str], description_index: int) -> None:
        """Hard checks on a finished row. Raises ValidationError on the first failure."""
        expected_length = description_index + 1
        if len(row) != expected_length:
            logger.error(f"Row has {len(row)} elements, expected {expected_length}")
            raise ValidationError(
                f"Row data array has incorrect length: {len(row)} instead of {expected_length}"
            )

        title = row[LISTING_TITLE_INDEX]
        description = row[description_index]
        desc_col = column_index_to_letter(description_index)

        # Two empty cells carry no transposition
        if not title or not description:
            return

        if title == description:
            logger.error(
                f"Listing Title (D) equals Auto Description ({desc_col}): \"{preview(title)}\""
            )
            raise ValidationError("Listing Title and Auto Description cannot be identical")

        if len(title) > len(description):
            logger.error(
                f"Listing Title ({len(title)} chars) is longer than "
                f"Auto Description ({len(description)} chars)"
            )
            raise ValidationError(
                "Listing Title is longer than Auto Description - fields may be swapped"
            )

        logger.debug(
            f"Row validation passed: {len(row)} columns, Listing Title={len(title)} chars, "
            f"Auto Description={len(description)} chars in column {desc_col}"
        )
