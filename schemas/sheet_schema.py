"""
Google Sheets Schema - Card Listing Export

Two header layouts exist in the wild for the card export sheet:

    STANDARD (11 columns, A-K):
        Year | Set | Card Number | Listing Title | Player First Name |
        Player Last Name | Grading Company | Grade | Cert | Listing Caption |
        Auto Description

    LEGACY (12 columns, A-L): same, with "Auto Title" in K and
        "Auto Description" moved to L.

A sheet is owned externally and may have been created under either layout,
so every export classifies the sheet's current header row and writes the
long-form description into the column that sheet already uses for it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

AUTO_TITLE = "Auto Title"
AUTO_DESCRIPTION = "Auto Description"

STANDARD_HEADERS: List[str] = [
    "Year",
    "Set",
    "Card Number",
    "Listing Title",
    "Player First Name",
    "Player Last Name",
    "Grading Company",
    "Grade",
    "Cert",
    "Listing Caption",
    AUTO_DESCRIPTION,
]

LEGACY_HEADERS: List[str] = STANDARD_HEADERS[:10] + [AUTO_TITLE, AUTO_DESCRIPTION]

LISTING_TITLE_INDEX = 3
STANDARD_DESCRIPTION_INDEX = 10
LEGACY_DESCRIPTION_INDEX = 11


class SheetSchema(Enum):
    """Header layout found in the destination sheet."""
    STANDARD_11 = "standard_11"   # 11 columns, description in K
    LEGACY_12 = "legacy_12"       # 12 columns, Auto Title in K, description in L
    DRIFTED = "drifted"           # header present but matches neither layout
    ABSENT = "absent"             # no header row yet


@dataclass(frozen=True)
class SchemaClassification:
    """Result of classifying a header row."""
    schema: SheetSchema
    description_index: int
    needs_header_write: bool

    @property
    def column_count(self) -> int:
        return self.description_index + 1

    @property
    def headers(self) -> List[str]:
        return headers_for(self.description_index)

    @property
    def last_column(self) -> str:
        return column_index_to_letter(self.description_index)


def classify_header(header_row: Optional[Sequence[str]]) -> SchemaClassification:
    """Classify an existing header row. First matching rule wins.

    | header                                          | schema      | idx | rewrite |
    |-------------------------------------------------|-------------|-----|---------|
    | missing / empty                                 | ABSENT      | 10  | yes     |
    | 12 cols, L=Auto Description, K=Auto Title       | LEGACY_12   | 11  | no      |
    | 12 cols, L=Auto Description, K=Auto Description | LEGACY_12   | 11  | yes     |
    | 12 cols, L=Auto Description, K=anything else    | DRIFTED     | 11  | yes     |
    | 11 cols, K=Auto Description                     | STANDARD_11 | 10  | no      |
    | anything else                                   | DRIFTED     | 11 if >11 cols else 10 | yes |
    """
    h = list(header_row or [])

    if not h:
        return SchemaClassification(SheetSchema.ABSENT, STANDARD_DESCRIPTION_INDEX, True)

    if len(h) == 12 and h[11] == AUTO_DESCRIPTION:
        if h[10] in (AUTO_TITLE, AUTO_DESCRIPTION):
            # Duplicate "Auto Description" in K is a broken legacy header
            return SchemaClassification(
                SheetSchema.LEGACY_12, LEGACY_DESCRIPTION_INDEX, h[10] == AUTO_DESCRIPTION
            )
        return SchemaClassification(SheetSchema.DRIFTED, LEGACY_DESCRIPTION_INDEX, True)

    if len(h) == 11 and h[10] == AUTO_DESCRIPTION:
        return SchemaClassification(SheetSchema.STANDARD_11, STANDARD_DESCRIPTION_INDEX, False)

    index = LEGACY_DESCRIPTION_INDEX if len(h) > 11 else STANDARD_DESCRIPTION_INDEX
    return SchemaClassification(SheetSchema.DRIFTED, index, True)


def headers_for(description_index: int) -> List[str]:
    """Header list matching a description column index."""
    if description_index == LEGACY_DESCRIPTION_INDEX:
        return list(LEGACY_HEADERS)
    if description_index == STANDARD_DESCRIPTION_INDEX:
        return list(STANDARD_HEADERS)
    raise ValueError(f"Unsupported description column index: {description_index}")


def column_index_to_letter(index: int) -> str:
    """Convert 0-based column index to Excel-style letter (A, B, ..., Z, AA, AB, ...)."""
    result = ""
    while index >= 0:
        result = chr(index % 26 + ord('A')) + result
        index = index // 26 - 1
    return result


def quote_sheet_name(sheet_name: str) -> str:
    """Quote a tab name for A1 notation; embedded quotes are doubled."""
    return "'" + sheet_name.replace("'", "''") + "'"


def a1_range(sheet_name: str, range_spec: str) -> str:
    """Full A1 range for a tab, e.g. 'Cards'!A1:K1."""
    return f"{quote_sheet_name(sheet_name)}!{range_spec}"


def row_range(sheet_name: str, row: int, column_count: int) -> str:
    """Exact range covering `column_count` cells of one row starting at A."""
    last_col = column_index_to_letter(column_count - 1)
    return a1_range(sheet_name, f"A{row}:{last_col}{row}")
