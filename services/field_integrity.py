"""
Field integrity checks for generated listing text.

The upstream generator occasionally hands back a card whose short title and
long description are transposed, or whose title has the description glued
onto it. Export must never write such a pair, so every export runs the card
through FieldIntegrityValidator first:

1. Swap defect: autoTitle > 200 chars while autoDescription < 100 chars.
   The two fields are swapped and the repaired card is written back to the
   store (repair-on-read). The card is tagged SWAPPED_AND_CORRECTED as a
   record of the repair; the threshold check still runs on every pass.
2. Working listing title: non-blank autoTitle, else normalized.title.
3. Embedded description: title > 150 chars containing the first 50 chars of
   the description. The real title is cut at the first ", Firstname Lastname"
   boundary within 150 chars, else truncated to 100 chars.
4. Identity: title == description. Falls back to normalized.title, then
   "Untitled".
5. Length guard: a title still equal to or longer than a non-empty
   description goes through the same fallbacks, then is cut below the
   description's length.

None of this raises. Repairs are logged and reported on the result.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from core.logging_config import preview
from models.card import CardRecord, GenerationStatus
from services.card_store import CardRecordStore

logger = logging.getLogger(__name__)

SWAP_TITLE_MIN_LENGTH = 200
SWAP_DESCRIPTION_MAX_LENGTH = 100
EMBEDDED_TITLE_MIN_LENGTH = 150
DESCRIPTION_PROBE_LENGTH = 50
TRUNCATED_TITLE_LENGTH = 100
UNTITLED = "Untitled"

# Title text up to a ", Firstname Lastname" boundary within the first 150 chars
TITLE_BOUNDARY_RE = re.compile(r"^(.{0,150}?)(?:\s*,\s*[A-Z][a-z]+\s+[A-Z][a-z]+)")


class Defect(Enum):
    """Corruption patterns the validator repairs."""
    SWAPPED_FIELDS = "swapped_fields"
    EMBEDDED_DESCRIPTION = "embedded_description"
    IDENTICAL_FIELDS = "identical_fields"
    TITLE_LONGER_THAN_DESCRIPTION = "title_longer_than_description"


@dataclass
class ValidatedCard:
    """A card that passed integrity validation, plus the title to export."""
    card: CardRecord
    listing_title: str
    repairs: List[Defect] = field(default_factory=list)
    persisted: bool = False

    @property
    def auto_description(self) -> str:
        return self.card.auto_description or ""

    @property
    def was_repaired(self) -> bool:
        return bool(self.repairs)


class FieldIntegrityValidator:
    """Detects and repairs transposed or malformed title/description pairs."""

    def __init__(self, store: Optional[CardRecordStore] = None):
        self.store = store

    def validate(self, card: CardRecord) -> ValidatedCard:
        repairs: List[Defect] = []

        original = card
        card = self._repair_swap(card)
        persisted = False
        if card is not original:
            repairs.append(Defect.SWAPPED_FIELDS)
            persisted = self._persist_repair(original, card)

        description = card.auto_description or ""
        listing_title = self._working_title(card)

        logger.debug(
            f"Card {card.id}: autoTitle ({len(card.auto_title or '')} chars) "
            f"\"{preview(card.auto_title)}\", autoDescription ({len(description)} chars) "
            f"\"{preview(description)}\""
        )

        if listing_title and description:
            if self._has_embedded_description(listing_title, description):
                listing_title = self._extract_title(listing_title)
                repairs.append(Defect.EMBEDDED_DESCRIPTION)

            if listing_title == description:
                logger.error(
                    f"Card {card.id}: listing title matches autoDescription, "
                    f"using normalized title as fallback"
                )
                listing_title = card.normalized.title or UNTITLED
                repairs.append(Defect.IDENTICAL_FIELDS)

            if listing_title == description or len(listing_title) > len(description):
                listing_title = self._shorten_below(card, listing_title, description)
                repairs.append(Defect.TITLE_LONGER_THAN_DESCRIPTION)

        if not description.strip():
            logger.warning(f"Card {card.id}: autoDescription is empty")

        logger.info(
            f"Card {card.id}: listing title ({len(listing_title)} chars) \"{preview(listing_title)}\""
            + (f", repairs={[d.value for d in repairs]}" if repairs else "")
        )

        return ValidatedCard(card=card, listing_title=listing_title, repairs=repairs, persisted=persisted)

    # =========================================================================
    # Swap defect
    # =========================================================================

    @staticmethod
    def _repair_swap(card: CardRecord) -> CardRecord:
        if not card.has_generated_pair:
            return card

        title_len = len(card.auto_title)
        desc_len = len(card.auto_description)
        if title_len > SWAP_TITLE_MIN_LENGTH and desc_len < SWAP_DESCRIPTION_MAX_LENGTH:
            logger.error(
                f"Card {card.id}: autoTitle ({title_len} chars) is longer than "
                f"autoDescription ({desc_len} chars), fields are swapped; swapping back"
            )
            repaired = replace(
                card,
                auto_title=card.auto_description,
                auto_description=card.auto_title,
                generation_status=GenerationStatus.SWAPPED_AND_CORRECTED,
            )
            return repaired

        return card

    def _persist_repair(self, original: CardRecord, repaired: CardRecord) -> bool:
        if self.store is None:
            return False
        if self.store.compare_and_swap(repaired.id, original, repaired):
            logger.info(f"Card {repaired.id}: swapped fields saved")
            return True
        # Another writer got there first; its value wins
        logger.info(f"Card {repaired.id}: stored record changed concurrently, repair not saved")
        return False

    # =========================================================================
    # Listing title
    # =========================================================================

    @staticmethod
    def _working_title(card: CardRecord) -> str:
        if card.auto_title and card.auto_title.strip():
            return card.auto_title
        return card.normalized.title or ""

    @staticmethod
    def _has_embedded_description(title: str, description: str) -> bool:
        return (
            len(title) > EMBEDDED_TITLE_MIN_LENGTH
            and description[:DESCRIPTION_PROBE_LENGTH] in title
        )

    @staticmethod
    def _extract_title(title: str) -> str:
        logger.warning("Listing title appears to contain the description, extracting title")
        match = TITLE_BOUNDARY_RE.match(title)
        if match and match.group(1):
            extracted = match.group(1).strip()
            logger.info(f"Extracted title: \"{preview(extracted)}\"")
            return extracted
        truncated = title[:TRUNCATED_TITLE_LENGTH].strip()
        logger.warning(f"No title boundary found, using truncated title: \"{truncated}\"")
        return truncated

    @staticmethod
    def _shorten_below(card: CardRecord, title: str, description: str) -> str:
        logger.error(
            f"Card {card.id}: listing title ({len(title)} chars) is not shorter than "
            f"autoDescription ({len(description)} chars)"
        )
        for candidate in (card.normalized.title, UNTITLED):
            if candidate and candidate != description and len(candidate) <= len(description):
                return candidate
        return title[:max(len(description) - 1, 0)].strip()
