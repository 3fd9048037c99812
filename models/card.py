"""Data models for trading card listing records."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class GenerationStatus(Enum):
    """Lifecycle of the generated title/description pair."""
    PENDING = "pending"
    COMPLETE = "complete"
    SWAPPED_AND_CORRECTED = "swapped-and-corrected"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class NormalizedFields:
    """Baseline card attributes from the extraction stage."""
    year: str = ""
    set: str = ""
    card_number: str = ""
    title: str = ""
    player_first_name: str = ""
    player_last_name: str = ""
    grading_company: str = ""
    grade: str = ""
    cert: str = ""
    caption: str = ""

    # python attribute -> upstream JSON key
    JSON_KEYS = {
        "year": "year",
        "set": "set",
        "card_number": "cardNumber",
        "title": "title",
        "player_first_name": "playerFirstName",
        "player_last_name": "playerLastName",
        "grading_company": "gradingCompany",
        "grade": "grade",
        "cert": "cert",
        "caption": "caption",
    }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NormalizedFields":
        data = data or {}
        return cls(**{attr: _text(data.get(key)) for attr, key in cls.JSON_KEYS.items()})

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for attr, key in self.JSON_KEYS.items()}


@dataclass
class CardRecord:
    """One card as produced by the upstream OCR+LLM pipeline.

    auto_title and auto_description are filled in asynchronously and may be
    None while generation is still running.
    """
    id: str
    normalized: NormalizedFields = field(default_factory=NormalizedFields)
    auto_title: Optional[str] = None
    auto_description: Optional[str] = None
    confidence_by_field: Dict[str, float] = field(default_factory=dict)
    generation_status: Optional[GenerationStatus] = None

    @property
    def has_generated_pair(self) -> bool:
        return bool(self.auto_title) and bool(self.auto_description)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CardRecord":
        """Create from the upstream JSON shape (camelCase keys)."""
        status = data.get("generationStatus")
        return cls(
            id=_text(data.get("id")),
            normalized=NormalizedFields.from_dict(data.get("normalized")),
            auto_title=data.get("autoTitle"),
            auto_description=data.get("autoDescription"),
            confidence_by_field={
                k: float(v) for k, v in (data.get("confidenceByField") or {}).items()
            },
            generation_status=GenerationStatus(status) if status else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "normalized": self.normalized.to_dict(),
            "autoTitle": self.auto_title,
            "autoDescription": self.auto_description,
            "confidenceByField": dict(self.confidence_by_field),
        }
        if self.generation_status is not None:
            data["generationStatus"] = self.generation_status.value
        return data
