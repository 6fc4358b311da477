import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DocumentStatus(str, Enum):
    PROCESSING = "PROCESSING"
    STORED = "STORED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class CategoryAssignment:
    """A (category, confidence, classifier) triple attached to a document."""

    name: str
    confidence: float
    classifier: str

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "classifier": self.classifier,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, object]) -> "CategoryAssignment":
        return cls(
            name=str(raw["name"]),
            confidence=float(raw["confidence"]),  # type: ignore[arg-type]
            classifier=str(raw.get("classifier", "")),
        )


@dataclass
class Document:
    """A captured web page and everything known about it."""

    url: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    canonical_url: str | None = None
    title: str | None = None
    description: str | None = None
    meta_tags: dict[str, str] = field(default_factory=dict)
    fetched_at: datetime | None = None
    size_bytes: int | None = None
    pdf_attachment_name: str | None = None
    categories: list[CategoryAssignment] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    status: DocumentStatus = DocumentStatus.PROCESSING
    revision: int = 0


@dataclass
class Category:
    """Represents a row from the categories table."""

    name: str
    description: str
    document_count: int = 0
    created_at: datetime | None = None
