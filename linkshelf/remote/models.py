from dataclasses import dataclass, field


@dataclass(frozen=True)
class CategoryPrediction:
    """One category proposed by the remote model."""

    name: str
    confidence: float
    reasoning: str = ""


@dataclass(frozen=True)
class RemoteClassification:
    """Parsed ``result`` of a classify_document tool call."""

    categories: list[CategoryPrediction] = field(default_factory=list)
    model: str | None = None
    confidence: float | None = None
