from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from linkshelf.database.models import DocumentStatus
from linkshelf.rendering.models import RenderOptions


class ProcessingStep(str, Enum):
    URL_VERIFICATION = "URL_VERIFICATION"
    PDF_CONVERSION = "PDF_CONVERSION"
    STORAGE = "STORAGE"
    CONTENT_ANALYSIS = "CONTENT_ANALYSIS"
    CATEGORIZATION = "CATEGORIZATION"
    NOTE_EXPORT = "NOTE_EXPORT"
    COMPLETED = "COMPLETED"

    @property
    def description(self) -> str:
        return _STEP_DESCRIPTIONS[self]


_STEP_DESCRIPTIONS = {
    ProcessingStep.URL_VERIFICATION: "Verifying URL accessibility",
    ProcessingStep.PDF_CONVERSION: "Converting webpage to PDF",
    ProcessingStep.STORAGE: "Storing document and PDF",
    ProcessingStep.CONTENT_ANALYSIS: "Analyzing content",
    ProcessingStep.CATEGORIZATION: "Categorizing document",
    ProcessingStep.NOTE_EXPORT: "Exporting note",
    ProcessingStep.COMPLETED: "Processing completed",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StepResult:
    step: ProcessingStep
    success: bool
    message: str
    completed_at: datetime = field(default_factory=_utcnow)
    payload: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step.value,
            "description": self.step.description,
            "success": self.success,
            "message": self.message,
            "completed_at": self.completed_at.isoformat(),
            "payload": self.payload,
        }


@dataclass
class ProcessingStatus:
    """Progress of one ingestion.

    Only the thread running that ingestion mutates it; readers get it through
    the status tracker.
    """

    document_id: str
    current_step: ProcessingStep = ProcessingStep.URL_VERIFICATION
    steps: list[StepResult] = field(default_factory=list)
    completed: bool = False
    failed: bool = False
    error_message: str | None = None
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None

    @property
    def terminal(self) -> bool:
        return self.completed or self.failed

    def record(self, result: StepResult) -> None:
        self.steps.append(result)
        self.current_step = result.step

    def mark_completed(self, message: str = "Document processing completed successfully") -> None:
        self.record(StepResult(ProcessingStep.COMPLETED, True, message))
        self.completed = True
        self.completed_at = _utcnow()

    def mark_failed(self, error_message: str) -> None:
        self.failed = True
        self.error_message = error_message
        self.completed_at = _utcnow()

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "current_step": self.current_step.value,
            "steps": [s.to_dict() for s in self.steps],
            "completed": self.completed,
            "failed": self.failed,
            "error_message": self.error_message,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass
class IngestOptions:
    create_note: bool = False
    note_meta_tag: str = "data-note"
    note_text: str | None = None
    render: RenderOptions = field(default_factory=RenderOptions)


@dataclass(frozen=True)
class IngestResult:
    id: str
    status: DocumentStatus
    artifact_locator: str
