from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from linkshelf.database.models import Document
from linkshelf.processor.models import IngestOptions, ProcessingStatus, ProcessingStep


@dataclass(slots=True)
class PipelineContext:
    document_id: str
    url: str
    options: IngestOptions
    status: ProcessingStatus
    pdf_bytes: bytes = b""
    document: Document | None = None
    note_file_name: str | None = None


@dataclass(frozen=True, slots=True)
class StepSuccess:
    message: str
    payload: dict[str, Any] | None = field(default=None)


@dataclass(frozen=True, slots=True)
class SoftFailure:
    message: str


@dataclass(frozen=True, slots=True)
class FatalFailure:
    message: str
    error: BaseException | None = None


StepOutcome = StepSuccess | SoftFailure | FatalFailure


class PipelineStep(ABC):
    """One stage of the ingestion pipeline.

    ``fatal`` steps abort the ingestion when they fail; the others are
    recorded as failed and the pipeline moves on.
    """

    step: ClassVar[ProcessingStep]
    fatal: ClassVar[bool] = True
    failure_prefix: ClassVar[str] = "Step failed"

    def applies(self, context: PipelineContext) -> bool:
        return True

    @abstractmethod
    def run(self, context: PipelineContext) -> StepOutcome:
        raise NotImplementedError
