import uuid

from linkshelf.database.models import DocumentStatus
from linkshelf.logging.logger import Log
from linkshelf.processor.exceptions import IngestionError
from linkshelf.processor.models import IngestOptions, IngestResult, StepResult
from linkshelf.processor.pipeline import (
    FatalFailure,
    PipelineContext,
    PipelineStep,
    SoftFailure,
    StepOutcome,
)
from linkshelf.processor.status_tracker import StatusTracker


def artifact_locator(document_id: str) -> str:
    return f"/documents/{document_id}/pdf"


class IngestionPipeline:
    """Drives a URL through the ingestion steps.

    Pipeline: verify URL -> render PDF -> store -> analyze content ->
    categorize -> (export note) -> completed.

    Every executed step leaves exactly one StepResult on the status. A failed
    fatal step marks the status failed and raises IngestionError; a failed
    soft step is recorded and the pipeline continues.
    """

    def __init__(self, steps: list[PipelineStep], status_tracker: StatusTracker) -> None:
        self._steps = steps
        self._status_tracker = status_tracker

    @property
    def status_tracker(self) -> StatusTracker:
        return self._status_tracker

    def ingest(self, url: str, options: IngestOptions | None = None) -> IngestResult:
        """Run every step for ``url``.

        Raises:
            IngestionError: when URL verification, rendering or storage fails.
        """
        document_id = str(uuid.uuid4())
        Log.info(f"Starting ingestion of {url} as document {document_id}")
        status = self._status_tracker.create(document_id)
        context = PipelineContext(
            document_id=document_id,
            url=url,
            options=options or IngestOptions(),
            status=status,
        )

        for step in self._steps:
            if not step.applies(context):
                continue
            status.current_step = step.step
            Log.debug(f"Document {document_id}: {step.step.description}")
            outcome = self._run_step(step, context)

            if isinstance(outcome, FatalFailure):
                message = f"{step.failure_prefix}: {outcome.message}"
                status.record(StepResult(step.step, False, message))
                status.mark_failed(message)
                Log.error(f"Ingestion of {url} failed at {step.step.value}: {outcome.message}")
                raise IngestionError(step.step, outcome.message, document_id) from outcome.error
            if isinstance(outcome, SoftFailure):
                message = f"{step.failure_prefix}: {outcome.message}"
                status.record(StepResult(step.step, False, message))
                Log.warning(f"Document {document_id}: {message}")
            else:
                status.record(StepResult(step.step, True, outcome.message, payload=outcome.payload))

        status.mark_completed()
        Log.info(f"Document {document_id} processing completed")
        return IngestResult(
            id=document_id,
            status=DocumentStatus.STORED,
            artifact_locator=artifact_locator(document_id),
        )

    def _run_step(self, step: PipelineStep, context: PipelineContext) -> StepOutcome:
        try:
            outcome = step.run(context)
        except Exception as exc:
            Log.exception(f"Unexpected error in {step.step.value} for document {context.document_id}")
            if step.fatal:
                return FatalFailure(str(exc), exc)
            return SoftFailure(str(exc))
        if isinstance(outcome, FatalFailure) and not step.fatal:
            return SoftFailure(outcome.message)
        return outcome
