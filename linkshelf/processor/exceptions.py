from linkshelf.processor.models import ProcessingStep


class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class IngestionError(ProcessorError):
    """Raised when a fatal pipeline step fails.

    Carries the failing step and the message that caused it.
    """

    def __init__(self, step: ProcessingStep, message: str, document_id: str | None = None) -> None:
        super().__init__(f"{step.value}: {message}")
        self.step = step
        self.message = message
        self.document_id = document_id


class DocumentServiceError(ProcessorError):
    """Raised when a service operation on a stored document fails."""
