import re
from datetime import datetime, timezone

from linkshelf.classification.ensemble import ClassificationEnsemble
from linkshelf.classification.merger import CategoryCatalogUpdater
from linkshelf.database.models import Document, DocumentStatus
from linkshelf.database.repositories.document_repository import DocumentRepository
from linkshelf.logging.logger import Log
from linkshelf.notes.base import BaseNoteExporter
from linkshelf.pdf.base import BasePdfExtractor
from linkshelf.processor.models import ProcessingStep
from linkshelf.processor.pipeline import (
    FatalFailure,
    PipelineContext,
    PipelineStep,
    SoftFailure,
    StepOutcome,
    StepSuccess,
)
from linkshelf.rendering.base import BaseRenderer
from linkshelf.rendering.exceptions import RenderError
from linkshelf.web.exceptions import MetadataExtractionError
from linkshelf.web.metadata_extractor import HtmlMetadataExtractor
from linkshelf.web.models import PageMetadata
from linkshelf.web.url_verifier import UrlVerifier

PDF_CONTENT_TYPE = "application/pdf"
MAX_ATTACHMENT_NAME_LENGTH = 100

FALLBACK_TITLE = "Web Page Snapshot"
FALLBACK_DESCRIPTION = "PDF snapshot of web page"


def attachment_file_name(title: str | None) -> str:
    """File-system safe ``<title>.pdf`` for the stored attachment."""
    name = re.sub(r'[\\/:*?"<>|]', "_", title or "")
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"_+", "_", name)
    name = name[:MAX_ATTACHMENT_NAME_LENGTH].rstrip("_")
    return f"{name or 'document'}.pdf"


class VerifyUrlStep(PipelineStep):
    step = ProcessingStep.URL_VERIFICATION
    failure_prefix = "URL verification failed"

    def __init__(self, verifier: UrlVerifier) -> None:
        self._verifier = verifier

    def run(self, context: PipelineContext) -> StepOutcome:
        result = self._verifier.verify(context.url)
        if not result.accessible:
            return FatalFailure(result.message)
        return StepSuccess(result.message, {"status_code": result.status_code})


class RenderPdfStep(PipelineStep):
    step = ProcessingStep.PDF_CONVERSION
    failure_prefix = "PDF conversion failed"

    def __init__(self, renderer: BaseRenderer) -> None:
        self._renderer = renderer

    def run(self, context: PipelineContext) -> StepOutcome:
        try:
            context.pdf_bytes = self._renderer.render(context.url, context.options.render)
        except RenderError as exc:
            return FatalFailure(str(exc), exc)
        size = len(context.pdf_bytes)
        Log.info(f"Rendered {context.url} to PDF ({size} bytes)")
        return StepSuccess("PDF conversion successful", {"size_bytes": size})


class StoreDocumentStep(PipelineStep):
    step = ProcessingStep.STORAGE
    failure_prefix = "Storage failed"

    def __init__(
        self,
        documents: DocumentRepository,
        metadata_extractor: HtmlMetadataExtractor,
    ) -> None:
        self._documents = documents
        self._metadata_extractor = metadata_extractor

    def run(self, context: PipelineContext) -> StepOutcome:
        metadata = self._extract_metadata(context.url)
        document = Document(
            id=context.document_id,
            url=context.url,
            canonical_url=metadata.canonical_url,
            title=metadata.title,
            description=metadata.description,
            meta_tags=dict(metadata.meta_tags),
            fetched_at=datetime.now(timezone.utc),
            size_bytes=len(context.pdf_bytes),
            pdf_attachment_name=attachment_file_name(metadata.title),
            status=DocumentStatus.STORED,
        )
        self._documents.save(document)
        context.document = document
        self._documents.save_attachment(
            document.id, document.pdf_attachment_name, context.pdf_bytes, PDF_CONTENT_TYPE
        )
        Log.info(f"Stored document {document.id} with attachment {document.pdf_attachment_name}")
        return StepSuccess(
            "Document stored successfully",
            {"title": document.title, "attachment": document.pdf_attachment_name},
        )

    def _extract_metadata(self, url: str) -> PageMetadata:
        try:
            return self._metadata_extractor.extract(url)
        except MetadataExtractionError as exc:
            Log.warning(f"Failed to extract metadata from {url}, using defaults: {exc}")
        except Exception:
            Log.exception(f"Unexpected error extracting metadata from {url}, using defaults")
        return PageMetadata(
            title=FALLBACK_TITLE,
            description=FALLBACK_DESCRIPTION,
            canonical_url=url,
        )


class AnalyzeContentStep(PipelineStep):
    step = ProcessingStep.CONTENT_ANALYSIS
    fatal = False
    failure_prefix = "Content analysis failed"

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def run(self, context: PipelineContext) -> StepOutcome:
        pages = self._pdf_extractor.page_count(context.pdf_bytes)
        return StepSuccess("Content analysis completed", {"page_count": pages})


class CategorizeStep(PipelineStep):
    step = ProcessingStep.CATEGORIZATION
    fatal = False
    failure_prefix = "Categorization failed"

    def __init__(
        self,
        documents: DocumentRepository,
        ensemble: ClassificationEnsemble,
        catalog_updater: CategoryCatalogUpdater,
    ) -> None:
        self._documents = documents
        self._ensemble = ensemble
        self._catalog_updater = catalog_updater

    def run(self, context: PipelineContext) -> StepOutcome:
        document = self._documents.get(context.document_id)
        document.categories = self._ensemble.classify(document)
        self._documents.save(document)
        context.document = document
        names = [c.name for c in document.categories]
        self._catalog_updater.ensure(names)
        return StepSuccess(
            f"Document categorized into {len(names)} categories",
            {"categories": names},
        )


class ExportNoteStep(PipelineStep):
    step = ProcessingStep.NOTE_EXPORT
    fatal = False
    failure_prefix = "Note export failed"

    def __init__(self, exporter: BaseNoteExporter) -> None:
        self._exporter = exporter

    def applies(self, context: PipelineContext) -> bool:
        return context.options.create_note

    def run(self, context: PipelineContext) -> StepOutcome:
        if context.document is None:
            return SoftFailure("No stored document to export")
        options = context.options
        file_name = self._exporter.export(context.document, options.note_text, options.note_meta_tag)
        if file_name is None:
            return SoftFailure("Note export is disabled")
        context.note_file_name = file_name
        return StepSuccess(f"Note created: {file_name}", {"note": file_name})
