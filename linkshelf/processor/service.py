from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from linkshelf.classification.ensemble import ClassificationEnsemble
from linkshelf.classification.exceptions import TrainingError
from linkshelf.classification.factory import ClassifierFactory
from linkshelf.classification.merger import CategoryCatalogUpdater
from linkshelf.classification.models import TrainingReport
from linkshelf.classification.rules import describe_category
from linkshelf.classification.text import DocumentTextSource
from linkshelf.config.settings import Settings
from linkshelf.database.exceptions import NotFoundError
from linkshelf.database.models import Category, Document
from linkshelf.database.repositories.category_repository import CategoryRepository
from linkshelf.database.repositories.document_repository import DocumentRepository
from linkshelf.logging.logger import Log
from linkshelf.notes.markdown_exporter import MarkdownNoteExporter
from linkshelf.pdf.factory import PdfExtractorFactory
from linkshelf.processor.exceptions import DocumentServiceError
from linkshelf.processor.models import IngestOptions, IngestResult, ProcessingStatus
from linkshelf.processor.processor import IngestionPipeline
from linkshelf.processor.status_tracker import StatusTracker
from linkshelf.processor.steps import (
    AnalyzeContentStep,
    CategorizeStep,
    ExportNoteStep,
    RenderPdfStep,
    StoreDocumentStep,
    VerifyUrlStep,
)
from linkshelf.rendering.models import RenderOptions
from linkshelf.rendering.playwright_renderer import PlaywrightRenderer
from linkshelf.web.metadata_extractor import HtmlMetadataExtractor
from linkshelf.web.url_verifier import UrlVerifier


class StatusQueryable(Protocol):
    def get_processing_status(self, document_id: str) -> ProcessingStatus | None: ...


class DocumentService:
    """Entry point for everything callers do with documents and classifiers."""

    def __init__(
        self,
        *,
        pipeline: IngestionPipeline,
        documents: DocumentRepository,
        categories: CategoryRepository,
        ensemble: ClassificationEnsemble,
        catalog_updater: CategoryCatalogUpdater,
        max_training_documents: int = 1000,
    ) -> None:
        self._pipeline = pipeline
        self._documents = documents
        self._categories = categories
        self._ensemble = ensemble
        self._catalog_updater = catalog_updater
        self._max_training_documents = max_training_documents

    def ingest_url(self, url: str, options: IngestOptions | None = None) -> IngestResult:
        """Raises IngestionError when a fatal step fails."""
        return self._pipeline.ingest(url, options)

    def get_processing_status(self, document_id: str) -> ProcessingStatus | None:
        return self._pipeline.status_tracker.get(document_id)

    def get_document(self, document_id: str) -> Document | None:
        return self._documents.find_by_id(document_id)

    def list_documents(self, limit: int = 100, offset: int = 0) -> list[Document]:
        return self._documents.find_all(limit=limit, offset=offset)

    def documents_by_category(self, category_name: str, limit: int = 100) -> list[Document]:
        return self._documents.find_by_category(category_name, limit=limit)

    def get_document_pdf(self, document_id: str) -> bytes:
        document = self._documents.find_by_id(document_id)
        if document is None:
            raise DocumentServiceError(f"Document not found: {document_id}")
        if not document.pdf_attachment_name:
            raise DocumentServiceError(f"No PDF attachment found for document: {document_id}")
        try:
            return self._documents.get_attachment(document_id, document.pdf_attachment_name)
        except NotFoundError as exc:
            raise DocumentServiceError(f"Failed to retrieve PDF: {exc}") from exc

    def delete_document(self, document_id: str) -> None:
        """Delete a document, release its categories and forget its status.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        document = self._documents.get(document_id)
        self._documents.delete(document_id)
        self._catalog_updater.release(c.name for c in document.categories)
        self._pipeline.status_tracker.remove(document_id)
        Log.info(f"Deleted document {document_id}")

    def reclassify_document(self, document_id: str) -> Document:
        document = self._documents.find_by_id(document_id)
        if document is None:
            raise DocumentServiceError(f"Document not found: {document_id}")

        previous = {c.name for c in document.categories}
        try:
            document.categories = self._ensemble.classify(document)
            self._documents.save(document)
        except Exception as exc:
            raise DocumentServiceError(f"Reclassification failed: {exc}") from exc

        current = [c.name for c in document.categories]
        self._catalog_updater.ensure(name for name in current if name not in previous)
        self._catalog_updater.release(sorted(previous.difference(current)))
        Log.info(f"Reclassified document {document_id}: {current}")
        return document

    def train_classifier(self, max_documents: int | None = None) -> TrainingReport:
        """Retrain the TF-IDF model on categorized documents with a PDF.

        Raises:
            DocumentServiceError: if the statistical classifier is disabled.
            TrainingError: if there is nothing usable to train on.
        """
        statistical = self._ensemble.statistical
        if not statistical.enabled:
            raise DocumentServiceError("ML classifier is disabled. Set ML_ENABLED=true")

        limit = max_documents or self._max_training_documents
        candidates = [
            d
            for d in self._documents.find_all(limit=limit)
            if d.categories and d.pdf_attachment_name
        ]
        if not candidates:
            raise TrainingError("No categorized documents found for training")
        Log.info(f"Found {len(candidates)} categorized documents for training")
        return statistical.train(candidates)

    def classifier_status(self) -> dict[str, Any]:
        statistical = self._ensemble.statistical
        status: dict[str, Any] = {
            "enabled": statistical.enabled,
            "trained": statistical.is_trained,
            "ready": statistical.is_ready,
            "classifier": statistical.tag,
        }
        if statistical.is_trained:
            status["categories"] = statistical.categories
            status["category_count"] = len(statistical.categories)
        return status

    def rebuild_categories(self) -> dict[str, int]:
        """Create catalog entries for category names found on documents but missing from the catalog."""
        documents = self._documents.find_all()
        counts: dict[str, int] = {}
        for document in documents:
            for name in {c.name for c in document.categories}:
                counts[name] = counts.get(name, 0) + 1

        created = 0
        for name, count in counts.items():
            if self._categories.find_by_name(name) is not None:
                continue
            self._categories.save(
                Category(
                    name=name,
                    description=describe_category(name),
                    document_count=count,
                    created_at=datetime.now(timezone.utc),
                )
            )
            created += 1
        Log.info(f"Rebuilt categories: {created} created, {len(counts)} total")
        return {"categories_created": created, "total_categories": len(counts)}

    def close(self) -> None:
        """Release the remote classifier's HTTP client, if any."""
        self._ensemble.close()


def build_service(settings: Settings) -> DocumentService:
    """Build a DocumentService with all required adapters."""
    documents = DocumentRepository()
    categories = CategoryRepository()
    pdf_extractor = PdfExtractorFactory.create(settings)
    text_source = DocumentTextSource(documents, pdf_extractor)
    ensemble = ClassifierFactory.create(settings, text_source)
    catalog_updater = CategoryCatalogUpdater(categories)
    note_exporter = MarkdownNoteExporter(
        Path(settings.notes_vault_path), documents, enabled=settings.notes_enabled
    )

    steps = [
        VerifyUrlStep(UrlVerifier(timeout_seconds=settings.url_verification_timeout_seconds)),
        RenderPdfStep(PlaywrightRenderer()),
        StoreDocumentStep(
            documents, HtmlMetadataExtractor(timeout_seconds=settings.metadata_timeout_seconds)
        ),
        AnalyzeContentStep(pdf_extractor),
        CategorizeStep(documents, ensemble, catalog_updater),
        ExportNoteStep(note_exporter),
    ]
    pipeline = IngestionPipeline(steps, StatusTracker(settings.status_ttl_seconds))
    return DocumentService(
        pipeline=pipeline,
        documents=documents,
        categories=categories,
        ensemble=ensemble,
        catalog_updater=catalog_updater,
        max_training_documents=settings.ml_max_training_documents,
    )


def default_ingest_options(settings: Settings, create_note: bool = False) -> IngestOptions:
    return IngestOptions(
        create_note=create_note,
        render=RenderOptions(
            timeout_seconds=settings.render_timeout_seconds,
            page_format=settings.render_page_format,
        ),
    )
