from unittest.mock import MagicMock

import pytest

from linkshelf.classification.ensemble import ClassificationEnsemble
from linkshelf.classification.merger import CategoryCatalogUpdater
from linkshelf.database.models import CategoryAssignment, Document, DocumentStatus
from linkshelf.database.repositories.document_repository import DocumentRepository
from linkshelf.notes.base import BaseNoteExporter
from linkshelf.notes.exceptions import NoteExportError
from linkshelf.pdf.base import BasePdfExtractor
from linkshelf.processor.exceptions import IngestionError
from linkshelf.processor.models import IngestOptions, ProcessingStep
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
from linkshelf.rendering.base import BaseRenderer
from linkshelf.rendering.exceptions import RenderError
from linkshelf.web.exceptions import MetadataExtractionError
from linkshelf.web.metadata_extractor import HtmlMetadataExtractor
from linkshelf.web.models import PageMetadata, VerificationResult
from linkshelf.web.url_verifier import UrlVerifier

URL = "https://example.com/article"


class _Mocks:
    def __init__(self) -> None:
        self.verifier = MagicMock(spec=UrlVerifier)
        self.renderer = MagicMock(spec=BaseRenderer)
        self.documents = MagicMock(spec=DocumentRepository)
        self.metadata = MagicMock(spec=HtmlMetadataExtractor)
        self.pdf_extractor = MagicMock(spec=BasePdfExtractor)
        self.ensemble = MagicMock(spec=ClassificationEnsemble)
        self.catalog = MagicMock(spec=CategoryCatalogUpdater)
        self.exporter = MagicMock(spec=BaseNoteExporter)
        self.saved: dict[str, Document] = {}

        self.verifier.verify.return_value = VerificationResult(True, "URL is accessible", 200)
        self.renderer.render.return_value = b"%PDF-fake"
        self.metadata.extract.return_value = PageMetadata(
            title="Async Python Guide",
            description="Learn asyncio",
            canonical_url=URL,
            meta_tags={"data-note": "from meta"},
        )
        self.pdf_extractor.page_count.return_value = 3
        self.ensemble.classify.return_value = [
            CategoryAssignment("Technology", 0.9, "enhanced-rule-based-v1.0"),
            CategoryAssignment("technology", 0.7, "rule-based-v1.0"),
        ]
        self.exporter.export.return_value = "async_python_guide_20260101_120000.md"

        def save(document: Document) -> Document:
            self.saved[document.id] = document
            return document

        self.documents.save.side_effect = save
        self.documents.get.side_effect = lambda document_id: self.saved[document_id]


def _make_pipeline() -> tuple[IngestionPipeline, _Mocks]:
    mocks = _Mocks()
    steps = [
        VerifyUrlStep(mocks.verifier),
        RenderPdfStep(mocks.renderer),
        StoreDocumentStep(mocks.documents, mocks.metadata),
        AnalyzeContentStep(mocks.pdf_extractor),
        CategorizeStep(mocks.documents, mocks.ensemble, mocks.catalog),
        ExportNoteStep(mocks.exporter),
    ]
    return IngestionPipeline(steps, StatusTracker()), mocks


def _steps(pipeline: IngestionPipeline, document_id: str) -> list[tuple[ProcessingStep, bool]]:
    status = pipeline.status_tracker.get(document_id)
    assert status is not None
    return [(s.step, s.success) for s in status.steps]


class TestIngestionPipeline:
    def test_runs_all_steps_and_completes(self) -> None:
        pipeline, mocks = _make_pipeline()

        result = pipeline.ingest(URL)

        assert result.status == DocumentStatus.STORED
        assert result.artifact_locator == f"/documents/{result.id}/pdf"
        assert _steps(pipeline, result.id) == [
            (ProcessingStep.URL_VERIFICATION, True),
            (ProcessingStep.PDF_CONVERSION, True),
            (ProcessingStep.STORAGE, True),
            (ProcessingStep.CONTENT_ANALYSIS, True),
            (ProcessingStep.CATEGORIZATION, True),
            (ProcessingStep.COMPLETED, True),
        ]
        status = pipeline.status_tracker.get(result.id)
        assert status.completed is True
        assert status.failed is False
        assert status.current_step == ProcessingStep.COMPLETED
        mocks.exporter.export.assert_not_called()

    def test_stores_document_and_attachment(self) -> None:
        pipeline, mocks = _make_pipeline()

        result = pipeline.ingest(URL)

        stored = mocks.saved[result.id]
        assert stored.title == "Async Python Guide"
        assert stored.size_bytes == len(b"%PDF-fake")
        assert stored.status == DocumentStatus.STORED
        assert stored.pdf_attachment_name == "Async_Python_Guide.pdf"
        assert stored.fetched_at is not None
        mocks.documents.save_attachment.assert_called_once_with(
            result.id, "Async_Python_Guide.pdf", b"%PDF-fake", "application/pdf"
        )

    def test_persists_categories_and_updates_catalog(self) -> None:
        pipeline, mocks = _make_pipeline()

        result = pipeline.ingest(URL)

        assert [c.name for c in mocks.saved[result.id].categories] == ["Technology", "technology"]
        mocks.catalog.ensure.assert_called_once_with(["Technology", "technology"])
        status = pipeline.status_tracker.get(result.id)
        assert status.steps[3].payload == {"page_count": 3}

    def test_url_verification_failure_is_fatal(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.verifier.verify.return_value = VerificationResult(False, "Client error: 404 Not Found", 404)

        with pytest.raises(IngestionError) as exc_info:
            pipeline.ingest(URL)

        error = exc_info.value
        assert error.step == ProcessingStep.URL_VERIFICATION
        assert error.message == "Client error: 404 Not Found"
        assert _steps(pipeline, error.document_id) == [(ProcessingStep.URL_VERIFICATION, False)]
        status = pipeline.status_tracker.get(error.document_id)
        assert status.failed is True
        assert status.completed is False
        assert status.error_message == "URL verification failed: Client error: 404 Not Found"
        mocks.renderer.render.assert_not_called()
        mocks.documents.save.assert_not_called()

    def test_render_failure_is_fatal_and_nothing_is_stored(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.renderer.render.side_effect = RenderError("Timeout 30000ms exceeded")

        with pytest.raises(IngestionError) as exc_info:
            pipeline.ingest(URL)

        assert exc_info.value.step == ProcessingStep.PDF_CONVERSION
        assert isinstance(exc_info.value.__cause__, RenderError)
        assert _steps(pipeline, exc_info.value.document_id) == [
            (ProcessingStep.URL_VERIFICATION, True),
            (ProcessingStep.PDF_CONVERSION, False),
        ]
        mocks.documents.save.assert_not_called()

    def test_storage_exception_is_fatal(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.documents.save.side_effect = RuntimeError("connection refused")

        with pytest.raises(IngestionError) as exc_info:
            pipeline.ingest(URL)

        assert exc_info.value.step == ProcessingStep.STORAGE
        status = pipeline.status_tracker.get(exc_info.value.document_id)
        assert status.steps[-1].message == "Storage failed: connection refused"
        mocks.ensemble.classify.assert_not_called()

    def test_metadata_failure_uses_fallbacks(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.metadata.extract.side_effect = MetadataExtractionError("403")

        result = pipeline.ingest(URL)

        stored = mocks.saved[result.id]
        assert stored.title == "Web Page Snapshot"
        assert stored.description == "PDF snapshot of web page"
        assert stored.canonical_url == URL
        assert stored.pdf_attachment_name == "Web_Page_Snapshot.pdf"

    def test_unexpected_metadata_error_uses_fallbacks(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.metadata.extract.side_effect = AttributeError("'NoneType' object has no attribute 'get'")

        result = pipeline.ingest(URL)

        assert result.status == DocumentStatus.STORED
        assert mocks.saved[result.id].title == "Web Page Snapshot"
        assert (ProcessingStep.STORAGE, True) in _steps(pipeline, result.id)

    def test_categorization_failure_is_soft(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.ensemble.classify.side_effect = RuntimeError("classifier crashed")

        result = pipeline.ingest(URL)

        steps = _steps(pipeline, result.id)
        assert steps[-2:] == [(ProcessingStep.CATEGORIZATION, False), (ProcessingStep.COMPLETED, True)]
        status = pipeline.status_tracker.get(result.id)
        assert status.completed is True
        assert status.failed is False
        assert status.steps[-2].message == "Categorization failed: classifier crashed"
        mocks.catalog.ensure.assert_not_called()

    def test_content_analysis_failure_is_soft(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.pdf_extractor.page_count.side_effect = RuntimeError("bad pdf")

        result = pipeline.ingest(URL)

        assert (ProcessingStep.CONTENT_ANALYSIS, False) in _steps(pipeline, result.id)
        assert pipeline.status_tracker.get(result.id).completed is True

    def test_note_export_when_requested(self) -> None:
        pipeline, mocks = _make_pipeline()

        result = pipeline.ingest(URL, IngestOptions(create_note=True, note_text="my note"))

        steps = _steps(pipeline, result.id)
        assert steps[-2:] == [(ProcessingStep.NOTE_EXPORT, True), (ProcessingStep.COMPLETED, True)]
        document, note_text, meta_tag = mocks.exporter.export.call_args.args
        assert document.id == result.id
        assert note_text == "my note"
        assert meta_tag == "data-note"

    def test_note_export_failure_does_not_abort(self) -> None:
        pipeline, mocks = _make_pipeline()
        mocks.exporter.export.side_effect = NoteExportError("disk full")

        result = pipeline.ingest(URL, IngestOptions(create_note=True))

        steps = _steps(pipeline, result.id)
        assert steps[-2:] == [(ProcessingStep.NOTE_EXPORT, False), (ProcessingStep.COMPLETED, True)]

    def test_one_result_per_executed_step(self) -> None:
        pipeline, _ = _make_pipeline()

        result = pipeline.ingest(URL, IngestOptions(create_note=True))

        steps = [s for s, _ in _steps(pipeline, result.id)]
        assert len(steps) == len(set(steps)) == 7

    def test_each_ingestion_gets_a_new_id(self) -> None:
        pipeline, _ = _make_pipeline()

        first = pipeline.ingest(URL)
        second = pipeline.ingest(URL)

        assert first.id != second.id
