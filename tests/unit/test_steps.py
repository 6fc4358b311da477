from unittest.mock import MagicMock

from linkshelf.database.models import Document
from linkshelf.notes.base import BaseNoteExporter
from linkshelf.processor.models import IngestOptions, ProcessingStatus
from linkshelf.processor.pipeline import FatalFailure, PipelineContext, SoftFailure, StepSuccess
from linkshelf.processor.steps import ExportNoteStep, VerifyUrlStep, attachment_file_name
from linkshelf.web.models import VerificationResult
from linkshelf.web.url_verifier import UrlVerifier


def _make_context(options: IngestOptions | None = None) -> PipelineContext:
    return PipelineContext(
        document_id="doc-1",
        url="https://example.com",
        options=options or IngestOptions(),
        status=ProcessingStatus(document_id="doc-1"),
    )


class TestAttachmentFileName:
    def test_replaces_unsafe_characters(self) -> None:
        assert attachment_file_name('Report: Q1/Q2 "final"?') == "Report_Q1_Q2_final.pdf"

    def test_collapses_whitespace(self) -> None:
        assert attachment_file_name("  Hello   World ") == "_Hello_World.pdf"

    def test_truncates_to_one_hundred_characters(self) -> None:
        assert attachment_file_name("a" * 150) == "a" * 100 + ".pdf"

    def test_defaults_to_document(self) -> None:
        assert attachment_file_name(None) == "document.pdf"
        assert attachment_file_name("***") == "document.pdf"


class TestVerifyUrlStep:
    def test_inaccessible_url_is_fatal(self) -> None:
        verifier = MagicMock(spec=UrlVerifier)
        verifier.verify.return_value = VerificationResult(False, "Server error: 500")

        outcome = VerifyUrlStep(verifier).run(_make_context())

        assert outcome == FatalFailure("Server error: 500")

    def test_accessible_url_reports_status_code(self) -> None:
        verifier = MagicMock(spec=UrlVerifier)
        verifier.verify.return_value = VerificationResult(True, "URL is accessible", 204)

        outcome = VerifyUrlStep(verifier).run(_make_context())

        assert outcome == StepSuccess("URL is accessible", {"status_code": 204})


class TestExportNoteStep:
    def test_applies_only_when_requested(self) -> None:
        step = ExportNoteStep(MagicMock(spec=BaseNoteExporter))

        assert step.applies(_make_context()) is False
        assert step.applies(_make_context(IngestOptions(create_note=True))) is True

    def test_disabled_exporter_is_soft_failure(self) -> None:
        exporter = MagicMock(spec=BaseNoteExporter)
        exporter.export.return_value = None
        context = _make_context(IngestOptions(create_note=True))
        context.document = Document(url="https://example.com", title="T")

        outcome = ExportNoteStep(exporter).run(context)

        assert isinstance(outcome, SoftFailure)

    def test_records_note_file_name(self) -> None:
        exporter = MagicMock(spec=BaseNoteExporter)
        exporter.export.return_value = "t_20260101_000000.md"
        context = _make_context(IngestOptions(create_note=True))
        context.document = Document(url="https://example.com", title="T")

        outcome = ExportNoteStep(exporter).run(context)

        assert isinstance(outcome, StepSuccess)
        assert context.note_file_name == "t_20260101_000000.md"
