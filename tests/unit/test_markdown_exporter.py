from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from linkshelf.database.exceptions import AttachmentNotFoundError
from linkshelf.database.models import CategoryAssignment, Document
from linkshelf.database.repositories.document_repository import DocumentRepository
from linkshelf.notes.exceptions import NoteExportError
from linkshelf.notes.markdown_exporter import (
    MarkdownNoteExporter,
    format_file_size,
    note_file_name,
    render_note,
)

FETCHED_AT = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


def _make_document(**overrides) -> Document:
    values = {
        "url": "https://example.com/guide",
        "id": "doc-1",
        "title": "Async Python: A Guide!",
        "description": "Learn asyncio",
        "canonical_url": "https://example.com/guide",
        "fetched_at": FETCHED_AT,
        "size_bytes": 2048,
        "pdf_attachment_name": "Async_Python_A_Guide.pdf",
        "categories": [CategoryAssignment("tech", 0.875, "rule-based-v1.0")],
        "meta_tags": {"data-note": "from meta"},
    }
    values.update(overrides)
    return Document(**values)


def _make_exporter(tmp_path: Path, enabled: bool = True) -> tuple[MarkdownNoteExporter, MagicMock]:
    documents = MagicMock(spec=DocumentRepository)
    documents.get_attachment.return_value = b"%PDF-fake"
    return MarkdownNoteExporter(tmp_path, documents, enabled=enabled), documents


class TestHelpers:
    def test_note_file_name(self) -> None:
        assert note_file_name(_make_document()) == "async_python_a_guide_20260314_092653.md"

    def test_note_file_name_truncates_long_titles(self) -> None:
        name = note_file_name(_make_document(title="x" * 80))
        assert name == "x" * 50 + "_20260314_092653.md"

    @pytest.mark.parametrize(
        "size, expected",
        [(0, "0 B"), (1023, "1023 B"), (1024, "1.0 KB"), (1536, "1.5 KB"), (5 * 1024**2, "5.0 MB")],
    )
    def test_format_file_size(self, size: int, expected: str) -> None:
        assert format_file_size(size) == expected


class TestRenderNote:
    def test_full_note(self) -> None:
        body = render_note(_make_document(), note_text="remember this")

        assert body.startswith("---\nsource_url: https://example.com/guide\n")
        assert "pdf_id: doc-1\n" in body
        assert "tags: [tech, page-snapshot]\n" in body
        assert "# Async Python: A Guide!\n" in body
        assert "## Description\nLearn asyncio\n" in body
        assert "## Notes\nremember this\n" in body
        assert "[Download PDF](../pdfs/doc-1.pdf)" in body
        assert "- tech (confidence: 0.88)" in body
        assert "- **Canonical URL:** https://example.com/guide" in body
        assert "- **PDF Size:** 2.0 KB" in body

    def test_notes_fall_back_to_meta_tag(self) -> None:
        body = render_note(_make_document(), meta_tag="data-note")
        assert "## Notes\nfrom meta\n" in body

    def test_sections_omitted_when_empty(self) -> None:
        body = render_note(_make_document(description="  ", categories=[], size_bytes=None))

        assert "## Description" not in body
        assert "## Notes" not in body
        assert "## Categories" not in body
        assert "PDF Size" not in body
        assert "tags: [page-snapshot]" in body


class TestMarkdownNoteExporter:
    def test_writes_note_and_pdf(self, tmp_path: Path) -> None:
        exporter, documents = _make_exporter(tmp_path)

        file_name = exporter.export(_make_document())

        assert file_name == "async_python_a_guide_20260314_092653.md"
        assert (tmp_path / file_name).read_text(encoding="utf-8").startswith("---\n")
        assert (tmp_path / "pdfs" / "doc-1.pdf").read_bytes() == b"%PDF-fake"
        documents.get_attachment.assert_called_once_with("doc-1", "Async_Python_A_Guide.pdf")
        assert exporter.note_exists(file_name) is True

    def test_missing_pdf_does_not_fail_export(self, tmp_path: Path) -> None:
        exporter, documents = _make_exporter(tmp_path)
        documents.get_attachment.side_effect = AttachmentNotFoundError("gone")

        file_name = exporter.export(_make_document())

        assert (tmp_path / file_name).exists()
        assert not (tmp_path / "pdfs" / "doc-1.pdf").exists()

    def test_empty_title_raises(self, tmp_path: Path) -> None:
        exporter, _ = _make_exporter(tmp_path)

        with pytest.raises(NoteExportError, match="title cannot be empty"):
            exporter.export(_make_document(title="   "))

    def test_disabled_exporter_writes_nothing(self, tmp_path: Path) -> None:
        exporter, documents = _make_exporter(tmp_path, enabled=False)

        assert exporter.export(_make_document()) is None
        assert list(tmp_path.iterdir()) == []
        assert exporter.note_exists("anything.md") is False
        documents.get_attachment.assert_not_called()

    def test_delete_note(self, tmp_path: Path) -> None:
        exporter, _ = _make_exporter(tmp_path)
        file_name = exporter.export(_make_document())

        exporter.delete_note(file_name)

        assert exporter.note_exists(file_name) is False

    def test_delete_rejects_path_traversal(self, tmp_path: Path) -> None:
        vault = tmp_path / "vault"
        vault.mkdir()
        outside = tmp_path / "secret.md"
        outside.write_text("keep me")
        exporter, _ = _make_exporter(vault)

        with pytest.raises(NoteExportError, match="path traversal"):
            exporter.delete_note("../secret.md")

        assert outside.exists()
