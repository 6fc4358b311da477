import math
import re
from datetime import datetime, timezone
from pathlib import Path

from linkshelf.database.exceptions import NotFoundError
from linkshelf.database.models import Document
from linkshelf.database.repositories.document_repository import DocumentRepository
from linkshelf.logging.logger import Log
from linkshelf.notes.base import BaseNoteExporter
from linkshelf.notes.exceptions import NoteExportError

MAX_TITLE_LENGTH = 50
SNAPSHOT_TAG = "page-snapshot"
PDFS_DIR = "pdfs"


def note_file_name(document: Document) -> str:
    """``<sanitized_title>_<yyyyMMdd_HHmmss>.md`` using the fetch time in UTC."""
    title = re.sub(r"[^a-zA-Z0-9\s\-_]", "", document.title or "")
    title = re.sub(r"\s+", "_", title).lower()[:MAX_TITLE_LENGTH]
    fetched_at = document.fetched_at or datetime.now(timezone.utc)
    if fetched_at.tzinfo is not None:
        fetched_at = fetched_at.astimezone(timezone.utc)
    return f"{title}_{fetched_at.strftime('%Y%m%d_%H%M%S')}.md"


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    exp = min(int(math.log(size) / math.log(1024)), 6)
    return f"{size / 1024 ** exp:.1f} {'KMGTPE'[exp - 1]}B"


def render_note(document: Document, note_text: str | None = None, meta_tag: str | None = None) -> str:
    """Markdown body with YAML frontmatter for an Obsidian vault."""
    fetched = document.fetched_at.isoformat() if document.fetched_at else ""
    tags = [c.name for c in document.categories] + [SNAPSHOT_TAG]
    pdf_name = _pdf_file_name(document)

    lines = [
        "---",
        f"source_url: {document.url}",
        f"title: {document.title}",
        f"pdf_id: {document.id}",
        f"fetchedAt: {fetched}",
        f"tags: [{', '.join(tags)}]",
        "---",
        "",
        f"# {document.title}",
        "",
    ]

    if document.description and document.description.strip():
        lines += ["## Description", document.description, ""]

    notes = note_text if note_text and note_text.strip() else None
    if notes is None and meta_tag:
        value = document.meta_tags.get(meta_tag)
        if value and value.strip():
            notes = value
    if notes is not None:
        lines += ["## Notes", notes, ""]

    lines += ["## Resources", f"[Download PDF](../{PDFS_DIR}/{pdf_name})", ""]

    if document.categories:
        lines.append("## Categories")
        lines += [f"- {c.name} (confidence: {c.confidence:.2f})" for c in document.categories]
        lines.append("")

    lines += ["## Metadata", f"- **Fetched:** {fetched}"]
    if document.canonical_url is not None:
        lines.append(f"- **Canonical URL:** {document.canonical_url}")
    if document.size_bytes is not None:
        lines.append(f"- **PDF Size:** {format_file_size(document.size_bytes)}")
    return "\n".join(lines) + "\n"


def _pdf_file_name(document: Document) -> str:
    return f"{document.id.replace('|', '-')}.pdf"


class MarkdownNoteExporter(BaseNoteExporter):
    """Writes notes into an Obsidian-style vault and copies the PDF next to them."""

    def __init__(self, vault_path: Path, documents: DocumentRepository, enabled: bool = True) -> None:
        self._vault_path = vault_path
        self._documents = documents
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def export(
        self,
        document: Document,
        note_text: str | None = None,
        meta_tag: str | None = None,
    ) -> str | None:
        if not self._enabled:
            Log.info("Note export is disabled")
            return None
        if not document.title or not document.title.strip():
            raise NoteExportError("Document title cannot be empty")

        file_name = note_file_name(document)
        note_path = self._inside_vault(self._vault_path / file_name)
        try:
            (self._vault_path / PDFS_DIR).mkdir(parents=True, exist_ok=True)
            note_path.write_text(render_note(document, note_text, meta_tag), encoding="utf-8")
        except OSError as exc:
            Log.error(f"Failed to create note for document {document.id}: {exc}")
            raise NoteExportError(f"Failed to write note file: {exc}") from exc

        self._export_pdf(document)
        Log.info(f"Created note: {file_name}")
        return file_name

    def delete_note(self, file_name: str) -> None:
        if not self._enabled:
            return
        note_path = self._inside_vault(self._vault_path / file_name)
        try:
            if note_path.exists():
                note_path.unlink()
                Log.info(f"Deleted note: {file_name}")
        except OSError as exc:
            raise NoteExportError(f"Failed to delete note file: {exc}") from exc

    def note_exists(self, file_name: str) -> bool:
        if not self._enabled:
            return False
        return (self._vault_path / file_name).exists()

    def _export_pdf(self, document: Document) -> None:
        # The note stays valid without its PDF copy.
        if not document.pdf_attachment_name:
            Log.warning(f"No PDF attachment found for document {document.id}")
            return
        try:
            pdf_path = self._inside_vault(self._vault_path / PDFS_DIR / _pdf_file_name(document))
            pdf_path.write_bytes(
                self._documents.get_attachment(document.id, document.pdf_attachment_name)
            )
            Log.info(f"Exported PDF to vault: {pdf_path}")
        except (NotFoundError, NoteExportError, OSError) as exc:
            Log.error(f"Failed to export PDF for document {document.id}: {exc}")

    def _inside_vault(self, path: Path) -> Path:
        vault = self._vault_path.resolve()
        resolved = path.resolve()
        if not resolved.is_relative_to(vault):
            raise NoteExportError("Invalid note path: path traversal attempt detected")
        return resolved
