"""Tokenization and document text assembly shared by training and inference."""

import re

from linkshelf.database.models import Document
from linkshelf.database.repositories.document_repository import DocumentRepository
from linkshelf.pdf.base import BasePdfExtractor

_SPLIT_RE = re.compile(r"[\W_]+")
_MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "her",
        "was", "one", "our", "out", "day", "get", "has", "him", "his", "how",
        "man", "new", "now", "old", "see", "two", "way", "who", "boy", "did",
        "its", "let", "put", "say", "she", "too", "use", "any", "may", "with",
        "this", "that", "from", "they", "were", "been", "have", "what", "your",
    }
)


def tokenize(text: str | None) -> list[str]:
    """Lower-case, split on non-word runs, drop short tokens and stop words."""
    if not text or not text.strip():
        return []
    return [
        token
        for token in _SPLIT_RE.split(text.lower())
        if len(token) >= _MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def metadata_parts(document: Document) -> list[str]:
    parts: list[str] = []
    if document.title:
        parts.append(document.title)
    if document.description:
        parts.append(document.description)
    parts.extend(value for value in document.meta_tags.values() if value)
    return parts


def fuse_text(document: Document, artifact_text: str | None) -> str:
    """Title, description and meta-tag values followed by the artifact's text."""
    parts = metadata_parts(document)
    if artifact_text:
        parts.append(artifact_text)
    return " ".join(parts)


class DocumentTextSource:
    """Loads a document's PDF attachment and fuses its text with the metadata."""

    def __init__(self, documents: DocumentRepository, pdf_extractor: BasePdfExtractor) -> None:
        self._documents = documents
        self._pdf_extractor = pdf_extractor

    def artifact_text(self, document: Document) -> str:
        """Extracted attachment text.

        Raises:
            ValueError: if the document has no attachment name.
            AttachmentNotFoundError: if the attachment is missing from the store.
            PdfExtractionError: if the attachment is not a readable PDF.
        """
        if not document.pdf_attachment_name:
            raise ValueError(f"Document {document.id} has no PDF attachment")
        pdf_bytes = self._documents.get_attachment(document.id, document.pdf_attachment_name)
        return self._pdf_extractor.extract(pdf_bytes)

    def fused_text(self, document: Document) -> str:
        return fuse_text(document, self.artifact_text(document))
