from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from linkshelf.database.connection import get_connection
from linkshelf.database.exceptions import AttachmentNotFoundError, DocumentNotFoundError
from linkshelf.database.models import CategoryAssignment, Document, DocumentStatus

_DOCUMENT_COLUMNS = """
    id, url, canonical_url, title, description, meta_tags, fetched_at,
    size_bytes, pdf_attachment_name, categories, notes, status, revision
"""


class DocumentRepository:
    """Database operations for the documents and document_attachments tables."""

    def save(self, document: Document) -> Document:
        """Insert or update a document and bump its revision.

        Returns the same document with the stored revision applied.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO documents
                    (id, url, canonical_url, title, description, meta_tags, fetched_at,
                     size_bytes, pdf_attachment_name, categories, notes, status, revision)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 1)
                    ON CONFLICT (id) DO UPDATE SET
                        url = EXCLUDED.url,
                        canonical_url = EXCLUDED.canonical_url,
                        title = EXCLUDED.title,
                        description = EXCLUDED.description,
                        meta_tags = EXCLUDED.meta_tags,
                        fetched_at = EXCLUDED.fetched_at,
                        size_bytes = EXCLUDED.size_bytes,
                        pdf_attachment_name = EXCLUDED.pdf_attachment_name,
                        categories = EXCLUDED.categories,
                        notes = EXCLUDED.notes,
                        status = EXCLUDED.status,
                        revision = documents.revision + 1,
                        updated_at = NOW()
                    RETURNING revision
                    """,
                    (
                        document.id,
                        document.url,
                        document.canonical_url,
                        document.title,
                        document.description,
                        Jsonb(document.meta_tags),
                        document.fetched_at,
                        document.size_bytes,
                        document.pdf_attachment_name,
                        Jsonb([c.to_dict() for c in document.categories]),
                        Jsonb(document.notes),
                        document.status.value,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is not None:
            document.revision = row[0]
        return document

    def find_by_id(self, document_id: str) -> Document | None:
        """Find a document by ID, or None when absent."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        return _to_document(row) if row is not None else None

    def get(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        document = self.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    def find_all(self, limit: int = 1000, offset: int = 0) -> list[Document]:
        """Return documents ordered by creation time, newest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS} FROM documents
                    ORDER BY created_at DESC
                    LIMIT %s OFFSET %s
                    """,
                    (limit, offset),
                )
                rows = cur.fetchall()
        return [_to_document(row) for row in rows]

    def find_by_category(self, category_name: str, limit: int = 1000) -> list[Document]:
        """Return documents that carry an assignment with the given category name."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS} FROM documents
                    WHERE categories @> %s
                    ORDER BY created_at DESC
                    LIMIT %s
                    """,
                    (Jsonb([{"name": category_name}]), limit),
                )
                rows = cur.fetchall()
        return [_to_document(row) for row in rows]

    def delete(self, document_id: str) -> None:
        """Delete a document and its attachments.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def exists(self, document_id: str) -> bool:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM documents WHERE id = %s", (document_id,))
                return cur.fetchone() is not None

    def save_attachment(
        self,
        document_id: str,
        attachment_name: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Store binary content under (document_id, attachment_name), replacing any previous one.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        if not self.exists(document_id):
            raise DocumentNotFoundError(f"Document {document_id} not found")
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO document_attachments (document_id, name, content_type, data)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (document_id, name) DO UPDATE SET
                    content_type = EXCLUDED.content_type,
                    data = EXCLUDED.data
                """,
                (document_id, attachment_name, content_type, data),
            )
            conn.execute(
                """
                UPDATE documents
                SET revision = revision + 1, updated_at = NOW()
                WHERE id = %s
                """,
                (document_id,),
            )
            conn.commit()

    def get_attachment(self, document_id: str, attachment_name: str) -> bytes:
        """Read attachment bytes.

        Raises:
            AttachmentNotFoundError: if the attachment does not exist.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT data FROM document_attachments
                    WHERE document_id = %s AND name = %s
                    """,
                    (document_id, attachment_name),
                )
                row = cur.fetchone()

        if row is None:
            raise AttachmentNotFoundError(
                f"Attachment '{attachment_name}' not found for document {document_id}"
            )
        return bytes(row[0])

    def delete_attachment(self, document_id: str, attachment_name: str) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM document_attachments WHERE document_id = %s AND name = %s",
                    (document_id, attachment_name),
                )
                if cur.rowcount == 0:
                    raise AttachmentNotFoundError(
                        f"Attachment '{attachment_name}' not found for document {document_id}"
                    )
            conn.commit()


def _to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=row["id"],
        url=row["url"],
        canonical_url=row["canonical_url"],
        title=row["title"],
        description=row["description"],
        meta_tags=dict(row["meta_tags"] or {}),
        fetched_at=row["fetched_at"],
        size_bytes=row["size_bytes"],
        pdf_attachment_name=row["pdf_attachment_name"],
        categories=[CategoryAssignment.from_dict(c) for c in row["categories"] or []],
        notes=list(row["notes"] or []),
        status=DocumentStatus(row["status"]),
        revision=row["revision"],
    )
