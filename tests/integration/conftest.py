import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from linkshelf.config.settings import Settings
from linkshelf.database.connection import apply_schema, close_pool, get_connection, init_pool
from linkshelf.database.models import CategoryAssignment, Document, DocumentStatus
from linkshelf.database.repositories.category_repository import CategoryRepository
from linkshelf.database.repositories.document_repository import DocumentRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "linkshelf_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to point at a test database")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, key in cleanup:
                if table == "documents":
                    cur.execute("DELETE FROM documents WHERE id = %s", (key,))
            for table, key in cleanup:
                if table == "categories":
                    cur.execute("DELETE FROM categories WHERE name = %s", (key,))
        conn.commit()


@pytest.fixture
def document_repository(integration_pool: None) -> DocumentRepository:
    return DocumentRepository()


@pytest.fixture
def category_repository(integration_pool: None) -> CategoryRepository:
    return CategoryRepository()


@pytest.fixture
def seed_document(
    document_repository: DocumentRepository,
    integration_cleanup: list[tuple[str, str]],
) -> Document:
    document = Document(
        url="https://example.com/guide",
        canonical_url="https://example.com/guide",
        title="Async Python Guide",
        description="Learn asyncio",
        meta_tags={"description": "Learn asyncio"},
        size_bytes=1024,
        pdf_attachment_name="Async_Python_Guide.pdf",
        categories=[CategoryAssignment("Technology", 0.9, "rule-based-v1.0")],
        status=DocumentStatus.STORED,
    )
    document_repository.save(document)
    integration_cleanup.append(("documents", document.id))
    return document
