from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from linkshelf.config.settings import Settings
from linkshelf.logging.logger import Log

_pool: ConnectionPool | None = None

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def init_pool(settings: Settings) -> None:
    """Open the global connection pool and wait until it holds a connection.

    The pool is sized so every ingest worker can hold a connection while the
    CLI thread still gets one.

    Raises:
        psycopg_pool.PoolTimeout: if no connection could be made in
            ``db_connect_timeout_seconds``.
    """
    global _pool  # noqa: PLW0603
    conninfo = (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )
    _pool = ConnectionPool(
        conninfo,
        min_size=1,
        max_size=max(settings.ingest_workers, 1) + 2,
        name="linkshelf",
        open=True,
    )
    _pool.wait(timeout=settings.db_connect_timeout_seconds)
    Log.debug(f"Connection pool ready for {settings.db_host}:{settings.db_port}/{settings.db_database}")


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn


def apply_schema(path: Path | None = None) -> None:
    """Create the documents, attachments and categories tables if missing."""
    sql = (path or SCHEMA_PATH).read_text(encoding="utf-8")
    with get_connection() as conn:
        conn.execute(sql)  # type: ignore[arg-type]
        conn.commit()
