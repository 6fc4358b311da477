from typing import Any

from psycopg.rows import dict_row

from linkshelf.database.connection import get_connection
from linkshelf.database.exceptions import CategoryNotFoundError
from linkshelf.database.models import Category


class CategoryRepository:
    """Database operations for the categories table."""

    def save(self, category: Category) -> Category:
        """Insert a category or overwrite the description and counter of an existing one."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO categories (name, description, document_count, created_at)
                    VALUES (%s, %s, %s, COALESCE(%s, NOW()))
                    ON CONFLICT (name) DO UPDATE SET
                        description = EXCLUDED.description,
                        document_count = EXCLUDED.document_count
                    RETURNING created_at
                    """,
                    (
                        category.name,
                        category.description,
                        category.document_count,
                        category.created_at,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is not None:
            category.created_at = row[0]
        return category

    def find_by_name(self, name: str) -> Category | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT name, description, document_count, created_at
                    FROM categories
                    WHERE name = %s
                    """,
                    (name,),
                )
                row = cur.fetchone()

        return _to_category(row) if row is not None else None

    def find_all(self) -> list[Category]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT name, description, document_count, created_at
                    FROM categories
                    ORDER BY name
                    """
                )
                rows = cur.fetchall()
        return [_to_category(row) for row in rows]

    def delete(self, name: str) -> None:
        """Delete a category.

        Raises:
            CategoryNotFoundError: if no category with this name exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM categories WHERE name = %s", (name,))
                if cur.rowcount == 0:
                    raise CategoryNotFoundError(f"Category '{name}' not found")
            conn.commit()

    def add_document(self, name: str, description: str) -> None:
        """Count one more document under ``name``, creating the category at 1 if missing.

        A single upsert, so concurrent first assignments of a name all count.
        """
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO categories (name, description, document_count, created_at)
                VALUES (%s, %s, 1, NOW())
                ON CONFLICT (name) DO UPDATE SET
                    document_count = categories.document_count + 1
                """,
                (name, description),
            )
            conn.commit()

    def increment_document_count(self, name: str) -> None:
        """Add one to the category's document counter.

        Raises:
            CategoryNotFoundError: if no category with this name exists.
        """
        self._adjust_document_count(name, 1)

    def decrement_document_count(self, name: str) -> None:
        """Subtract one from the category's document counter, never going below zero.

        Raises:
            CategoryNotFoundError: if no category with this name exists.
        """
        self._adjust_document_count(name, -1)

    def _adjust_document_count(self, name: str, delta: int) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE categories
                    SET document_count = GREATEST(document_count + %s, 0)
                    WHERE name = %s
                    """,
                    (delta, name),
                )
                if cur.rowcount == 0:
                    raise CategoryNotFoundError(f"Category '{name}' not found")
            conn.commit()


def _to_category(row: dict[str, Any]) -> Category:
    return Category(
        name=row["name"],
        description=row["description"],
        document_count=row["document_count"],
        created_at=row["created_at"],
    )
