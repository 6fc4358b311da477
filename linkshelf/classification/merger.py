from collections.abc import Iterable

from linkshelf.classification.rules import describe_category
from linkshelf.database.models import CategoryAssignment
from linkshelf.database.repositories.category_repository import CategoryRepository
from linkshelf.logging.logger import Log


def merge_assignments(*sources: Iterable[CategoryAssignment]) -> list[CategoryAssignment]:
    """Deduplicate by category name, keeping the highest confidence.

    Sources are given in priority order; on equal confidence the assignment
    seen first wins. The result is sorted by descending confidence.
    """
    merged: dict[str, CategoryAssignment] = {}
    for source in sources:
        for assignment in source:
            existing = merged.get(assignment.name)
            if existing is None or assignment.confidence > existing.confidence:
                merged[assignment.name] = assignment
    return sorted(merged.values(), key=lambda a: a.confidence, reverse=True)


class CategoryCatalogUpdater:
    """Keeps the category catalog in step with newly assigned category names."""

    def __init__(self, categories: CategoryRepository) -> None:
        self._categories = categories

    def ensure(self, names: Iterable[str]) -> None:
        """Create each missing category with count 1, otherwise increment its counter.

        A failure for one name is logged and does not stop the others.
        """
        for name in names:
            try:
                self._ensure_one(name)
            except Exception as exc:
                Log.error(f"Failed to create/update category {name}: {exc}")

    def release(self, names: Iterable[str]) -> None:
        """Decrement the counter of each category a document no longer carries."""
        for name in names:
            try:
                self._categories.decrement_document_count(name)
            except Exception as exc:
                Log.error(f"Failed to decrement category {name}: {exc}")

    def _ensure_one(self, name: str) -> None:
        self._categories.add_document(name, describe_category(name))
        Log.debug(f"Counted document under category: {name}")
