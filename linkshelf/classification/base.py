from abc import ABC, abstractmethod

from linkshelf.database.models import CategoryAssignment, Document


class BaseClassifier(ABC):
    """Contract for all category classifiers."""

    name: str = ""
    version: str = "v1.0"

    @property
    def tag(self) -> str:
        """Source tag stored on every assignment this classifier emits."""
        return f"{self.name}-{self.version}"

    @abstractmethod
    def classify(self, document: Document, text: str | None = None) -> list[CategoryAssignment]:
        """Return category guesses for a document, highest confidence first.

        Args:
            document: The stored document (metadata, URL, attachment name).
            text: Metadata fused with the artifact's extracted text, when the
                  caller has already computed it. Classifiers that only use
                  metadata ignore it.
        """
