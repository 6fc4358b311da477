from abc import ABC, abstractmethod

from linkshelf.database.models import CategoryAssignment


class BaseRemoteClassifier(ABC):
    """Contract for remote AI classification adapters."""

    @abstractmethod
    def classify(
        self,
        document_id: str,
        title: str | None,
        description: str | None,
        content: str,
    ) -> list[CategoryAssignment]:
        """Ask the remote service for categories.

        Returns:
            Assignments tagged ``mcp-<model>``.

        Raises:
            RemoteClassifierError: on timeout, transport failure, non-success
                status, JSON-RPC error, or malformed result.
        """

    def close(self) -> None:
        """Release network resources held by the adapter."""
