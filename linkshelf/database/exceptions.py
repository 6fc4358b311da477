class RepositoryError(Exception):
    """Base exception for persistence failures."""


class NotFoundError(RepositoryError):
    """Raised when a record cannot be found by its key."""


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found in the database."""


class AttachmentNotFoundError(NotFoundError):
    """Raised when a document attachment cannot be found in the database."""


class CategoryNotFoundError(NotFoundError):
    """Raised when a category cannot be found in the catalog."""
