class ClassificationError(Exception):
    """Base exception for classification failures."""


class TrainingError(ClassificationError):
    """Raised when a model cannot be trained; the previous model stays active."""


class ModelStoreError(ClassificationError):
    """Raised when the persisted model cannot be read or written."""


class RulesLoadError(ClassificationError):
    """Raised when a classification rules file is missing or malformed."""
