class MetadataExtractionError(Exception):
    """Raised when page metadata cannot be fetched or parsed."""
