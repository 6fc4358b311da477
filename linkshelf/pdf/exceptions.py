class PdfExtractionError(Exception):
    """Raised when text or page information cannot be read from PDF bytes."""
