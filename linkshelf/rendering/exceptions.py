class RenderError(Exception):
    """Raised when a web page cannot be rendered to PDF."""
