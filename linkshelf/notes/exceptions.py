class NoteExportError(Exception):
    """Raised when a note cannot be written to the vault."""
