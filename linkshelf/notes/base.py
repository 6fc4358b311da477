from abc import ABC, abstractmethod

from linkshelf.database.models import Document


class BaseNoteExporter(ABC):
    """Contract for note exporters."""

    @abstractmethod
    def export(
        self,
        document: Document,
        note_text: str | None = None,
        meta_tag: str | None = None,
    ) -> str | None:
        """Write a note for the document.

        Args:
            document: A stored document with title and fetch time.
            note_text: Free text for the Notes section.
            meta_tag: Meta tag whose value is used when note_text is empty.

        Returns:
            The note file name, or None when exporting is disabled.

        Raises:
            NoteExportError: if the note cannot be written.
        """
