from abc import ABC, abstractmethod

MAX_TEXT_LENGTH = 100_000


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    max_text_length: int = MAX_TEXT_LENGTH

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Extracted text as a single normalized string, at most
            ``max_text_length`` characters. Empty input yields "".

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages, or 0 for empty input.

        Raises:
            PdfExtractionError: if the PDF cannot be opened.
        """

    def _truncate(self, text: str) -> str:
        if len(text) > self.max_text_length:
            return text[: self.max_text_length]
        return text
