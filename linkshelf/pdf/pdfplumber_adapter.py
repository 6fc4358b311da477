import io

import pdfplumber

from linkshelf.logging.logger import Log
from linkshelf.pdf.base import BasePdfExtractor
from linkshelf.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts text from PDF using pdfplumber."""

    def extract(self, pdf_bytes: bytes) -> str:
        if not pdf_bytes:
            Log.warning("Cannot extract text from empty PDF data")
            return ""
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return self._truncate("\n".join(pages).strip())
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc

    def page_count(self, pdf_bytes: bytes) -> int:
        if not pdf_bytes:
            return 0
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber could not open PDF: {exc}") from exc
