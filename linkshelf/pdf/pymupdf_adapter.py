import pymupdf

from linkshelf.logging.logger import Log
from linkshelf.pdf.base import BasePdfExtractor
from linkshelf.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def extract(self, pdf_bytes: bytes) -> str:
        if not pdf_bytes:
            Log.warning("Cannot extract text from empty PDF data")
            return ""
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return self._truncate("\n".join(pages).strip())
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc

    def page_count(self, pdf_bytes: bytes) -> int:
        if not pdf_bytes:
            return 0
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return int(doc.page_count)
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not open PDF: {exc}") from exc
