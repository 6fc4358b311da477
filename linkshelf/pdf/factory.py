from linkshelf.config.settings import Settings
from linkshelf.pdf.base import BasePdfExtractor
from linkshelf.pdf.pdfplumber_adapter import PdfPlumberAdapter
from linkshelf.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Picks the artifact text extractor named by ``pdf_engine``."""

    ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.strip().lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        adapter = adapter_cls()
        adapter.max_text_length = settings.pdf_max_text_length
        return adapter
