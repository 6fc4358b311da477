from linkshelf.classification.heuristic import KeywordDomainClassifier, PatternDensityClassifier
from linkshelf.classification.merger import merge_assignments
from linkshelf.classification.text import DocumentTextSource
from linkshelf.classification.tfidf import TfidfClassifier
from linkshelf.database.exceptions import NotFoundError
from linkshelf.database.models import CategoryAssignment, Document
from linkshelf.logging.logger import Log
from linkshelf.pdf.exceptions import PdfExtractionError
from linkshelf.remote.base import BaseRemoteClassifier
from linkshelf.remote.exceptions import RemoteClassifierError


class ClassificationEnsemble:
    """Runs every classifier on a document and merges their proposals.

    Order: remote (when configured), TF-IDF, pattern density, keyword/domain.
    The fused text is extracted once and shared. If it cannot be extracted the
    text-based classifiers are skipped and the metadata-only ones still run.
    """

    def __init__(
        self,
        *,
        text_source: DocumentTextSource,
        statistical: TfidfClassifier,
        pattern: PatternDensityClassifier,
        keyword: KeywordDomainClassifier,
        remote: BaseRemoteClassifier | None = None,
    ) -> None:
        self._text_source = text_source
        self._statistical = statistical
        self._pattern = pattern
        self._keyword = keyword
        self._remote = remote

    @property
    def statistical(self) -> TfidfClassifier:
        return self._statistical

    def classify(self, document: Document) -> list[CategoryAssignment]:
        text = None
        if self._remote is not None or self._statistical.is_ready:
            text = self._fused_text(document)

        sources: list[list[CategoryAssignment]] = []
        if text is not None:
            if self._remote is not None:
                sources.append(self._classify_remote(document, text))
            sources.append(self._statistical.classify(document, text))
        sources.append(self._pattern.classify(document))
        sources.append(self._keyword.classify(document))

        merged = merge_assignments(*sources)
        Log.info(
            f"Document {document.id} classified into {len(merged)} categories: "
            f"{[a.name for a in merged]}"
        )
        return merged

    def _fused_text(self, document: Document) -> str | None:
        try:
            return self._text_source.fused_text(document)
        except (NotFoundError, PdfExtractionError, ValueError) as exc:
            Log.warning(f"Text extraction failed for document {document.id}: {exc}")
            return None

    def _classify_remote(self, document: Document, text: str) -> list[CategoryAssignment]:
        try:
            return self._remote.classify(document.id, document.title, document.description, text)
        except RemoteClassifierError as exc:
            Log.warning(
                f"Remote classification failed for document {document.id}, "
                f"falling back to local classifiers: {exc}"
            )
            return []

    def close(self) -> None:
        if self._remote is not None:
            self._remote.close()
