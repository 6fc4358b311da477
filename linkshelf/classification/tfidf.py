"""TF-IDF / cosine-similarity classifier trained on already categorized documents."""

import math
import threading
from collections import Counter
from collections.abc import Iterable

from linkshelf.classification.base import BaseClassifier
from linkshelf.classification.exceptions import TrainingError
from linkshelf.classification.model_store import ModelStore
from linkshelf.classification.models import TfidfModel, TrainingReport
from linkshelf.classification.text import DocumentTextSource, tokenize
from linkshelf.database.exceptions import NotFoundError
from linkshelf.database.models import CategoryAssignment, Document
from linkshelf.logging.logger import Log
from linkshelf.pdf.exceptions import PdfExtractionError


def build_vocabulary(
    documents_tokens: Iterable[list[str]],
    min_document_frequency: int,
    max_features: int,
) -> tuple[dict[str, int], Counter[str]]:
    """Index terms by descending document frequency (ties alphabetical).

    Returns the vocabulary and the full document-frequency table.
    """
    document_frequency: Counter[str] = Counter()
    for tokens in documents_tokens:
        document_frequency.update(set(tokens))

    kept = sorted(
        (term for term, df in document_frequency.items() if df >= min_document_frequency),
        key=lambda term: (-document_frequency[term], term),
    )[:max_features]
    return {term: index for index, term in enumerate(kept)}, document_frequency


def tfidf_vector(
    tokens: Iterable[str],
    vocabulary: dict[str, int],
    idf: dict[str, float],
) -> dict[str, float]:
    """L2-normalized tf*idf weights for the in-vocabulary tokens."""
    term_frequency = Counter(token for token in tokens if token in vocabulary)
    vector = {term: tf * idf.get(term, 0.0) for term, tf in term_frequency.items()}
    magnitude = math.sqrt(sum(weight * weight for weight in vector.values()))
    if magnitude > 0:
        vector = {term: weight / magnitude for term, weight in vector.items()}
    return vector


def cosine_similarity(a: dict[str, float], b: dict[str, float]) -> float:
    """Dot product of two vectors that are already L2-normalized."""
    if len(b) < len(a):
        a, b = b, a
    return sum(weight * b[term] for term, weight in a.items() if term in b)


def build_model(
    category_texts: dict[str, list[str]],
    min_document_frequency: int,
    max_features: int,
) -> TfidfModel:
    """Train a model from per-category lists of document texts."""
    documents_tokens = [tokenize(text) for texts in category_texts.values() for text in texts]
    total_documents = len(documents_tokens)

    vocabulary, document_frequency = build_vocabulary(
        documents_tokens, min_document_frequency, max_features
    )
    idf = {term: math.log(total_documents / document_frequency[term]) for term in vocabulary}

    category_vectors = {}
    for category, texts in category_texts.items():
        corpus_tokens = tokenize(" ".join(texts))
        category_vectors[category] = tfidf_vector(corpus_tokens, vocabulary, idf)
        Log.debug(
            f"Created TF-IDF vector for category: {category} "
            f"({len(category_vectors[category])} features)"
        )

    return TfidfModel(
        vocabulary=vocabulary,
        inverse_document_frequency=idf,
        category_vectors=category_vectors,
        trained=True,
    )


class TfidfClassifier(BaseClassifier):
    """Classifies documents by cosine similarity to per-category TF-IDF centroids.

    The model is an immutable snapshot held in one attribute. ``train()`` runs
    under a lock and swaps in a fully built model, so concurrent ``classify()``
    calls see either the previous model or the new one.
    """

    name = "ml-tfidf"

    def __init__(
        self,
        *,
        text_source: DocumentTextSource,
        model_store: ModelStore,
        enabled: bool = False,
        confidence_threshold: float = 0.6,
        min_document_frequency: int = 2,
        max_features: int = 1000,
    ) -> None:
        self._text_source = text_source
        self._model_store = model_store
        self._enabled = enabled
        self._confidence_threshold = confidence_threshold
        self._min_document_frequency = min_document_frequency
        self._max_features = max_features
        self._model: TfidfModel | None = None
        self._train_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_trained(self) -> bool:
        model = self._model
        return model is not None and model.trained

    @property
    def is_ready(self) -> bool:
        return self._enabled and self.is_trained

    @property
    def categories(self) -> list[str]:
        model = self._model
        return model.categories if model is not None else []

    def load_model(self) -> bool:
        """Load a previously saved model. Returns True if one was found.

        Raises:
            ModelStoreError: if the stored model is unreadable.
        """
        model = self._model_store.load()
        if model is None:
            Log.warning(
                f"No existing ML model found at {self._model_store.path}. "
                "Model will need to be trained."
            )
            return False
        self._model = model
        Log.info(f"ML classifier model loaded from {self._model_store.path}")
        return True

    def classify(self, document: Document, text: str | None = None) -> list[CategoryAssignment]:
        if not self._enabled:
            Log.debug("ML classifier is disabled, returning empty classification")
            return []
        model = self._model
        if model is None or not model.trained:
            Log.warning("ML model not trained yet, returning empty classification")
            return []

        if text is None:
            try:
                text = self._text_source.fused_text(document)
            except (NotFoundError, PdfExtractionError, ValueError) as exc:
                Log.warning(f"ML classification skipped for document {document.id}: {exc}")
                return []

        document_vector = tfidf_vector(
            tokenize(text), model.vocabulary, model.inverse_document_frequency
        )
        assignments = []
        for category, category_vector in model.category_vectors.items():
            similarity = cosine_similarity(document_vector, category_vector)
            if similarity >= self._confidence_threshold:
                assignments.append(CategoryAssignment(category, similarity, self.tag))
        assignments.sort(key=lambda a: a.confidence, reverse=True)
        Log.debug(f"TF-IDF classification for {document.id}: {len(assignments)} categories")
        return assignments

    def train(self, documents: list[Document]) -> TrainingReport:
        """Rebuild the model from documents whose first category is the label.

        Raises:
            TrainingError: if no document yields usable text; the current model stays.
            ModelStoreError: if the new model cannot be saved; the current model stays.
        """
        Log.info(f"Starting ML model training with {len(documents)} documents")
        with self._train_lock:
            category_texts, skipped = self._collect_training_texts(documents)
            if not category_texts:
                raise TrainingError("No valid training documents found")

            Log.info(f"Training on {len(category_texts)} categories: {sorted(category_texts)}")
            model = build_model(category_texts, self._min_document_frequency, self._max_features)
            Log.info(
                f"Built vocabulary with {len(model.vocabulary)} terms "
                f"(min freq: {self._min_document_frequency}, max features: {self._max_features})"
            )
            self._model_store.save(model)
            self._model = model

        Log.info("ML model training completed successfully")
        return TrainingReport(
            documents_processed=sum(len(texts) for texts in category_texts.values()),
            documents_skipped=skipped,
            categories=model.categories,
            vocabulary_size=len(model.vocabulary),
        )

    def _collect_training_texts(self, documents: list[Document]) -> tuple[dict[str, list[str]], int]:
        category_texts: dict[str, list[str]] = {}
        skipped = 0
        for document in documents:
            if not document.categories:
                skipped += 1
                continue
            try:
                text = self._text_source.fused_text(document)
            except (NotFoundError, PdfExtractionError, ValueError) as exc:
                Log.warning(f"Failed to process document {document.id} for training: {exc}")
                skipped += 1
                continue
            category_texts.setdefault(document.categories[0].name, []).append(text)
        return category_texts, skipped
