import json
import os
import tempfile
from pathlib import Path
from typing import Any

from linkshelf.classification.exceptions import ModelStoreError
from linkshelf.classification.models import TfidfModel
from linkshelf.logging.logger import Log


class ModelStore:
    """Persists the TF-IDF model as a JSON document at a fixed path."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TfidfModel | None:
        """Read the stored model, or None when no model has been saved yet.

        Raises:
            ModelStoreError: if the file exists but cannot be parsed.
        """
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ModelStoreError(f"Failed to read model from {self._path}: {exc}") from exc
        model = _model_from_dict(data)
        Log.debug(
            f"Loaded model: {len(model.category_vectors)} categories, "
            f"{len(model.vocabulary)} vocabulary terms"
        )
        return model

    def save(self, model: TfidfModel) -> None:
        """Write the model atomically: a temp file in the same directory replaces the target.

        Raises:
            ModelStoreError: if the file cannot be written.
        """
        payload = {
            "vocabulary": model.vocabulary,
            "inverseDocumentFrequency": model.inverse_document_frequency,
            "categoryVectors": model.category_vectors,
            "trained": model.trained,
        }
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ModelStoreError(f"Failed to save model to {self._path}: {exc}") from exc
        Log.info(f"ML model saved to {self._path}")


def _model_from_dict(data: Any) -> TfidfModel:
    if not isinstance(data, dict):
        raise ModelStoreError("Model file must contain a JSON object")
    vocabulary = data.get("vocabulary")
    idf = data.get("inverseDocumentFrequency")
    vectors = data.get("categoryVectors")
    if not isinstance(vocabulary, dict) or not isinstance(idf, dict) or not isinstance(vectors, dict):
        raise ModelStoreError(
            "Model file must define 'vocabulary', 'inverseDocumentFrequency' and 'categoryVectors'"
        )
    try:
        return TfidfModel(
            vocabulary={str(term): int(index) for term, index in vocabulary.items()},
            inverse_document_frequency={str(term): float(v) for term, v in idf.items()},
            category_vectors={
                str(category): {str(term): float(w) for term, w in vector.items()}
                for category, vector in vectors.items()
            },
            trained=bool(data.get("trained", False)),
        )
    except (TypeError, ValueError, AttributeError) as exc:
        raise ModelStoreError(f"Model file has invalid values: {exc}") from exc
