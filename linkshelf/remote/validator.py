"""Validates the JSON-RPC envelope and classify_document result shape."""

from typing import Any

from linkshelf.remote.exceptions import RemoteClassifierResponseError
from linkshelf.remote.models import CategoryPrediction, RemoteClassification


def unwrap_result(envelope: Any) -> Any:
    """Return ``result`` from a JSON-RPC 2.0 response, raising on ``error``."""
    if not isinstance(envelope, dict):
        raise RemoteClassifierResponseError("JSON-RPC response must be an object")
    error = envelope.get("error")
    if error is not None:
        if isinstance(error, dict):
            raise RemoteClassifierResponseError(
                f"Remote classifier error {error.get('code')}: {error.get('message')}"
            )
        raise RemoteClassifierResponseError(f"Remote classifier error: {error}")
    if "result" not in envelope:
        raise RemoteClassifierResponseError("JSON-RPC response has neither 'result' nor 'error'")
    return envelope["result"]


def build_classification(raw: Any) -> RemoteClassification:
    """Validate a classify_document result.

    Raises:
        RemoteClassifierResponseError: on any shape violation.
    """
    if not isinstance(raw, dict):
        raise RemoteClassifierResponseError("'result' must be an object")
    categories = raw.get("categories") or []
    if not isinstance(categories, list):
        raise RemoteClassifierResponseError("'result.categories' must be a list")
    model = raw.get("model")
    if model is not None and not isinstance(model, str):
        raise RemoteClassifierResponseError("'result.model' must be a string or null")
    overall = raw.get("confidence")
    if overall is not None and not _is_number(overall):
        raise RemoteClassifierResponseError("'result.confidence' must be a number or null")

    return RemoteClassification(
        categories=[_build_prediction(item, i) for i, item in enumerate(categories)],
        model=model,
        confidence=float(overall) if overall is not None else None,
    )


def _build_prediction(raw: Any, index: int) -> CategoryPrediction:
    if not isinstance(raw, dict):
        raise RemoteClassifierResponseError(f"Category at index {index} must be an object")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise RemoteClassifierResponseError(
            f"Category at index {index}: 'name' must be a non-empty string"
        )
    confidence = raw.get("confidence")
    if not _is_number(confidence):
        raise RemoteClassifierResponseError(
            f"Category at index {index}: 'confidence' must be a number"
        )
    reasoning = raw.get("reasoning") or ""
    if not isinstance(reasoning, str):
        raise RemoteClassifierResponseError(
            f"Category at index {index}: 'reasoning' must be a string"
        )
    return CategoryPrediction(
        name=name,
        confidence=max(0.0, min(1.0, float(confidence))),
        reasoning=reasoning,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
