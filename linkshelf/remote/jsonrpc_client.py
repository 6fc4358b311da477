import uuid
from typing import Any

import httpx

from linkshelf.database.models import CategoryAssignment
from linkshelf.logging.logger import Log
from linkshelf.remote.base import BaseRemoteClassifier
from linkshelf.remote.exceptions import (
    RemoteClassifierError,
    RemoteClassifierNetworkError,
    RemoteClassifierResponseError,
)
from linkshelf.remote.validator import build_classification, unwrap_result


class JsonRpcClassifierClient(BaseRemoteClassifier):
    """Calls a ``classify_document`` tool over JSON-RPC 2.0 on HTTP POST."""

    def __init__(
        self,
        *,
        server_url: str,
        timeout_seconds: int,
        tool_name: str = "classify_document",
        client: httpx.Client | None = None,
    ) -> None:
        self._server_url = server_url
        self._tool_name = tool_name
        self._client = client or httpx.Client(timeout=timeout_seconds)

    @property
    def server_url(self) -> str:
        return self._server_url

    def classify(
        self,
        document_id: str,
        title: str | None,
        description: str | None,
        content: str,
    ) -> list[CategoryAssignment]:
        Log.debug(f"Calling remote classifier for document {document_id}")
        result = self._call(
            "tools/call",
            {
                "name": self._tool_name,
                "arguments": {
                    "documentId": document_id,
                    "title": title or "",
                    "description": description or "",
                    "content": content or "",
                },
            },
        )
        classification = build_classification(result)
        tag = f"mcp-{classification.model or 'ai'}"
        assignments = [
            CategoryAssignment(p.name, p.confidence, tag) for p in classification.categories
        ]
        Log.info(
            f"Remote classification returned {len(assignments)} categories "
            f"for document {document_id}"
        )
        return assignments

    def list_tools(self) -> Any:
        return self._call("tools/list", {})

    def check_connection(self) -> bool:
        """Ping the server, falling back to tools/list. Never raises."""
        try:
            try:
                self._call("ping", {})
            except RemoteClassifierResponseError:
                self.list_tools()
        except RemoteClassifierError as exc:
            Log.warning(
                f"Remote classifier connection test failed: {exc}. "
                "Classification will continue without it."
            )
            return False
        Log.info(f"Remote classifier reachable at {self._server_url}")
        return True

    def close(self) -> None:
        self._client.close()

    def _call(self, method: str, params: dict[str, Any]) -> Any:
        request = {
            "jsonrpc": "2.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": params,
        }
        try:
            response = self._client.post(
                self._server_url,
                json=request,
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise RemoteClassifierNetworkError(f"Remote classifier timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise RemoteClassifierNetworkError(
                f"Failed to reach remote classifier at {self._server_url}: {exc}"
            ) from exc

        if response.status_code != 200:
            raise RemoteClassifierNetworkError(
                f"Remote classifier returned status {response.status_code}: {response.text}"
            )
        try:
            envelope = response.json()
        except ValueError as exc:
            raise RemoteClassifierResponseError(f"Invalid JSON response: {exc}") from exc
        return unwrap_result(envelope)
