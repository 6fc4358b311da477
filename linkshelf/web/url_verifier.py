from urllib.parse import urlparse

import httpx

from linkshelf.logging.logger import Log
from linkshelf.web.models import VerificationResult

ALLOWED_SCHEMES = frozenset({"http", "https"})


class UrlVerifier:
    """Checks that a URL uses http(s) and answers a HEAD request with 2xx/3xx."""

    def __init__(self, *, timeout_seconds: int = 10, client: httpx.Client | None = None) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = client

    def verify(self, url: str) -> VerificationResult:
        parsed = urlparse(url)
        if parsed.scheme not in ALLOWED_SCHEMES:
            return VerificationResult(
                False, "Invalid URL scheme. Only HTTP and HTTPS are supported."
            )
        if not parsed.netloc:
            return VerificationResult(False, f"Invalid URL format: missing host in '{url}'")

        try:
            response = self._head(url)
        except httpx.TimeoutException:
            return VerificationResult(False, f"URL verification timed out after {self._timeout_seconds}s")
        except httpx.HTTPError as exc:
            return VerificationResult(False, f"URL is not accessible: {exc}")

        code = response.status_code
        Log.debug(f"HEAD {url} -> {code}")
        if 200 <= code < 400:
            return VerificationResult(True, "URL is accessible", code)
        if 400 <= code < 500:
            return VerificationResult(False, f"Client error: {code} {response.reason_phrase}", code)
        return VerificationResult(False, f"Server error: {code} {response.reason_phrase}", code)

    def _head(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.head(url, timeout=self._timeout_seconds)
        with httpx.Client(timeout=self._timeout_seconds) as client:
            return client.head(url)
