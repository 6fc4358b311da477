import httpx
from bs4 import BeautifulSoup

from linkshelf.web.exceptions import MetadataExtractionError
from linkshelf.web.models import PageMetadata

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
DEFAULT_TITLE = "Untitled Document"


class HtmlMetadataExtractor:
    """Fetches a page and reads title, description, canonical URL and meta tags."""

    def __init__(self, *, timeout_seconds: int = 10, client: httpx.Client | None = None) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = client

    def extract(self, url: str) -> PageMetadata:
        """Return the page metadata.

        Raises:
            MetadataExtractionError: if the page cannot be fetched.
        """
        html = self._fetch(url)
        return parse_metadata(html, url)

    def _fetch(self, url: str) -> str:
        headers = {"User-Agent": USER_AGENT}
        try:
            if self._client is not None:
                response = self._client.get(
                    url, headers=headers, timeout=self._timeout_seconds, follow_redirects=True
                )
            else:
                with httpx.Client(timeout=self._timeout_seconds, follow_redirects=True) as client:
                    response = client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise MetadataExtractionError(f"Failed to fetch {url}: {exc}") from exc
        return response.text


def parse_metadata(html: str, url: str) -> PageMetadata:
    """Read metadata from raw HTML, falling back to the URL where tags are missing."""
    soup = BeautifulSoup(html, "html.parser")

    title = soup.title.get_text(strip=True) if soup.title else ""
    if not title:
        title = DEFAULT_TITLE

    description = _meta_content(soup, name="description") or _meta_content(
        soup, prop="og:description"
    )
    if not description:
        description = f"PDF snapshot of {url}"

    canonical_url = ""
    link = soup.find("link", rel="canonical")
    if link is not None:
        canonical_url = str(link.get("href") or "").strip()
    if not canonical_url:
        canonical_url = _meta_content(soup, prop="og:url") or url

    meta_tags: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        content = str(meta.get("content") or "").strip()
        if not content:
            continue
        key = meta.get("name") or meta.get("property")
        if key:
            meta_tags[str(key)] = content

    return PageMetadata(
        title=title,
        description=description,
        canonical_url=canonical_url,
        meta_tags=meta_tags,
    )


def _meta_content(soup: BeautifulSoup, *, name: str | None = None, prop: str | None = None) -> str:
    attrs = {"name": name} if name is not None else {"property": prop}
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return str(tag.get("content") or "").strip()
