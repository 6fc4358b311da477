from dataclasses import dataclass, field


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of the URL accessibility check."""

    accessible: bool
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class PageMetadata:
    """Metadata scraped from a page's HTML head."""

    title: str
    description: str
    canonical_url: str
    meta_tags: dict[str, str] = field(default_factory=dict)
