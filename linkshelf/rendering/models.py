from dataclasses import dataclass


@dataclass(frozen=True)
class RenderOptions:
    """Options passed to the renderer for a single page."""

    timeout_seconds: int = 30
    page_format: str = "A4"
    full_page: bool = True
    print_background: bool = True
