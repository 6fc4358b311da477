from abc import ABC, abstractmethod

from linkshelf.rendering.models import RenderOptions


class BaseRenderer(ABC):
    """Contract for all web page to PDF renderers."""

    @abstractmethod
    def render(self, url: str, options: RenderOptions | None = None) -> bytes:
        """Render the page at ``url`` to PDF bytes.

        Args:
            url: Absolute http(s) URL of the page.
            options: Page format, background and timeout settings.

        Returns:
            The rendered PDF file content.

        Raises:
            RenderError: on navigation failure, timeout, or any browser error.
        """
