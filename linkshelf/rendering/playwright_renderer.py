from typing import ClassVar

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from linkshelf.logging.logger import Log
from linkshelf.rendering.base import BaseRenderer
from linkshelf.rendering.exceptions import RenderError
from linkshelf.rendering.models import RenderOptions

CONTENT_LOAD_WAIT_MS = 2000


class PlaywrightRenderer(BaseRenderer):
    """Renders pages to PDF with headless Chromium.

    A browser is launched per call, so concurrent ingestions on different
    threads never share Playwright state.
    """

    USER_AGENT: ClassVar[str] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    LAUNCH_ARGS: ClassVar[list[str]] = [
        "--disable-blink-features=AutomationControlled",
        "--disable-dev-shm-usage",
        "--no-sandbox",
    ]
    EXTRA_HEADERS: ClassVar[dict[str, str]] = {
        "Accept-Language": "en-US,en;q=0.9",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Upgrade-Insecure-Requests": "1",
    }

    def render(self, url: str, options: RenderOptions | None = None) -> bytes:
        opts = options or RenderOptions()
        timeout_ms = opts.timeout_seconds * 1000
        Log.info(f"Rendering PDF for {url}")
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=True, args=self.LAUNCH_ARGS)
                try:
                    context = browser.new_context(
                        user_agent=self.USER_AGENT,
                        viewport={"width": 1920, "height": 1080},
                        locale="en-US",
                        extra_http_headers=self.EXTRA_HEADERS,
                    )
                    page = context.new_page()
                    page.set_default_timeout(timeout_ms)
                    page.goto(url, timeout=timeout_ms, wait_until="networkidle")
                    # late-loading content
                    page.wait_for_timeout(CONTENT_LOAD_WAIT_MS)
                    pdf_bytes = page.pdf(
                        format=opts.page_format,
                        print_background=opts.print_background,
                        display_header_footer=False,
                        page_ranges="" if opts.full_page else "1",
                    )
                    context.close()
                finally:
                    browser.close()
        except PlaywrightError as exc:
            raise RenderError(f"Failed to render {url}: {exc}") from exc
        except Exception as exc:
            raise RenderError(f"Unexpected error rendering {url}: {exc}") from exc

        Log.info(f"Rendered {len(pdf_bytes)} bytes for {url}")
        return pdf_bytes
