import asyncio
import logging

from .config import Settings
from .errors import RenderError

logger = logging.getLogger(__name__)

# A4 at 96 DPI
VIEWPORT = {"width": 794, "height": 1123}
PDF_MARGIN = {"top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm"}

_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

try:
    from playwright.async_api import async_playwright

    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False
    logger.warning("Playwright not installed; PDF rendering will be unavailable")


class PdfRenderer:
    """Rasterises report HTML to an A4 PDF with headless Chromium."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def _print(self, html: str) -> bytes:
        timeout_ms = self.settings.render_timeout * 1000
        launch_options = {"headless": True, "args": _CHROMIUM_ARGS, "timeout": timeout_ms}
        if self.settings.chromium_executable_path:
            launch_options["executable_path"] = self.settings.chromium_executable_path

        async with async_playwright() as p:
            browser = await p.chromium.launch(**launch_options)
            try:
                page = await browser.new_page(viewport=VIEWPORT)
                page.set_default_timeout(timeout_ms)
                await page.emulate_media(media="print")
                await page.set_content(html, wait_until="networkidle", timeout=timeout_ms)
                return await page.pdf(
                    format="A4",
                    print_background=True,
                    prefer_css_page_size=True,
                    margin=PDF_MARGIN,
                    scale=1.0,
                    landscape=False,
                )
            finally:
                await browser.close()

    async def render(self, html: str) -> bytes:
        """Render ``html`` to PDF bytes. Failures are not retried."""
        if not PLAYWRIGHT_AVAILABLE:
            raise RenderError("PDF rendering is unavailable: Playwright is not installed.")

        try:
            pdf = await asyncio.wait_for(self._print(html), timeout=self.settings.render_timeout)
        except asyncio.TimeoutError as exc:
            raise RenderError(
                f"PDF generation timed out after {self.settings.render_timeout:.0f}s"
            ) from exc
        except Exception as exc:
            logger.exception("PDF generation failed")
            raise RenderError("Failed to generate PDF") from exc

        if not pdf:
            raise RenderError("PDF generation failed - empty buffer")

        logger.info("PDF generated, %d bytes", len(pdf))
        return pdf
