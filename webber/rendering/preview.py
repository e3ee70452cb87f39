"""
Sandboxed preview of generated sites, with optional Playwright snapshots.
"""

import asyncio
import html
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import async_playwright

from webber.models import GeneratedSite


# Scripts may run, but without allow-same-origin the frame gets an opaque
# origin and cannot reach the host page, its storage or its credentials.
PREVIEW_SANDBOX = "allow-scripts"

PREVIEW_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <style>{css}</style>
  </head>
  <body>
    {html}
    <script>{js}</script>
  </body>
</html>
"""


def build_preview_document(site: GeneratedSite) -> str:
    """
    Build the standalone preview document for a generated site.

    Args:
        site: Generated markup, stylesheet and script.

    Returns:
        HTML document with the CSS in the head and markup plus script in the body.
    """
    return PREVIEW_TEMPLATE.format(css=site.css, html=site.html, js=site.js)


def sandboxed_iframe(document: str, height: int = 600, title: str = "Preview") -> str:
    """
    Wrap a document in a sandboxed iframe via ``srcdoc``.

    Args:
        document: Full HTML document.
        height: Frame height in pixels.
        title: Accessible frame title.

    Returns:
        ``<iframe>`` markup safe to embed in a host page.
    """
    return (
        f'<iframe title="{html.escape(title)}" sandbox="{PREVIEW_SANDBOX}" '
        f'style="width: 100%; height: {height}px; border: 0;" '
        f'srcdoc="{html.escape(document, quote=True)}"></iframe>'
    )


class PreviewRenderer:
    """Holds the one site currently shown on the preview surface."""

    def __init__(self, headless: bool = True, browser_type: str = "chromium"):
        """
        Initialize the renderer.

        Args:
            headless: Whether to run the snapshot browser headless.
            browser_type: Browser to use for snapshots (chromium, firefox, webkit).
        """
        self.headless = headless
        self.browser_type = browser_type
        self._site: Optional[GeneratedSite] = None
        self._document: Optional[str] = None

    @property
    def site(self) -> Optional[GeneratedSite]:
        return self._site

    @property
    def document(self) -> Optional[str]:
        return self._document

    @property
    def is_open(self) -> bool:
        return self._site is not None

    def open(self, site: GeneratedSite) -> str:
        """
        Show a site, replacing whatever was shown before.

        The document is rebuilt from the three strings every time.

        Args:
            site: Site to display.

        Returns:
            The loaded preview document.
        """
        self._site = site
        self._document = build_preview_document(site)
        return self._document

    def close(self):
        """Unload the preview surface. Closing an empty surface does nothing."""
        self._site = None
        self._document = None

    def iframe_html(self, height: int = 600) -> Optional[str]:
        """Sandboxed iframe for the open site, or None when closed."""
        if self._document is None:
            return None
        return sandboxed_iframe(self._document, height=height)

    async def _screenshot_async(
        self,
        document: str,
        output_path: Path,
        width: int,
        height: int,
        wait_time: int
    ):
        async with async_playwright() as p:
            if self.browser_type == "chromium":
                browser = await p.chromium.launch(headless=self.headless)
            elif self.browser_type == "firefox":
                browser = await p.firefox.launch(headless=self.headless)
            elif self.browser_type == "webkit":
                browser = await p.webkit.launch(headless=self.headless)
            else:
                raise ValueError(f"Unsupported browser: {self.browser_type}")

            context = await browser.new_context(
                viewport={"width": width, "height": height},
                device_scale_factor=1
            )
            page = await context.new_page()
            await page.set_content(document, wait_until="networkidle")
            await page.wait_for_timeout(wait_time)

            await page.screenshot(path=str(output_path), full_page=True)

            await context.close()
            await browser.close()

    def screenshot(
        self,
        site: GeneratedSite,
        output_path: Union[str, Path],
        width: int = 1280,
        height: int = 800,
        wait_time: int = 1000
    ) -> Path:
        """
        Render a site headlessly and capture a full-page screenshot.

        Args:
            site: Site to render.
            output_path: Where to save the PNG.
            width: Viewport width.
            height: Viewport height.
            wait_time: Time to wait for rendering (ms).

        Returns:
            Path to saved screenshot.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        asyncio.run(
            self._screenshot_async(
                build_preview_document(site), output_path, width, height, wait_time
            )
        )
        return output_path
