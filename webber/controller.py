"""
Top-level controller tying the drawing surface, generator, preview and export
together for one user session.
"""

from typing import Optional

from webber.errors import WebberError
from webber.export.packager import package_site
from webber.io.sketch_canvas import SketchCanvas
from webber.models import (
    DEFAULT_PAGE_TYPE,
    DEFAULT_USER_PROMPT,
    GeneratedSite,
    GenerationRequest,
)
from webber.pipeline.generation import SiteGenerator
from webber.rendering.preview import PreviewRenderer
from webber.state import AppState


class SketchController:
    """Drives generation from the canvas and keeps state and preview in step."""

    def __init__(
        self,
        generator: SiteGenerator,
        canvas: Optional[SketchCanvas] = None,
        state: Optional[AppState] = None,
        preview: Optional[PreviewRenderer] = None
    ):
        self.generator = generator
        self.canvas = canvas or SketchCanvas()
        self.state = state or AppState()
        self.preview = preview or PreviewRenderer()

    def _begin(self, page_type: str, user_prompt: str) -> Optional[GenerationRequest]:
        if self.state.is_generating:
            return None
        self.state.begin_generation()
        self.preview.close()
        # The sketch is serialized per request and not kept afterwards
        return GenerationRequest(
            image=self.canvas.to_data_url(),
            page_type=page_type,
            user_prompt=user_prompt,
        )

    def _apply(self, site: GeneratedSite) -> GeneratedSite:
        self.state.complete_generation(site)
        self.preview.open(site)
        return site

    def generate(
        self,
        page_type: str = DEFAULT_PAGE_TYPE,
        user_prompt: str = DEFAULT_USER_PROMPT
    ) -> Optional[GeneratedSite]:
        """
        Generate a site from the current sketch.

        Returns:
            The new active site, or None when a request is already pending
            or the generation failed (see ``state.last_error``).
        """
        request = self._begin(page_type, user_prompt)
        if request is None:
            return None
        try:
            site = self.generator.generate(request)
        except WebberError as e:
            self.state.fail_generation(e.message)
            return None
        except Exception as e:
            self.state.fail_generation(str(e) or type(e).__name__)
            raise
        return self._apply(site)

    async def agenerate(
        self,
        page_type: str = DEFAULT_PAGE_TYPE,
        user_prompt: str = DEFAULT_USER_PROMPT
    ) -> Optional[GeneratedSite]:
        """Async twin of ``generate``."""
        request = self._begin(page_type, user_prompt)
        if request is None:
            return None
        try:
            site = await self.generator.agenerate(request)
        except WebberError as e:
            self.state.fail_generation(e.message)
            return None
        except Exception as e:
            self.state.fail_generation(str(e) or type(e).__name__)
            raise
        return self._apply(site)

    def close_preview(self):
        self.state.close_preview()
        self.preview.close()

    def download(self) -> Optional[bytes]:
        """Zip archive of the active site, or None when nothing is active."""
        if self.state.active_site is None:
            return None
        return package_site(self.state.active_site)
