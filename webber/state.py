"""
Application state owned by the top-level UI controller.

Holds the single active generated site and the generating flag. Every
change goes through the mutators below.
"""

from typing import Optional

from pydantic import BaseModel

from webber.models import GeneratedSite


class AppState(BaseModel):
    """
    State of one user session.

    At most one site is active; starting a generation or closing the
    preview clears it.
    """

    active_site: Optional[GeneratedSite] = None
    is_generating: bool = False
    last_error: Optional[str] = None

    def begin_generation(self):
        self.active_site = None
        self.last_error = None
        self.is_generating = True

    def complete_generation(self, site: GeneratedSite):
        self.active_site = site
        self.is_generating = False

    def fail_generation(self, message: str):
        self.last_error = message
        self.is_generating = False

    def set_active_site(self, site: Optional[GeneratedSite]):
        self.active_site = site

    def close_preview(self):
        """Clear the active site; a no-op when nothing is shown."""
        self.active_site = None

    @property
    def has_active_site(self) -> bool:
        return self.active_site is not None
