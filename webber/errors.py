"""
Error kinds raised along the generation flow.

Each error knows the HTTP status it maps to and how to render itself as an
``ErrorResponse`` body.
"""

from typing import Optional

from webber.models import ErrorResponse


class WebberError(Exception):
    """Base class for generation failures."""

    status_code = 500

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw = raw

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.message, raw=self.raw)

    def to_payload(self) -> dict:
        """Wire body; ``raw`` only appears when there is something to show."""
        return self.to_response().model_dump(exclude_none=True)


class MissingImageError(WebberError):
    """The request carried no sketch image."""

    status_code = 400

    def __init__(self, message: str = "Image is required"):
        super().__init__(message)


class InvalidRequestError(WebberError):
    """The request body could not be read as a generation request."""

    status_code = 400


class ModelInvocationError(WebberError):
    """The external model call failed (network, auth, quota, client setup)."""


class InvalidResponseFormatError(WebberError):
    """The model replied with something that is not a ``{html, css, js}`` object."""

    def __init__(self, raw: str, message: str = "Invalid AI response format"):
        super().__init__(message, raw=raw)
