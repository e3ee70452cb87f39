"""
Data models and schemas for the sketch-to-website pipeline.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_PAGE_TYPE = "Landing Page"
DEFAULT_USER_PROMPT = "Convert this wireframe into a website."


class StrokeColor(str, Enum):
    """Stroke colors available on the drawing surface."""
    PEN = "#000000"
    MARKER = "#ef4444"


class CanvasConfig(BaseModel):
    """Fixed drawing surface configuration."""
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=800, gt=0)
    line_width: int = Field(default=3, gt=0)
    background: str = "#FFFFFF"

    class Config:
        frozen = True


class GenerationRequest(BaseModel):
    """A single sketch-to-site request, immutable once constructed."""
    image: str
    page_type: str = Field(default=DEFAULT_PAGE_TYPE, alias="type")
    user_prompt: str = Field(default=DEFAULT_USER_PROMPT, alias="prompt")

    class Config:
        frozen = True
        populate_by_name = True


class GeneratedSite(BaseModel):
    """Markup, stylesheet and script returned by the model."""
    html: str
    css: str
    js: str

    class Config:
        extra = "ignore"


class ErrorResponse(BaseModel):
    """Error body returned by the generation endpoint."""
    error: str
    raw: Optional[str] = None
