"""
Tests for data models and error payloads.
"""

import pytest
from pydantic import ValidationError

from webber.errors import (
    InvalidResponseFormatError,
    MissingImageError,
    ModelInvocationError,
)
from webber.models import (
    CanvasConfig,
    GeneratedSite,
    GenerationRequest,
    StrokeColor,
)


def test_stroke_colors():
    """Pen and marker are the only stroke colors."""
    assert StrokeColor.PEN.value == "#000000"
    assert StrokeColor.MARKER.value == "#ef4444"
    assert len(StrokeColor) == 2


def test_canvas_config_defaults():
    config = CanvasConfig()
    assert (config.width, config.height) == (1280, 800)
    assert config.line_width == 3
    assert config.background == "#FFFFFF"


def test_canvas_config_rejects_empty_surface():
    with pytest.raises(ValidationError):
        CanvasConfig(width=0, height=100)


def test_generation_request_wire_aliases():
    """The endpoint body uses `type` and `prompt`."""
    request = GenerationRequest.model_validate(
        {"image": "abc", "type": "Portfolio", "prompt": "Make it blue"}
    )
    assert request.page_type == "Portfolio"
    assert request.user_prompt == "Make it blue"


def test_generation_request_defaults_and_field_names():
    request = GenerationRequest(image="abc")
    assert request.page_type == "Landing Page"
    assert request.user_prompt

    by_name = GenerationRequest(image="abc", page_type="Blog", user_prompt="")
    assert by_name.page_type == "Blog"


def test_generation_request_is_immutable():
    request = GenerationRequest(image="abc")
    with pytest.raises(ValidationError):
        request.image = "other"


def test_generated_site_requires_all_fields():
    with pytest.raises(ValidationError):
        GeneratedSite.model_validate({"html": "<p></p>", "css": ""})


def test_missing_image_error_payload():
    error = MissingImageError()
    assert error.status_code == 400
    assert error.to_payload() == {"error": "Image is required"}


def test_invalid_response_format_carries_raw():
    error = InvalidResponseFormatError(raw="not json")
    assert error.status_code == 500
    assert error.to_payload() == {"error": "Invalid AI response format", "raw": "not json"}


def test_model_invocation_error_keeps_message():
    error = ModelInvocationError("Incorrect API key provided")
    assert error.to_payload() == {"error": "Incorrect API key provided"}
