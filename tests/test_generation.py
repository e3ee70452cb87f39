"""
Tests for the generation client.
"""

import asyncio

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from conftest import RecordingChatModel
from webber.errors import (
    InvalidResponseFormatError,
    MissingImageError,
    ModelInvocationError,
)
from webber.models import GeneratedSite, GenerationRequest
from webber.pipeline.generation import ResponseParser, SiteGenerator

SCENARIO_IMAGE = "data:image/png;base64,iVBORw0KGgo..."


def make_generator(reply="", error=None, provider="openai"):
    llm = RecordingChatModel(reply=reply, error=error)
    return SiteGenerator(provider=provider, llm=llm), llm


def test_strip_code_fences():
    text = '```json\n{"html":"","css":"","js":""}\n```'
    assert ResponseParser.strip_code_fences(text) == '{"html":"","css":"","js":""}'


def test_parse_site_without_fences():
    site = ResponseParser.parse_site('{"html":"<p>x</p>","css":"","js":"alert(1)"}')
    assert site == GeneratedSite(html="<p>x</p>", css="", js="alert(1)")


@pytest.mark.parametrize("reply", [
    "not json",
    '["html", "css", "js"]',
    '{"html": "<p></p>", "css": ""}',
    '{"html": "<p></p>", "css": "", "js": null}',
    "[" * 100000 + "]" * 100000,
])
def test_parse_site_rejects_bad_shapes(reply):
    with pytest.raises(InvalidResponseFormatError) as exc_info:
        ResponseParser.parse_site(reply)
    assert exc_info.value.raw == reply


def test_landing_page_scenario(site_reply):
    """Data-URI prefix is stripped and the fenced reply is parsed."""
    generator, llm = make_generator(reply=site_reply)

    site = generator.generate(GenerationRequest(image=SCENARIO_IMAGE, type="Landing Page"))

    assert site == GeneratedSite(html="<h1>Hi</h1>", css="h1{color:red}", js="")
    assert len(llm.calls) == 1

    system, human = llm.calls[0]
    assert isinstance(system, SystemMessage)
    assert "Website type: Landing Page" in system.content
    assert isinstance(human, HumanMessage)

    image_part = [p for p in human.content if p["type"] == "image_url"][0]
    assert image_part["image_url"]["url"] == "data:image/png;base64,iVBORw0KGgo..."


def test_anthropic_message_format(site_reply):
    generator, llm = make_generator(reply=site_reply, provider="anthropic")

    generator.generate(GenerationRequest(image=SCENARIO_IMAGE))

    human = llm.calls[0][1]
    image_part = [p for p in human.content if p["type"] == "image"][0]
    assert image_part["source"] == {
        "type": "base64",
        "media_type": "image/png",
        "data": "iVBORw0KGgo...",
    }


def test_instruction_block_carries_fidelity_rules():
    generator, _ = make_generator()
    system = generator.build_messages(GenerationRequest(image="abc", type="Blog"))[0]

    for phrase in ["Count every shape", "picsum.photos", "border-radius: 50%", "#005461",
                   '{"html": "...", "css": "...", "js": ""}', "Website type: Blog"]:
        assert phrase in system.content


def test_user_prompt_is_sent_with_image():
    generator, _ = make_generator()
    human = generator.build_messages(
        GenerationRequest(image="abc", prompt="Use a dark header")
    )[1]
    assert {"type": "text", "text": "Use a dark header"} in human.content


def test_empty_user_prompt_is_omitted():
    generator, _ = make_generator()
    human = generator.build_messages(GenerationRequest(image="abc", prompt=""))[1]
    assert [p["type"] for p in human.content] == ["image_url"]


@pytest.mark.parametrize("image", ["", "data:image/png;base64,"])
def test_missing_image_rejected_before_model_call(image):
    generator, llm = make_generator(reply='{"html":"","css":"","js":""}')

    with pytest.raises(MissingImageError):
        generator.generate(GenerationRequest(image=image))

    assert llm.calls == []


def test_invalid_reply_reports_raw_text():
    generator, _ = make_generator(reply="not json")

    with pytest.raises(InvalidResponseFormatError) as exc_info:
        generator.generate(GenerationRequest(image=SCENARIO_IMAGE))

    assert exc_info.value.message == "Invalid AI response format"
    assert exc_info.value.raw == "not json"


def test_model_failure_message_surfaces_verbatim():
    generator, llm = make_generator(error=RuntimeError("You exceeded your current quota"))

    with pytest.raises(ModelInvocationError) as exc_info:
        generator.generate(GenerationRequest(image=SCENARIO_IMAGE))

    assert exc_info.value.message == "You exceeded your current quota"
    assert len(llm.calls) == 1


def test_agenerate(site_reply):
    generator, llm = make_generator(reply=site_reply)

    site = asyncio.run(generator.agenerate(GenerationRequest(image=SCENARIO_IMAGE)))

    assert site.html == "<h1>Hi</h1>"
    assert len(llm.calls) == 1


def test_response_text_joins_content_blocks():
    class Reply:
        content = [{"type": "text", "text": '{"html":'}, {"type": "text", "text": '"","css":"","js":""}'}]

    assert ResponseParser.response_text(Reply()) == '{"html":"","css":"","js":""}'


def test_unsupported_provider():
    with pytest.raises(ValueError):
        SiteGenerator(provider="cohere")


def test_default_models():
    assert SiteGenerator(provider="openai").model_name == "gpt-4o"
    assert SiteGenerator(provider="anthropic", model_name="claude-x").model_name == "claude-x"
