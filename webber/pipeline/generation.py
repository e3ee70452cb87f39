"""
LangChain-based generation of a website from a wireframe sketch.
"""

import json
import uuid
from datetime import datetime
from typing import Any, List, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from webber.config import DEFAULT_MODELS, Settings
from webber.errors import (
    InvalidResponseFormatError,
    MissingImageError,
    ModelInvocationError,
)
from webber.io.sketch_canvas import strip_data_uri_prefix
from webber.models import GeneratedSite, GenerationRequest
from webber.utils.llm_logger import LoggedLLM, get_logger


SYSTEM_PROMPT = """You are a WIREFRAME TO HTML CONVERTER. Your ONLY job is to replicate the EXACT visual layout from the input image.

# ABSOLUTE RULES - DO NOT BREAK THESE:

1. COPY THE LAYOUT EXACTLY
   - If the user drew a box at the top-left, put an element at top-left (top: 5%; left: 5%)
   - If there are 3 boxes in a row, create exactly 3 elements in a row
   - If something is centered, center it with margin: auto or flexbox
   - Count every shape and recreate ALL of them
   - DO NOT add extra elements that aren't in the drawing
   - DO NOT remove elements that ARE in the drawing

2. MATCH SIZES PROPORTIONALLY
   - Small drawn box = small element (width: 15-25%)
   - Medium drawn box = medium element (width: 30-50%)
   - Large drawn box = large element (width: 60-90%)
   - Full-width drawn line = full-width element (width: 100%)

3. ELEMENT MAPPING
   - Any rectangle = <div> with border or background
   - Scribbles/wavy lines = Lorem ipsum text in a <p>
   - Box with X inside = <img src="https://picsum.photos/400/300">
   - Circle = border-radius: 50% div or avatar
   - Hand-written text = Actual <p> or <h1> text (try to read what was written)

4. USE THIS CSS STRUCTURE
   body {{ margin: 0; font-family: system-ui, sans-serif; }}
   .container {{ width: 100vw; min-height: 100vh; position: relative; }}
   Each element uses percentage-based width/height and positioning.

5. COLORS
   - Background: white
   - Borders/accents: #005461 (teal) or #4988C4 (blue)
   - Text: #1a1a1a

## OUTPUT (JSON only, no markdown):
{{"html": "...", "css": "...", "js": ""}}
Exactly these three string fields, nothing before or after the object.

Website type: {page_type}

CRITICAL: Your job is NOT to design a beautiful website. Your job is to COPY the user's drawing into HTML/CSS as faithfully as possible. If it looks rough, that's OK - accuracy matters more than beauty."""


class ResponseParser:
    """Parses model replies into a GeneratedSite."""

    @staticmethod
    def strip_code_fences(response_text: str) -> str:
        """
        Remove markdown code fence markers from a model reply.

        Args:
            response_text: Raw model reply.

        Returns:
            Reply with every ```json and ``` marker removed, trimmed.
        """
        return response_text.replace("```json", "").replace("```", "").strip()

    @classmethod
    def parse_site(cls, response_text: str) -> GeneratedSite:
        """
        Parse a model reply into a GeneratedSite.

        Args:
            response_text: Raw model reply, possibly fenced.

        Returns:
            GeneratedSite with html, css and js.

        Raises:
            InvalidResponseFormatError: The reply is not a JSON object with
                string ``html``, ``css`` and ``js`` fields.
        """
        cleaned = cls.strip_code_fences(response_text)
        try:
            data = json.loads(cleaned)
        except (ValueError, RecursionError):
            raise InvalidResponseFormatError(raw=response_text)

        if not isinstance(data, dict):
            raise InvalidResponseFormatError(raw=response_text)

        try:
            return GeneratedSite.model_validate(data, strict=True)
        except ValidationError:
            raise InvalidResponseFormatError(raw=response_text)

    @staticmethod
    def response_text(response: Any) -> str:
        """Flatten a chat model response into plain text."""
        content = getattr(response, "content", response)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict) and item.get("type") == "text":
                    parts.append(item.get("text", ""))
            return "".join(parts)
        return str(content)


def new_request_id() -> str:
    """Identifier used to group log records of one generation."""
    return f"request_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


class SiteGenerator:
    """Generates a website (HTML/CSS/JS) from a single wireframe sketch."""

    def __init__(
        self,
        provider: str = "openai",
        model_name: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        api_key: Optional[str] = None,
        llm: Optional[Any] = None
    ):
        """
        Initialize the generator.

        Args:
            provider: LLM provider (openai or anthropic).
            model_name: Model name (optional, uses defaults).
            temperature: Generation temperature.
            max_tokens: Maximum tokens to generate.
            api_key: API key (optional, the client falls back to the environment).
            llm: Prebuilt LangChain chat model; skips client construction.
        """
        self.provider = provider.lower()
        if self.provider not in DEFAULT_MODELS:
            raise ValueError(f"Unsupported provider: {provider}")

        self.model_name = model_name or DEFAULT_MODELS[self.provider]
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key
        self.parser = ResponseParser()
        self.logger = get_logger()
        self._llm = llm

    @classmethod
    def from_settings(cls, settings: Settings) -> "SiteGenerator":
        return cls(
            provider=settings.provider,
            model_name=settings.model_name,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            api_key=settings.api_key,
        )

    def _create_llm(self):
        # Built lazily so a missing credential fails at the model boundary
        if self._llm is not None:
            return self._llm

        kwargs = {
            "model": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key

        if self.provider == "openai":
            self._llm = ChatOpenAI(**kwargs)
        else:
            self._llm = ChatAnthropic(**kwargs)
        return self._llm

    def build_messages(self, request: GenerationRequest) -> List:
        """
        Create prompt messages for the LLM.

        Args:
            request: Generation request; its image may carry a data-URI prefix.

        Returns:
            List of messages: the fixed instructions, then the sketch.
        """
        image_data = strip_data_uri_prefix(request.image)

        messages = [
            SystemMessage(content=SYSTEM_PROMPT.format(page_type=request.page_type))
        ]

        content = []
        if request.user_prompt:
            content.append({"type": "text", "text": request.user_prompt})

        if self.provider == "openai":
            content.append({
                "type": "image_url",
                "image_url": {"url": f"data:image/png;base64,{image_data}"}
            })
        else:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/png",
                    "data": image_data
                }
            })

        messages.append(HumanMessage(content=content))
        return messages

    def _prepare(self, request: GenerationRequest, request_id: str):
        if not request.image or not strip_data_uri_prefix(request.image):
            raise MissingImageError()

        messages = self.build_messages(request)

        try:
            llm = self._create_llm()
        except Exception as e:
            self.logger.log_error("generator", e, request_id=request_id)
            raise ModelInvocationError(str(e) or type(e).__name__) from e

        logged = LoggedLLM(
            llm_instance=llm,
            component="generator",
            provider=self.provider,
            model=self.model_name,
            request_id=request_id,
            metadata={"page_type": request.page_type},
        )
        return logged, messages

    def _finish(self, response: Any, request_id: str) -> GeneratedSite:
        text = self.parser.response_text(response)
        try:
            return self.parser.parse_site(text)
        except InvalidResponseFormatError as e:
            self.logger.log_error("generator", e, request_id=request_id, raw=text)
            raise

    def generate(
        self,
        request: GenerationRequest,
        request_id: Optional[str] = None
    ) -> GeneratedSite:
        """
        Generate a website from a sketch.

        Args:
            request: Sketch image plus page type and prompt.
            request_id: Optional identifier for log grouping.

        Returns:
            GeneratedSite object.

        Raises:
            MissingImageError: No image in the request; no model call is made.
            ModelInvocationError: The model call failed.
            InvalidResponseFormatError: The reply could not be parsed.
        """
        request_id = request_id or new_request_id()
        llm, messages = self._prepare(request, request_id)

        try:
            response = llm.invoke(messages)
        except Exception as e:
            raise ModelInvocationError(str(e) or type(e).__name__) from e

        return self._finish(response, request_id)

    async def agenerate(
        self,
        request: GenerationRequest,
        request_id: Optional[str] = None
    ) -> GeneratedSite:
        """Async twin of ``generate``; awaits the model without blocking the loop."""
        request_id = request_id or new_request_id()
        llm, messages = self._prepare(request, request_id)

        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            raise ModelInvocationError(str(e) or type(e).__name__) from e

        return self._finish(response, request_id)
