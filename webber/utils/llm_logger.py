"""
LLM Debug Logger for tracking generation calls.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis

Failures are always reported on the console, whatever the level.
"""

import json
import os
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


class LLMLogger:
    """Centralized logger for LLM API calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()

        level_str = os.getenv("LLM_DEBUG_LEVEL", "NONE").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        self.log_to_file = os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true"
        self.log_dir = Path(os.getenv("LLM_LOG_DIR", "outputs"))

        self._initialized = True

    def _should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        """Get ISO8601 formatted timestamp."""
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def _summarize_image_part(self, item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Replace an inline image content part with a size summary."""
        if item.get("type") == "image_url":
            url = item.get("image_url", {})
            url_value = url.get("url", "") if isinstance(url, dict) else str(url)
            data = url_value.split("base64,", 1)[1] if "base64," in url_value else url_value
        elif item.get("type") == "image":
            data = item.get("source", {}).get("data", "")
        else:
            return None
        return {"type": "text", "text": f"[IMAGE_DATA: base64 encoded, {len(data):,} bytes]"}

    def _strip_images(self, content: Any) -> Any:
        """Swap image payloads out of message content for logging."""
        if isinstance(content, list):
            stripped = []
            for item in content:
                if isinstance(item, dict):
                    summary = self._summarize_image_part(item)
                    stripped.append(summary if summary is not None else item)
                else:
                    stripped.append(item)
            return stripped
        return content

    def _serialize_message(self, msg: Any) -> Dict[str, Any]:
        """Serialize a message object to dict with images summarized."""
        if hasattr(msg, "content"):
            return {
                "type": msg.__class__.__name__,
                "content": self._strip_images(msg.content),
            }
        return {"type": type(msg).__name__, "content": str(msg)}

    def _stringify(self, content: Any) -> str:
        if isinstance(content, str):
            return content
        if isinstance(content, (list, dict)):
            return json.dumps(content, indent=2, ensure_ascii=False)
        return str(content)

    def _format_console_info(
        self,
        component: str,
        provider: str,
        model: str,
        latency_ms: float,
        token_count: Optional[int] = None,
    ) -> str:
        """Format basic info line for console."""
        parts = [
            f"[{component}]",
            f"{provider}/{model}",
            f"{latency_ms:.1f}ms",
        ]
        if token_count is not None:
            parts.append(f"{token_count} tokens")
        return " | ".join(parts)

    def _write_to_file(self, request_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not request_id:
            return

        log_file = self.log_dir / request_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")

    def log_invocation(
        self,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
    ) -> str:
        """
        Log the start of an LLM invocation.

        Returns:
            Invocation ID (UUID string), or "" when logging is disabled.
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] 🔵 LLM Call: [{component}] {provider}/{model}"
        if request_id:
            console_msg += f" | request_id: {request_id}"
        print(console_msg)

        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        messages: List[Any],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log LLM request details."""
        if not self._should_log(LogLevel.DEBUG):
            return

        serialized = [self._serialize_message(msg) for msg in messages]

        print(f"  Messages: {len(messages)}")
        for i, msg in enumerate(serialized[:3]):
            preview = self._truncate_content(self._stringify(msg["content"]), 150)
            print(f"    {i+1}. [{msg['type']}] {preview}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "request_id": request_id,
            "request": {
                "messages": serialized if self.level == LogLevel.TRACE else [],
                "message_count": len(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            "metadata": metadata or {},
        }
        self._write_to_file(request_id, log_entry)

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        response: Any,
        start_time: float,
        end_time: float,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log LLM response with timing and token usage."""
        if not self._should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        content = self._stringify(getattr(response, "content", response))

        token_usage = {}
        usage = getattr(response, "usage_metadata", None)
        if usage:
            token_usage = {
                "prompt_tokens": usage.get("input_tokens"),
                "completion_tokens": usage.get("output_tokens"),
                "total_tokens": usage.get("total_tokens"),
            }

        print(
            f"[{self._format_timestamp()}] ✅ LLM Response: "
            + self._format_console_info(
                component, provider, model, latency_ms, token_usage.get("total_tokens")
            )
        )

        if self._should_log(LogLevel.TRACE):
            print("  RESPONSE:")
            for line in self._truncate_content(content, 1000).split("\n"):
                print(f"    {line}")
        elif self._should_log(LogLevel.DEBUG):
            print(f"  Response: {self._truncate_content(content, 200)}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "request_id": request_id,
            "response": {
                "content": content if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(content, 200)
                    if self._should_log(LogLevel.DEBUG)
                    else None
                ),
                "content_length": len(content),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": token_usage or None,
            "metadata": metadata or {},
        }
        self._write_to_file(request_id, log_entry)

    def log_error(
        self,
        component: str,
        error: BaseException,
        request_id: Optional[str] = None,
        raw: Optional[str] = None,
    ):
        """
        Log a failed generation.

        Always printed; written to file when file logging is on.
        """
        print(
            f"[{self._format_timestamp()}] ❌ LLM Error: [{component}] "
            f"{type(error).__name__}: {error}"
        )
        if raw is not None:
            print(f"  Raw response: {self._truncate_content(raw, 500)}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": "ERROR",
            "component": component,
            "request_id": request_id,
            "error": {
                "type": type(error).__name__,
                "message": str(error),
                "raw": raw,
            },
        }
        self._write_to_file(request_id, log_entry)


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


def reset_logger():
    """Drop the singleton so the next ``get_logger()`` re-reads the environment."""
    LLMLogger._instance = None


class LoggedLLM:
    """
    Wrapper around LangChain chat models to add debug logging.

    Intercepts invoke() and ainvoke() calls and logs requests, responses,
    timing, and failures.
    """

    def __init__(
        self,
        llm_instance: Any,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LoggedLLM wrapper.

        Args:
            llm_instance: The actual chat model (ChatOpenAI, ChatAnthropic, ...)
            component: Component name (e.g., "generator")
            provider: Provider name ("openai" or "anthropic")
            model: Model name
            request_id: Optional request ID for tracking
            metadata: Optional additional metadata to include in logs
        """
        self.llm = llm_instance
        self.component = component
        self.provider = provider
        self.model = model
        self.request_id = request_id
        self.metadata = metadata or {}
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped LLM instance."""
        return getattr(self.llm, name)

    def _before(self, messages: List[Any]) -> str:
        invocation_id = self.logger.log_invocation(
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_id=self.request_id,
        )
        if invocation_id:
            self.logger.log_request(
                invocation_id=invocation_id,
                component=self.component,
                provider=self.provider,
                model=self.model,
                messages=messages,
                temperature=getattr(self.llm, "temperature", None),
                max_tokens=getattr(self.llm, "max_tokens", None),
                request_id=self.request_id,
                metadata=self.metadata,
            )
        return invocation_id

    def _after(self, invocation_id: str, response: Any, start_time: float):
        if not invocation_id:
            return
        self.logger.log_response(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            response=response,
            start_time=start_time,
            end_time=time.time(),
            request_id=self.request_id,
            metadata=self.metadata,
        )

    def invoke(self, messages: List[Any], **kwargs) -> Any:
        """Invoke the model with logging."""
        invocation_id = self._before(messages)
        start_time = time.time()
        try:
            response = self.llm.invoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(self.component, e, request_id=self.request_id)
            raise
        self._after(invocation_id, response, start_time)
        return response

    async def ainvoke(self, messages: List[Any], **kwargs) -> Any:
        """Invoke the model asynchronously with logging."""
        invocation_id = self._before(messages)
        start_time = time.time()
        try:
            response = await self.llm.ainvoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(self.component, e, request_id=self.request_id)
            raise
        self._after(invocation_id, response, start_time)
        return response
