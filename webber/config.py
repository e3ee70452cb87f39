"""
Runtime configuration read from the process environment (and ``.env``).
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from webber.models import CanvasConfig


DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-3-5-sonnet-latest",
}

API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class Settings(BaseModel):
    """Generation, canvas and output settings."""
    provider: str = "openai"
    model_name: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 4096
    api_key: Optional[str] = None
    canvas: CanvasConfig = CanvasConfig()
    output_dir: Path = Path("outputs")

    @property
    def resolved_model(self) -> str:
        return self.model_name or DEFAULT_MODELS.get(self.provider, "")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        A missing API key is kept as ``None``: requests then fail at the
        model boundary rather than here.
        """
        load_dotenv()

        provider = os.getenv("WEBBER_PROVIDER", "openai").lower()
        key_var = API_KEY_VARS.get(provider)

        return cls(
            provider=provider,
            model_name=os.getenv("WEBBER_MODEL") or None,
            temperature=float(os.getenv("WEBBER_TEMPERATURE", "0.3")),
            max_tokens=int(os.getenv("WEBBER_MAX_TOKENS", "4096")),
            api_key=os.getenv(key_var) if key_var else None,
            canvas=CanvasConfig(
                width=int(os.getenv("WEBBER_CANVAS_WIDTH", "1280")),
                height=int(os.getenv("WEBBER_CANVAS_HEIGHT", "800")),
            ),
            output_dir=Path(os.getenv("WEBBER_OUTPUT_DIR", "outputs")),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings loaded once per process."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
