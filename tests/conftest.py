"""
Shared fixtures: a recording chat model and isolated LLM log output.
"""

import pytest
from langchain_core.messages import AIMessage

from webber.io.sketch_canvas import SketchCanvas
from webber.models import CanvasConfig
from webber.utils.llm_logger import reset_logger


class RecordingChatModel:
    """Stands in for a LangChain chat model and records every call."""

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def invoke(self, messages, **kwargs):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)

    async def ainvoke(self, messages, **kwargs):
        return self.invoke(messages, **kwargs)


@pytest.fixture(autouse=True)
def isolated_llm_logs(tmp_path, monkeypatch):
    monkeypatch.setenv("LLM_DEBUG_LEVEL", "NONE")
    monkeypatch.setenv("LLM_LOG_DIR", str(tmp_path / "llm_logs"))
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def site_reply():
    return '```json\n{"html":"<h1>Hi</h1>","css":"h1{color:red}","js":""}\n```'


@pytest.fixture
def small_canvas():
    canvas = SketchCanvas(CanvasConfig(width=120, height=80))
    canvas.replay([{"color": "pen", "points": [[10, 10], [100, 10], [100, 60]]}])
    return canvas
