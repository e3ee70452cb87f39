"""
Tests for LLM call logging.
"""

import json

import pytest
from langchain_core.messages import HumanMessage

from conftest import RecordingChatModel
from webber.utils.llm_logger import LoggedLLM, LogLevel, get_logger, reset_logger


def read_records(log_dir, request_id):
    path = log_dir / request_id / "logs" / "llm_calls.jsonl"
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


@pytest.fixture
def trace_logger(tmp_path, monkeypatch):
    monkeypatch.setenv("LLM_DEBUG_LEVEL", "TRACE")
    monkeypatch.setenv("LLM_LOG_DIR", str(tmp_path))
    reset_logger()
    return get_logger()


def test_level_from_environment(trace_logger):
    assert trace_logger.level == LogLevel.TRACE


def test_unknown_level_disables_logging(monkeypatch):
    monkeypatch.setenv("LLM_DEBUG_LEVEL", "LOUD")
    reset_logger()
    assert get_logger().level == LogLevel.NONE


def test_trace_records_request_and_response(trace_logger, tmp_path):
    llm = LoggedLLM(
        RecordingChatModel(reply='{"html":"","css":"","js":""}'),
        component="generator",
        provider="openai",
        model="gpt-4o",
        request_id="req-1",
    )
    message = HumanMessage(content=[
        {"type": "text", "text": "Convert this"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAABBBB"}},
    ])

    response = llm.invoke([message])
    assert response.content == '{"html":"","css":"","js":""}'

    request_record, response_record = read_records(tmp_path, "req-1")
    assert request_record["request"]["message_count"] == 1
    assert response_record["response"]["content"] == '{"html":"","css":"","js":""}'
    assert response_record["timing"]["latency_ms"] >= 0

    raw_log = (tmp_path / "req-1" / "logs" / "llm_calls.jsonl").read_text(encoding="utf-8")
    assert "AAAABBBB" not in raw_log
    assert "[IMAGE_DATA: base64 encoded, 8 bytes]" in raw_log


def test_errors_are_logged_and_reraised(tmp_path, capsys):
    llm = LoggedLLM(
        RecordingChatModel(error=TimeoutError("upstream timed out")),
        component="generator",
        provider="openai",
        model="gpt-4o",
        request_id="req-2",
    )

    with pytest.raises(TimeoutError):
        llm.invoke([HumanMessage(content="hi")])

    assert "upstream timed out" in capsys.readouterr().out
    records = read_records(tmp_path / "llm_logs", "req-2")
    assert records[-1]["error"]["type"] == "TimeoutError"


def test_nothing_written_without_request_id(trace_logger, tmp_path):
    llm = LoggedLLM(RecordingChatModel(reply="ok"), "generator", "openai", "gpt-4o")
    llm.invoke([HumanMessage(content="hi")])
    assert list(tmp_path.iterdir()) == []
