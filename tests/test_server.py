"""
Tests for the generation endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import RecordingChatModel
from webber.api import app, get_generator, server
from webber.config import Settings
from webber.pipeline.generation import SiteGenerator


@pytest.fixture
def llm():
    return RecordingChatModel()


@pytest.fixture
def client(llm):
    app.dependency_overrides[get_generator] = lambda: SiteGenerator(llm=llm)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_success(client, llm, site_reply):
    llm.reply = site_reply

    response = client.post("/api/generate", json={
        "image": "data:image/png;base64,iVBORw0KGgo...",
        "type": "Landing Page",
        "prompt": "Convert this wireframe into a website.",
    })

    assert response.status_code == 200
    assert response.json() == {"html": "<h1>Hi</h1>", "css": "h1{color:red}", "js": ""}
    assert len(llm.calls) == 1


@pytest.mark.parametrize("body", [
    {"type": "Landing Page", "prompt": "x"},
    {"image": "", "type": "Landing Page"},
    {"image": None},
])
def test_missing_image_is_client_error(client, llm, body):
    response = client.post("/api/generate", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Image is required"}
    assert llm.calls == []


def test_non_json_body(client, llm):
    response = client.post(
        "/api/generate",
        content=b"image=abc",
        headers={"Content-Type": "text/plain"},
    )

    assert response.status_code == 400
    assert "error" in response.json()
    assert llm.calls == []


def test_invalid_field_types(client, llm):
    response = client.post("/api/generate", json={"image": "abc", "type": 42})

    assert response.status_code == 400
    assert "type" in response.json()["error"]
    assert llm.calls == []


def test_invalid_model_output(client, llm):
    llm.reply = "not json"

    response = client.post("/api/generate", json={"image": "abc"})

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid AI response format", "raw": "not json"}


def test_model_failure(client, llm):
    llm.error = PermissionError("Invalid API key")

    response = client.post("/api/generate", json={"image": "abc"})

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid API key"}


def test_deeply_nested_model_output(client, llm):
    llm.reply = "[" * 100000 + "]" * 100000

    response = client.post("/api/generate", json={"image": "abc"})

    assert response.status_code == 500
    assert response.json()["error"] == "Invalid AI response format"
    assert response.json()["raw"] == llm.reply


def test_unsupported_provider_is_json_error(monkeypatch):
    monkeypatch.setattr(server, "get_settings", lambda: Settings(provider="gemini"))
    get_generator.cache_clear()
    try:
        response = TestClient(app).post("/api/generate", json={"image": "abc"})
    finally:
        get_generator.cache_clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Unsupported provider: gemini"}
