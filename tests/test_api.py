"""HTTP API tests using FastAPI's TestClient."""

import logging

import pytest
from fastapi.testclient import TestClient

from lexia_core_lib.api.router import create_app
from lexia_core_lib.exceptions import ProviderTransportError
from lexia_core_lib.models.case import DEFAULT_SYSTEM_PROMPT

HEADERS = {"X-User-ID": "dev_user_123", "X-Correlation-ID": "req-1"}


@pytest.fixture
def client(settings, registry):
    return TestClient(create_app(settings=settings, registry=registry))


def test_missing_user_header_is_rejected(client):
    response = client.get("/api/v1/cases/case-1/messages")

    assert response.status_code == 401


def test_new_case_starts_empty_with_default_prompt(client):
    response = client.get("/api/v1/cases/case-1/messages", headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["messages"] == []
    assert body["provider"] == "openai"
    assert body["system_prompt"] == DEFAULT_SYSTEM_PROMPT


def test_send_message_round_trip(client, openai_provider):
    response = client.post(
        "/api/v1/cases/case-1/messages",
        json={"content": "What does Art. 1382 cover?"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert [m["sender"] for m in body["messages"]] == ["user", "assistant"]
    assert body["assistant_message"]["content"] == "Art. 1382 establishes fault-based liability."
    assert len(openai_provider.calls) == 1


def test_provider_error_is_returned_in_body(client, openai_provider):
    openai_provider.error = ProviderTransportError("status 503", status=503)

    response = client.post("/api/v1/cases/case-1/messages", json={"content": "hello"}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["error_kind"] == "transport_failure"
    assert body["assistant_message"] is None
    assert len(body["messages"]) == 1
    assert "503" not in body["error"]


def test_blank_message_is_unprocessable(client):
    response = client.post("/api/v1/cases/case-1/messages", json={"content": "   "}, headers=HEADERS)

    assert response.status_code == 422
    assert client.get("/api/v1/cases/case-1/messages", headers=HEADERS).json()["messages"] == []


def test_clear_conversation(client):
    client.post("/api/v1/cases/case-1/messages", json={"content": "hello"}, headers=HEADERS)

    response = client.delete("/api/v1/cases/case-1/messages", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["messages"] == []


def test_cases_are_isolated(client):
    client.post("/api/v1/cases/case-1/messages", json={"content": "hello"}, headers=HEADERS)

    other = client.get("/api/v1/cases/case-2/messages", headers=HEADERS).json()

    assert other["messages"] == []


def test_save_and_reset_system_prompt(client, openai_provider):
    saved = client.put(
        "/api/v1/cases/case-1/system-prompt",
        json={"system_prompt": "Answer as a Belgian tenancy specialist."},
        headers=HEADERS,
    )
    assert saved.json()["system_prompt"] == "Answer as a Belgian tenancy specialist."

    client.post("/api/v1/cases/case-1/messages", json={"content": "hello"}, headers=HEADERS)
    assert openai_provider.calls[0]["system_prompt"] == "Answer as a Belgian tenancy specialist."

    reset = client.delete("/api/v1/cases/case-1/system-prompt", headers=HEADERS)
    assert reset.json()["system_prompt"] == DEFAULT_SYSTEM_PROMPT


def test_switch_provider(client, huggingface_provider):
    response = client.put("/api/v1/cases/case-1/provider", json={"provider": "huggingface"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["selected"] == "huggingface"

    client.post("/api/v1/cases/case-1/messages", json={"content": "hello"}, headers=HEADERS)
    assert len(huggingface_provider.calls) == 1


def test_switch_to_unknown_provider_is_rejected(client):
    response = client.put("/api/v1/cases/case-1/provider", json={"provider": "watson"}, headers=HEADERS)

    assert response.status_code == 422


def test_analyze_documents(client, openai_provider):
    response = client.post(
        "/api/v1/cases/case-1/documents/analyze",
        json={"files": [{"name": "contract.pdf", "size_bytes": 1200}, {"name": "lease.pdf", "size_bytes": 800}]},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Art. 1382 establishes fault-based liability."
    content = openai_provider.calls[0]["messages"][0].content
    assert "contract.pdf" in content and "lease.pdf" in content
    # Analysis stays out of the transcript
    assert client.get("/api/v1/cases/case-1/messages", headers=HEADERS).json()["messages"] == []


def test_analyze_without_files_is_unprocessable(client, openai_provider):
    response = client.post("/api/v1/cases/case-1/documents/analyze", json={"files": []}, headers=HEADERS)

    assert response.status_code == 422
    assert openai_provider.calls == []


def test_correlation_id_is_scoped_to_each_request(client, caplog):
    caplog.set_level(logging.INFO, logger="lexia_core_lib.infrastructure.llm.adapter")

    client.post("/api/v1/cases/case-1/messages", json={"content": "first"}, headers=HEADERS)
    client.post(
        "/api/v1/cases/case-1/messages",
        json={"content": "second"},
        headers={**HEADERS, "X-Correlation-ID": "req-2"},
    )
    client.post("/api/v1/cases/case-1/messages", json={"content": "third"}, headers={"X-User-ID": "dev_user_123"})

    tags = [r.getMessage().split(" ", 1)[0] for r in caplog.records if "Dispatching" in r.getMessage()]
    assert tags == ["[dev_user_123:req-1]", "[dev_user_123:req-2]", "[dev_user_123]"]
