"""Tests for the HTTP chat surface."""

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from nest_assistant import api
from nest_assistant.config import Settings, get_settings
from nest_assistant.errors import ProjectDataError

from .conftest import PROJECT_UID, FakeChatModel, tool_calls_message


@pytest.fixture
def model():
    return FakeChatModel([])


@pytest.fixture
def http(client, model, settings):
    api.app.dependency_overrides[api.get_project_client] = lambda: client
    api.app.dependency_overrides[api.get_model_factory] = lambda: (lambda: model)
    api.app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(api.app)
    api.app.dependency_overrides.clear()
    api._sessions.clear()


def open_session(http) -> str:
    response = http.post("/sessions", json={"project_uid": PROJECT_UID})
    assert response.status_code == 200
    return response.json()["session_id"]


def test_open_session_returns_welcome(http):
    response = http.post("/sessions", json={"project_uid": PROJECT_UID})

    body = response.json()
    assert response.status_code == 200
    assert body["project_uid"] == PROJECT_UID
    assert [m["role"] for m in body["messages"]] == ["assistant"]


def test_send_message_runs_one_turn(http, model, client):
    model.responses.append(tool_calls_message(("create_list", {"name": "Testing"})))
    session_id = open_session(http)

    response = http.post(f"/sessions/{session_id}/messages", json={"content": "Create a list called Testing"})

    body = response.json()
    assert response.status_code == 200
    assert 'Created list "Testing"' in body["message"]["content"]
    assert body["message"]["action_results"][0]["success"] is True
    titles = [n["title"] for n in body["notifications"]]
    assert titles == ["AI Ready", "List created"]

    history = http.get(f"/sessions/{session_id}/messages").json()
    assert [m["role"] for m in history] == ["assistant", "user", "assistant"]


def test_closed_session_is_gone(http, model):
    model.responses.append(AIMessage(content="hi"))
    session_id = open_session(http)

    assert http.delete(f"/sessions/{session_id}").status_code == 200
    assert http.get(f"/sessions/{session_id}/messages").status_code == 404
    assert http.post(f"/sessions/{session_id}/messages", json={"content": "hi"}).status_code == 404
    assert http.delete(f"/sessions/{session_id}").status_code == 404


def test_missing_credential_returns_503(http):
    api.app.dependency_overrides[get_settings] = lambda: Settings(openai_api_key="", _env_file=None)

    response = http.post("/sessions", json={"project_uid": PROJECT_UID})

    assert response.status_code == 503


def test_project_fetch_failure_returns_502(http, client):
    client.failures["get_project"] = ProjectDataError("service down")

    response = http.post("/sessions", json={"project_uid": PROJECT_UID})

    assert response.status_code == 502
    assert response.json()["detail"] == "service down"


def test_empty_message_is_rejected(http):
    session_id = open_session(http)

    response = http.post(f"/sessions/{session_id}/messages", json={"content": ""})

    assert response.status_code == 422
