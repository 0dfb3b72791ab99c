"""Tests for the HTTP surface."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from diffcommit_backend.main import app
from diffcommit_backend.routers import merge
from diffcommit_backend.routers.selection import get_edit_service


@pytest.fixture
def client(fake_service) -> Iterator[TestClient]:
    """Client with the LLM replaced by the fake edit service."""

    app.dependency_overrides[get_edit_service] = lambda: fake_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    merge.sessions.clear()


@pytest.fixture
def session_id(client: TestClient) -> str:
    response = client.post("/api/merge/sessions")
    assert response.status_code == 200
    return response.json()["session_id"]


def _diff(client: TestClient, session_id: str, source: str, target: str) -> dict:
    response = client.post(f"/api/merge/{session_id}/diff", json={"source": source, "target": target})
    assert response.status_code == 200
    return response.json()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "healthy", "service": "diffcommit-backend"}


def test_unknown_session_is_404(client: TestClient) -> None:
    assert client.get("/api/merge/nope/segments").status_code == 404
    assert client.get("/api/selection/nope/ranges").status_code == 404


def test_diff_toggle_undo_flow(client: TestClient, session_id: str) -> None:
    state = _diff(client, session_id, "The sky was red.", "The sky was blue today.")
    assert state["preview_text"] == "The sky was blue today."
    added = next(s for s in state["segments"] if s["value"] == "blue today")

    state = client.post(f"/api/merge/{session_id}/segments/{added['id']}/toggle").json()
    assert state["preview_text"] == "The sky was red."
    assert state["can_undo"]

    state = client.post(f"/api/merge/{session_id}/undo").json()
    assert state["preview_text"] == "The sky was blue today."
    assert state["can_redo"]

    state = client.post(f"/api/merge/{session_id}/redo").json()
    assert state["preview_text"] == "The sky was red."


def test_bulk_operations_and_preview(client: TestClient, session_id: str) -> None:
    _diff(client, session_id, "one two", "uno two")

    client.post(f"/api/merge/{session_id}/reject-all")
    assert client.get(f"/api/merge/{session_id}/preview").json() == {"preview_text": "one two"}

    client.post(f"/api/merge/{session_id}/accept-all")
    assert client.get(f"/api/merge/{session_id}/preview").json() == {"preview_text": "uno two"}


def test_stale_toggle_is_ignored(client: TestClient, session_id: str) -> None:
    _diff(client, session_id, "a", "b")

    state = client.post(f"/api/merge/{session_id}/segments/seg-999/toggle").json()

    assert state["history_length"] == 1


def test_range_selection_and_apply(client: TestClient, session_id: str) -> None:
    text = "alpha beta gamma"
    response = client.post(f"/api/selection/{session_id}/ranges", json={"start": 1, "end": 3, "full_text": text})
    assert response.status_code == 200
    client.post(
        f"/api/selection/{session_id}/ranges",
        json={"start": 12, "end": 14, "additive": True, "full_text": text},
    )

    ranges = client.get(f"/api/selection/{session_id}/ranges").json()
    assert [r["text"] for r in ranges["ranges"]] == ["alpha", "gamma"]
    assert ranges["concatenated_text"] == "alpha\n\ngamma"

    first_id = ranges["ranges"][0]["id"]
    response = client.post(
        f"/api/selection/{session_id}/ranges/apply",
        json={"results": [{"id": first_id, "result": "ALPHA"}], "full_text": text},
    )
    assert response.json() == {"text": "ALPHA beta gamma"}
    assert client.get(f"/api/selection/{session_id}/ranges").json()["ranges"] == []


def test_remove_and_clear_ranges(client: TestClient, session_id: str) -> None:
    text = "alpha beta gamma"
    first = client.post(f"/api/selection/{session_id}/ranges", json={"start": 0, "end": 5, "full_text": text}).json()
    range_id = first["ranges"][0]["id"]

    assert client.delete(f"/api/selection/{session_id}/ranges/{range_id}").json()["ranges"] == []

    client.post(f"/api/selection/{session_id}/ranges", json={"start": 0, "end": 5, "full_text": text})
    assert client.delete(f"/api/selection/{session_id}/ranges").json()["ranges"] == []


def test_out_of_bounds_range_is_422(client: TestClient, session_id: str) -> None:
    response = client.post(f"/api/selection/{session_id}/ranges", json={"start": 0, "end": 50, "full_text": "short"})

    assert response.status_code == 422


def test_edit_ranges_rediffs_session(client: TestClient, session_id: str, fake_service) -> None:
    _diff(client, session_id, "the cat sat", "the cat sat down")
    client.post(f"/api/selection/{session_id}/ranges", json={"start": 4, "end": 7})

    response = client.post(f"/api/selection/{session_id}/ranges/edit", json={"mode": "grammar"})

    assert response.status_code == 200
    outcome = response.json()
    assert outcome["status"] == "applied"
    assert outcome["text"] == "the CAT sat down"
    assert fake_service.calls[0][1].value == "grammar"
    preview = client.get(f"/api/merge/{session_id}/preview").json()["preview_text"]
    assert preview == "the CAT sat down"


def test_edit_uses_default_mode_and_requires_selection(client: TestClient, session_id: str) -> None:
    response = client.post(f"/api/selection/{session_id}/ranges/edit", json={})

    assert response.status_code == 422
    assert client.post(f"/api/selection/{session_id}/ranges/edit/cancel").json() == {"cancelled": False}


def test_edit_service_failure_is_502(client: TestClient, session_id: str, edit_service_factory) -> None:
    from diffcommit_backend.services.errors import RangeEditError

    app.dependency_overrides[get_edit_service] = lambda: edit_service_factory(error=RangeEditError("down"))
    client.post(f"/api/selection/{session_id}/ranges", json={"start": 0, "end": 3, "full_text": "abc def"})

    response = client.post(f"/api/selection/{session_id}/ranges/edit", json={"full_text": "abc def"})

    assert response.status_code == 502


def test_delete_session(client: TestClient, session_id: str) -> None:
    assert client.delete(f"/api/merge/sessions/{session_id}").status_code == 200
    assert client.get(f"/api/merge/{session_id}/segments").status_code == 404


def test_config_masks_keys_and_updates(client: TestClient) -> None:
    response = client.put("/api/config", json={"provider": "openai", "openai": {"apiKey": "sk-1234567890abcd"}})
    assert response.status_code == 200

    config = client.get("/api/config").json()
    assert config["provider"] == "openai"
    assert config["openai"]["apiKey"] == "sk-1*********abcd"
    assert config["openai"]["model"] == "gpt-4"
    assert config["editing"]["defaultMode"] == "polish"


def test_unknown_default_mode_falls_back_to_polish(client: TestClient, session_id: str, fake_service) -> None:
    client.put("/api/config", json={"editing": {"defaultMode": "shout"}})
    client.post(f"/api/selection/{session_id}/ranges", json={"start": 0, "end": 3, "full_text": "abc def"})

    response = client.post(f"/api/selection/{session_id}/ranges/edit", json={"full_text": "abc def"})

    assert response.status_code == 200
    assert response.json()["text"] == "ABC def"
    assert fake_service.calls[0][1].value == "polish"
