"""Admin prompt endpoints, backed by the in-memory store."""

import pytest
from fastapi.testclient import TestClient

from prompt_registry.main import app
from prompt_registry.routers.admin_prompts import get_registry
from prompt_registry.services.registry import PromptRegistry


@pytest.fixture
def client(catalog, store, clock):
    app.dependency_overrides[get_registry] = lambda: PromptRegistry(catalog, store, clock=clock)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_and_get(client):
    listed = client.get("/api/admin/prompts").json()
    assert {p["slug"] for p in listed} >= {"role_intro", "library-context-it"}

    prompt = client.get("/api/admin/prompts/role_intro").json()
    assert prompt["version"] == 1
    assert prompt["has_override"] is False

    assert client.get("/api/admin/prompts/ghost").status_code == 404
    assert client.get("/api/admin/prompts/by-id/v2-format").json()["slug"] == "format"


def test_update_history_and_rollback(client):
    r = client.put(
        "/api/admin/prompts/role_intro",
        json={"content": "You are a specialist.", "commit_message": "More specific role", "user_id": "alice"},
    )
    assert r.status_code == 200
    assert r.json()["version"] == 2

    client.put("/api/admin/prompts/role_intro", json={"content": "Third.", "commit_message": "again"})

    history = client.get("/api/admin/prompts/role_intro/history").json()
    assert [h["version"] for h in history] == [3, 2]
    assert history[1]["commitMessage"] == "More specific role"
    assert history[1]["diff"] == "- You are an assistant.\n+ You are a specialist."

    r = client.post("/api/admin/prompts/role_intro/rollback", json={"version": 2})
    assert r.json()["version"] == 4
    assert r.json()["content"] == "You are a specialist."


def test_registry_errors_render_as_json(client):
    r = client.put("/api/admin/prompts/role_intro", json={"content": "x"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_failed"
    assert r.json()["slug"] == "role_intro"

    r = client.post("/api/admin/prompts/role_intro/rollback", json={"version": 9})
    assert r.status_code == 404
    assert r.json()["error"] == "version_not_found"
    assert r.json()["version"] == 9

    r = client.delete("/api/admin/prompts/role_intro")
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_operation"


def test_create_and_delete_custom(client):
    r = client.post(
        "/api/admin/prompts",
        json={"slug": "my-custom", "name": "Mine", "content": "Body.", "commit_message": "initial"},
    )
    assert r.status_code == 201
    assert r.json()["source"] == "custom"

    assert client.post(
        "/api/admin/prompts",
        json={"slug": "my-custom", "name": "Mine", "content": "Body.", "commit_message": "initial"},
    ).status_code == 400

    r = client.delete("/api/admin/prompts/my-custom")
    assert r.json()["ok"] is True
    assert client.get("/api/admin/prompts/my-custom").status_code == 404


def test_reset_returns_default(client):
    client.put("/api/admin/prompts/format", json={"content": "Plain.", "commit_message": "m"})

    r = client.delete("/api/admin/prompts/format", params={"action": "reset"})
    assert r.status_code == 200
    body = r.json()
    assert body["prompt"]["content"] == "Answer in markdown."
    assert body["prompt"]["version"] == 1
    assert client.get("/api/admin/prompts/format/history").json() == []


def test_variants_and_resolution(client):
    r = client.put(
        "/api/admin/prompts/role_intro/variants/chat",
        json={"content": "Chatty.", "commit_message": "chat variant"},
    )
    assert r.json()["variants"] == {"chat": "Chatty."}

    resolved = client.get("/api/admin/prompts/role_intro/resolved", params={"context": "chat"}).json()
    assert resolved["content"] == "Chatty."
    assert client.get("/api/admin/prompts/role_intro/resolved").json()["content"] == "You are an assistant."
    assert client.get("/api/admin/prompts/ghost/resolved").status_code == 404

    blocks = client.post("/api/admin/prompts/resolve", json={"block_ids": ["format", "ghost", "safety"]}).json()
    assert [b["id"] for b in blocks] == ["format", "safety"]


def test_build_composition(client):
    r = client.post("/api/admin/prompts/compositions/answer/build", json={"library_id": "it"})
    assert r.status_code == 200
    body = r.json()
    assert body["blocks_used"] == ["role_intro", "safety", "format"]
    assert body["text"].endswith("## Library Context\n\nIT library rules.")

    assert client.post("/api/admin/prompts/compositions/nope/build").status_code == 404
    assert client.get("/api/admin/prompts/library-context/gtm").json()["content"] == "GTM library rules."


def test_export(client):
    client.put("/api/admin/prompts/format", json={"content": "Plain.", "commit_message": "m"})
    body = client.get("/api/admin/prompts/export").json()
    assert body["total_overrides"] == 1
    assert body["total_prompts"] == 4 + 3
    fmt = next(p for p in body["prompts"] if p["slug"] == "format")
    assert fmt["version_history"][0]["commitMessage"] == "m"


def test_import_route(client):
    exported = client.get("/api/admin/prompts/export").json()
    body = client.post("/api/admin/prompts/import", json={"prompts": exported["prompts"]}).json()
    assert body["unchanged"] == exported["total_prompts"]

    body = client.post(
        "/api/admin/prompts/import",
        json={"prompts": [{"slug": "team-tone", "name": "Tone", "content": "Be brief."}]},
    ).json()
    assert body["created"] == 1
    assert client.get("/api/admin/prompts/team-tone").status_code == 200

    assert client.post("/api/admin/prompts/import", json={"prompts": []}).status_code == 400
