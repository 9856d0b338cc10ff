from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from accounts_api.app import create_app


@pytest.fixture()
def client(db_env):
    with TestClient(create_app()) as test_client:
        yield test_client


def _register(client, username="alice", password="secret1", **profile):
    return client.post("/auth/register", json={"username": username, "password": password, "profile": profile})


def _login(client, username="alice", password="secret1"):
    resp = client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_register_login_and_edit_profile(client):
    resp = _register(client, display_name="Alice")
    assert resp.status_code == 201
    user = resp.json()
    assert user["username"] == "alice"
    assert "password_hash" not in user

    headers = _login(client)
    me = client.get("/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]

    edited = client.put("/users/me", json={"bio": "hi"}, headers=headers)
    assert edited.status_code == 200
    assert edited.json()["profile"] == {"display_name": "Alice", "bio": "hi"}

    listing = client.get("/users").json()
    assert [u["username"] for u in listing] == ["alice"]
    assert all("password_hash" not in u for u in listing)

    assert client.get(f"/users/{user['id']}").json()["profile"]["bio"] == "hi"


def test_error_status_mapping(client):
    assert _register(client).status_code == 201

    dup = _register(client)
    assert dup.status_code == 400
    assert dup.json()["error"] == "duplicate_username"

    weak = _register(client, username="bob", password="123")
    assert weak.status_code == 400
    assert weak.json()["error"] == "weak_input"

    bad_login = client.post("/auth/login", json={"username": "alice", "password": "wrong-one"})
    unknown = client.post("/auth/login", json={"username": "nobody", "password": "wrong-one"})
    assert bad_login.status_code == unknown.status_code == 401
    assert bad_login.json() == unknown.json()

    missing = client.get("/users/does-not-exist")
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"


def test_profile_edit_rejects_protected_fields(client):
    _register(client)
    headers = _login(client)

    resp = client.put("/users/me", json={"username": "mallory", "password_hash": "x"}, headers=headers)
    assert resp.status_code == 400
    assert client.get("/users/me", headers=headers).json()["username"] == "alice"


def test_authenticated_routes_require_token(client):
    assert client.get("/users/me").status_code == 401
    resp = client.get("/users/me", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "token_invalid"


def test_logout_revokes_token(client):
    _register(client)
    headers = _login(client)

    assert client.post("/auth/logout", headers=headers).status_code == 200
    assert client.get("/users/me", headers=headers).status_code == 401


def test_delete_only_own_account(client):
    alice = _register(client).json()
    bob = _register(client, username="bob").json()
    headers = _login(client)

    assert client.delete(f"/users/{bob['id']}", headers=headers).status_code == 403

    assert client.delete(f"/users/{alice['id']}", headers=headers).status_code == 200
    assert client.get(f"/users/{alice['id']}").status_code == 404
    assert client.delete(f"/users/{alice['id']}", headers=headers).status_code == 401


def test_login_is_rate_limited(client, monkeypatch):
    from accounts_api.core import config as core_config

    monkeypatch.setenv("LOGIN_RATE_LIMIT", "2")
    core_config.get_settings.cache_clear()
    _register(client)

    responses = [
        client.post("/auth/login", json={"username": "alice", "password": "wrong-one"})
        for _ in range(3)
    ]
    assert [r.status_code for r in responses] == [401, 401, 429]
    assert responses[2].json()["error"] == "rate_limited"
    assert set(responses[2].json()) == {"error", "message"}
    assert int(responses[2].headers["Retry-After"]) > 0


def test_logout_all_revokes_every_session(client):
    _register(client)
    first = _login(client)
    second = _login(client)

    resp = client.post("/auth/logout-all", headers=first)
    assert resp.status_code == 200
    assert resp.json()["revoked"] == 2
    assert client.get("/users/me", headers=second).status_code == 401
