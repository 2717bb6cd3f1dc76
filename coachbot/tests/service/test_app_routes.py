"""Journal and profile routes."""
from __future__ import annotations

import sqlite3

from coachbot.service.helpers import USER_ID_HEADER

LEA = {USER_ID_HEADER: "lea"}
SAM = {USER_ID_HEADER: "sam"}


def test_manual_save_then_read(client):
    saved = client.post("/api/journal/save", json={"day": 2, "message": "Note", "role": "ai"}, headers=LEA)
    assert saved.status_code == 200
    assert saved.json() == {"success": True}

    entries = client.get("/api/journal", params={"day": 2}, headers=LEA).json()
    assert len(entries) == 1
    assert entries[0]["role"] == "assistant" and entries[0]["message"] == "Note"
    assert entries[0]["date"].endswith("Z")


def test_save_defaults_to_day_one_user_role(client):
    client.post("/api/journal/save", json={"message": "hello"}, headers=LEA)
    assert [e["role"] for e in client.get("/api/journal", headers=LEA).json()] == ["user"]


def test_read_limit_returns_newest_oldest_first(client):
    for i in range(4):
        client.post("/api/journal/save", json={"message": f"m{i}"}, headers=LEA)
    entries = client.get("/api/journal", params={"day": 1, "limit": 2}, headers=LEA).json()
    assert [e["message"] for e in entries] == ["m2", "m3"]


def test_logs_are_isolated_per_user(client):
    client.post("/api/journal/save", json={"message": "privé"}, headers=LEA)
    assert client.get("/api/journal", headers=SAM).json() == []
    assert client.get("/api/journal").json() == []


def test_invalid_bodies_and_params_are_rejected(client):
    assert client.post("/api/journal/save", json={"role": "system"}, headers=LEA).status_code == 422
    assert client.post("/api/journal/save", json={"day": 0}, headers=LEA).status_code == 422
    assert client.get("/api/journal", params={"day": 0}, headers=LEA).status_code == 422


def test_save_failure_maps_to_server_error(client, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise sqlite3.OperationalError("readonly database")

    monkeypatch.setattr(client.app.state.journal, "_append_sync", _fail)
    response = client.post("/api/journal/save", json={"message": "x"}, headers=LEA)
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Erreur serveur"
    assert "readonly database" in body["detail"]


def test_meta_starts_empty_and_accepts_overwrite(client):
    assert client.get("/api/meta", headers=LEA).json() == {"name": None, "style": None}

    response = client.post("/api/meta", json={"name": "Léa", "disc": "s"}, headers=LEA)
    assert response.status_code == 200
    assert response.json() == {"success": True, "meta": {"name": "Léa", "style": "S"}}

    client.post("/api/meta", json={"style": "C"}, headers=LEA)
    assert client.get("/api/meta", headers=LEA).json() == {"name": "Léa", "style": "C"}
    assert client.get("/api/meta", headers=SAM).json() == {"name": None, "style": None}


def test_meta_rejects_unknown_style(client):
    assert client.post("/api/meta", json={"style": "X"}, headers=LEA).status_code == 422


def test_cors_preflight_allows_configured_origin(client):
    response = client.options(
        "/api/chat/stream",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
