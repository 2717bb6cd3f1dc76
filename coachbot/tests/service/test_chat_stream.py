"""End-to-end relay scenarios through the FastAPI app with faked vendors."""
from __future__ import annotations

import json
import sqlite3

import httpx

from ..helpers import anthropic_delta, parse_frames, openai_chunk

USER = {"X-User-ID": "u1"}


def _stream(client, **body):
    response = client.post("/api/chat/stream", json=body, headers=USER)
    return response, parse_frames(response.text)


def _journal(client, day=1):
    response = client.get("/api/journal", params={"day": day}, headers=USER)
    assert response.status_code == 200
    return [(e["role"], e["message"]) for e in response.json()]


def test_openai_deltas_are_relayed_and_reply_persisted(client, upstream, vendor_keys):
    upstream.sse(openai_chunk("Bon"), openai_chunk("jour"))
    response, frames = _stream(client, message="Salut", provider="openai")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["x-accel-buffering"] == "no"
    assert frames == [{"text": "Bon"}, {"text": "jour"}, "[DONE]"]
    assert response.text.endswith("data: [DONE]\n\n")
    assert _journal(client) == [("user", "Salut"), ("assistant", "Bonjour")]


def test_prompts_carry_profile_and_day_plan(client, upstream, vendor_keys):
    upstream.sse(openai_chunk("Enchanté"))
    _stream(client, message="Je m'appelle Léa", provider="gpt")

    sent = upstream.last_body
    system, user = sent["messages"][0]["content"], sent["messages"][1]["content"]
    assert "[Contexte CoachBot]" in system and "Prénom: Léa" in system
    assert user.startswith("Plan du jour (1) : Clarifier ton objectif.")
    assert user.endswith("Je m'appelle Léa")
    assert client.get("/api/meta", headers=USER).json() == {"name": "Léa", "style": None}


def test_anthropic_event_stream(client, upstream, vendor_keys):
    upstream.sse(
        {"type": "message_start", "message": {"id": "msg_1"}},
        anthropic_delta("Ça "),
        anthropic_delta("roule"),
        {"type": "message_stop"},
        done=False,
        prefix=b"event: ping\ndata: {\"type\": \"ping\"}\n\n",
    )
    response, frames = _stream(client, message="Quoi de neuf ?", provider="anthropic")
    assert frames == [{"text": "Ça "}, {"text": "roule"}, "[DONE]"]
    assert upstream.requests[0].headers["x-api-key"] == "sk-ant-unit"
    assert _journal(client)[-1] == ("assistant", "Ça roule")


def test_gemini_reply_is_one_delta(client, upstream, vendor_keys):
    upstream.json({"candidates": [{"content": {"parts": [{"text": "Allez, "}, {"text": "on y va"}]}}]})
    _, frames = _stream(client, message="Motive-moi", provider="google")
    assert frames == [{"text": "Allez, on y va"}, "[DONE]"]


def test_unknown_provider_yields_one_error_then_done(client, upstream):
    response, frames = _stream(client, message="Salut", provider="mistral")
    assert response.status_code == 200
    assert frames == [{"error": "Fournisseur inconnu ou non activé"}, "[DONE]"]
    assert upstream.requests == []
    assert _journal(client) == [("user", "Salut")]


def test_missing_key_is_reported_in_band(client, upstream):
    _, frames = _stream(client, message="Salut")
    assert frames == [{"error": "ANTHROPIC_API_KEY manquante"}, "[DONE]"]
    assert upstream.requests == []


def test_upstream_error_status_is_reported_in_band(client, upstream, vendor_keys):
    upstream.json({"error": {"type": "overloaded_error", "message": "Overloaded"}}, status=529)
    _, frames = _stream(client, message="Salut")
    assert len(frames) == 2 and frames[-1] == "[DONE]"
    assert "529" in frames[0]["error"] and "Overloaded" in frames[0]["error"]
    assert _journal(client) == [("user", "Salut")]


def test_mid_stream_error_keeps_partial_reply(client, upstream, vendor_keys):
    upstream.sse(openai_chunk("par"), {"error": {"message": "connection reset"}}, done=False)
    _, frames = _stream(client, message="Salut", provider="openai")
    assert frames == [{"text": "par"}, {"error": "connection reset"}, "[DONE]"]
    assert _journal(client) == [("user", "Salut"), ("assistant", "par")]


def test_malformed_frames_do_not_abort_the_stream(client, upstream, vendor_keys):
    upstream.sse(openai_chunk("a"), openai_chunk("b"), prefix=b"data: {not json\n\n: keep-alive\n\n")
    _, frames = _stream(client, message="Salut", provider="openai")
    assert frames == [{"text": "a"}, {"text": "b"}, "[DONE]"]


def test_split_multibyte_chunks_reassemble(client, upstream, vendor_keys):
    body = (
        b'data: {"choices": [{"delta": {"content": "h\xc3\xa9"}}]}\n\n'
        b'data: {"choices": [{"delta": {"content": "\xe2\x9c\x93"}}]}\n\ndata: [DONE]\n\n'
    )

    async def _chunks():
        for i in range(0, len(body), 7):
            yield body[i:i + 7]

    upstream.respond(lambda _req: httpx.Response(200, content=_chunks()))
    _, frames = _stream(client, message="Salut", provider="openai")
    assert frames == [{"text": "hé"}, {"text": "✓"}, "[DONE]"]


def test_empty_message_is_rejected(client, upstream):
    response = client.post("/api/chat/stream", json={"message": ""}, headers=USER)
    assert response.status_code == 422


def test_user_entry_failure_returns_server_error(client, upstream, vendor_keys, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(client.app.state.journal, "_append_sync", _fail)
    response = client.post("/api/chat/stream", json={"message": "Salut", "provider": "openai"}, headers=USER)
    assert response.status_code == 500
    assert response.json()["error"] == "Erreur serveur"
    assert upstream.requests == []


def test_assistant_entry_failure_still_terminates_stream(client, upstream, vendor_keys, monkeypatch):
    journal = client.app.state.journal
    original = journal._append_sync

    def _fail_for_assistant(user_id, day, entry):
        if entry.role == "assistant":
            raise sqlite3.OperationalError("disk full")
        return original(user_id, day, entry)

    monkeypatch.setattr(journal, "_append_sync", _fail_for_assistant)
    upstream.sse(openai_chunk("ok"))
    _, frames = _stream(client, message="Salut", provider="openai")
    assert frames == [{"text": "ok"}, "[DONE]"]
    monkeypatch.delattr(journal, "_append_sync")
    assert _journal(client) == [("user", "Salut")]


def test_non_streaming_chat_returns_reply(client, upstream, vendor_keys):
    upstream.sse(openai_chunk("Bon"), openai_chunk("jour"))
    response = client.post("/api/chat", json={"message": "Salut", "provider": "openai"}, headers=USER)
    assert response.status_code == 200
    assert response.json() == {"reply": "Bonjour"}
    assert _journal(client) == [("user", "Salut"), ("assistant", "Bonjour")]


def test_non_streaming_chat_falls_back_when_reply_is_empty(client, upstream, vendor_keys):
    upstream.sse()
    response = client.post("/api/chat", json={"message": "Salut", "provider": "openai"}, headers=USER)
    fallback = "Je n’ai pas compris, peux-tu reformuler ?"
    assert response.json() == {"reply": fallback}
    assert _journal(client)[-1] == ("assistant", fallback)


def test_non_streaming_chat_error_statuses(client, upstream, vendor_keys):
    unknown = client.post("/api/chat", json={"message": "Salut", "provider": "mistral"}, headers=USER)
    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Fournisseur inconnu ou non activé"}

    upstream.json({"error": {"message": "boom"}}, status=500)
    failed = client.post("/api/chat", json={"message": "Salut", "provider": "openai"}, headers=USER)
    assert failed.status_code == 502
    assert "boom" in json.dumps(failed.json())
