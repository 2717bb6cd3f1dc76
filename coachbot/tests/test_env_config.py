from __future__ import annotations

import json

from coachbot.config import get_provider_config, get_settings, reset_config_cache
from coachbot.config.env import ENV_MAP, is_placeholder, resolve_provider_key


def test_env_map_contains_expected_keys():
    assert ENV_MAP == {
        "anthropic": "ANTHROPIC_API_KEY",
        "openai": "OPENAI_API_KEY",
        "gemini": "GEMINI_API_KEY",
    }


def test_is_placeholder_heuristics():
    assert is_placeholder("placeholder-value")
    assert is_placeholder("ChangeMe123")
    assert is_placeholder("test_token")
    assert not is_placeholder("sk-real-value")
    assert not is_placeholder(None)


def test_resolve_provider_key_prefers_canonical(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "canon")
    monkeypatch.setenv("GOOGLE_API_KEY", "alias")
    assert resolve_provider_key("gemini") == ("canon", "GEMINI_API_KEY")


def test_resolve_provider_key_skips_placeholders(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "your-key-placeholder")
    assert resolve_provider_key("openai") == (None, None)


def test_defaults_when_nothing_configured():
    cfg = get_provider_config("anthropic")
    assert cfg["model"] == "claude-3-5-sonnet-20241022"
    assert cfg["max_tokens"] == 800
    assert "api_key" not in cfg


def test_merge_order_file_then_env_then_overrides(tmp_path, monkeypatch):
    path = tmp_path / "coachbot.yaml"
    path.write_text(
        "openai:\n  model: from-file\n  temperature: 0.9\n"
        "day_plans:\n  1: Poser le cadre\n  '2': Premier pas\n  bad: ignored\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("COACHBOT_CONFIG_FILE", str(path))
    reset_config_cache()

    cfg = get_provider_config("openai")
    assert cfg["model"] == "from-file" and cfg["temperature"] == 0.9

    monkeypatch.setenv("OPENAI_MODEL", "from-env")
    assert get_provider_config("openai")["model"] == "from-env"
    assert get_provider_config("openai", {"model": "explicit", "api_key": None})["model"] == "explicit"

    assert get_settings().day_plans == {1: "Poser le cadre", 2: "Premier pas"}


def test_json_config_file_is_accepted(tmp_path, monkeypatch):
    path = tmp_path / "coachbot.json"
    path.write_text(json.dumps({"gemini": {"api_key": "file-key"}}), encoding="utf-8")
    monkeypatch.setenv("COACHBOT_CONFIG_FILE", str(path))
    reset_config_cache()
    assert get_provider_config("gemini")["api_key"] == "file-key"


def test_settings_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("COACHBOT_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("COACHBOT_CORS_ORIGINS", "https://a.example, https://b.example,")
    reset_config_cache()
    s = get_settings()
    assert s.db_path == str(tmp_path / "x.db")
    assert s.cors_origins == ("https://a.example", "https://b.example")
    assert get_settings() is s
