"""Pytest configuration for the coachbot test suite.

Every test gets a clean process environment for vendor credentials and
config caches. Upstream vendors are faked with ``httpx.MockTransport``
installed through the pooled client factory, so no test touches the network.
"""

from __future__ import annotations

import logging
from typing import Iterator, List

import httpx
import pytest
from fastapi.testclient import TestClient

from coachbot.base.http import set_transport_override
from coachbot.base.logging import get_logger
from coachbot.config import Settings, reset_config_cache

from .helpers import FakeUpstream

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "ANTHROPIC_MODEL",
    "ANTHROPIC_BASE_URL",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "GEMINI_MODEL",
    "GEMINI_BASE_URL",
    "COACHBOT_CONFIG_FILE",
    "COACHBOT_DB_PATH",
    "COACHBOT_PROMPT_PATH",
    "COACHBOT_CORS_ORIGINS",
    "COACHBOT_TIMEOUT_CONNECT_SECONDS",
    "COACHBOT_TIMEOUT_READ_SECONDS",
    "COACHBOT_STREAM_IDLE_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop vendor keys and coachbot settings from the environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def upstream() -> Iterator[FakeUpstream]:
    fake = FakeUpstream()
    set_transport_override(httpx.MockTransport(fake))
    yield fake
    set_transport_override(None)


@pytest.fixture()
def vendor_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-unit")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai-unit")
    monkeypatch.setenv("GEMINI_API_KEY", "gm-unit")


@pytest.fixture()
def db_path(tmp_path) -> str:
    return str(tmp_path / "journal.db")


@pytest.fixture()
def settings(db_path: str) -> Settings:
    return Settings(
        db_path=db_path,
        prompt_path=None,
        cors_origins=("http://localhost:3000",),
        day_plans={1: "Clarifier ton objectif."},
    )


@pytest.fixture()
def client(settings: Settings, upstream: FakeUpstream) -> Iterator[TestClient]:
    from coachbot.service.app import create_app

    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture()
def log_records(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[logging.LogRecord]]:
    """Capture records reaching the shared ``coachbot`` logger."""
    monkeypatch.setenv("COACHBOT_LOG_LEVEL", "DEBUG")
    base = get_logger()
    prev_level = base.level
    base.setLevel(logging.DEBUG)
    records: List[logging.LogRecord] = []
    handler = logging.Handler(level=logging.DEBUG)
    handler.emit = records.append  # type: ignore[method-assign]
    base.addHandler(handler)
    try:
        yield records
    finally:
        base.removeHandler(handler)
        base.setLevel(prev_level)
