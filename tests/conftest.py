"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from session_tags.core.registry import ParameterRegistry
from session_tags.core.session_store import SessionParameterStore
from session_tags.exceptions import SessionUnavailableError
from session_tags.models import ObfuscationConfig, TrackedParameter


# ---------------------------------------------------------------------------
# Pytest configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)

SECRET = "s3cr3t-K3y!"

PARAMETERS_YAML = """\
parameters:
  - name: quelle
    short_alias: q
  - name: kampagne
    short_alias: k
    fallback: standard
  - name: id
"""


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tracked_parameters() -> list[TrackedParameter]:
    """quelle (alias q), kampagne (alias k, fallback), id (no alias)."""
    return [
        TrackedParameter(name="quelle", short_alias="q"),
        TrackedParameter(name="kampagne", short_alias="k", fallback="standard"),
        TrackedParameter(name="id"),
    ]


@pytest.fixture
def secret_key() -> str:
    """Key used by the obfuscating registry."""
    return SECRET


@pytest.fixture
def registry(tracked_parameters: list[TrackedParameter]) -> ParameterRegistry:
    """Registry with obfuscation switched off."""
    return ParameterRegistry(tracked_parameters)


@pytest.fixture
def encoding_registry(tracked_parameters: list[TrackedParameter]) -> ParameterRegistry:
    """Registry with obfuscation switched on."""
    return ParameterRegistry(
        tracked_parameters, ObfuscationConfig(enabled=True, secret_key=SECRET)
    )


@pytest.fixture
def session() -> dict[str, Any]:
    """A bare host session mapping."""
    return {}


@pytest.fixture
def store(session: dict[str, Any]) -> SessionParameterStore:
    """Parameter store over an empty session."""
    return SessionParameterStore(session)


@pytest.fixture
def parameters_file(tmp_path: Path) -> Path:
    """Parameter YAML file matching :func:`tracked_parameters`."""
    path = tmp_path / "parameters.yaml"
    path.write_text(PARAMETERS_YAML, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Session backend fake
# ---------------------------------------------------------------------------


class InMemorySessions:
    """Stands in for :class:`RedisClient`; sessions round-trip through JSON."""

    def __init__(self) -> None:
        self.sessions: dict[str, str] = {}
        self.available = True

    async def load_session(self, session_id: str, ttl_seconds: int) -> dict[str, Any] | None:
        if not self.available:
            raise SessionUnavailableError("session backend unavailable")
        raw = self.sessions.get(session_id)
        return json.loads(raw) if raw else None

    async def save_session(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        if not self.available:
            raise SessionUnavailableError("session backend unavailable")
        self.sessions[session_id] = json.dumps(data)

    async def ping(self) -> bool:
        return self.available


@pytest.fixture
def sessions() -> InMemorySessions:
    """In-memory session backend."""
    return InMemorySessions()
