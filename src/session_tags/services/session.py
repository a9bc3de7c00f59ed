"""Per-request session context shared between middleware and endpoints."""

from __future__ import annotations

import secrets
from typing import Any

from fastapi import Request

from session_tags.core.registry import ParameterRegistry
from session_tags.core.session_store import SessionParameterStore


def new_session_id() -> str:
    """Return a fresh, unguessable session id for the cookie."""
    return secrets.token_urlsafe(32)


class SessionContext:
    """The visitor's session as loaded for one request.

    Args:
        session_id: Id carried in the session cookie.
        data:       Session dict as loaded from the backend (mutated in place).
        is_new:     True when the id was minted for this request.
    """

    def __init__(self, session_id: str, data: dict[str, Any], is_new: bool) -> None:
        self.session_id = session_id
        self.data = data
        self.is_new = is_new
        self.store = SessionParameterStore(data)

    @property
    def needs_save(self) -> bool:
        return self.store.modified


def get_store(request: Request) -> SessionParameterStore:
    """FastAPI dependency: the session's parameter store."""
    return request.state.session.store


def get_registry(request: Request) -> ParameterRegistry:
    """FastAPI dependency: the registry snapshot for this request."""
    return request.state.registry
