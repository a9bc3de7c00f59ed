"""Capture pipeline: copy tracked query parameters into the session store."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from session_tags.core.registry import ParameterRegistry
from session_tags.core.sanitize import sanitize_text
from session_tags.core.session_store import SessionParameterStore

logger = structlog.get_logger(__name__)


def capture(
    query: Mapping[str, str],
    registry: ParameterRegistry,
    store: SessionParameterStore,
) -> list[str]:
    """Store every tracked parameter present in *query*.

    Iterates the registry's incoming keys (names and aliases), not the
    query, so unrelated parameters are ignored. Values are decoded when
    obfuscation is enabled, sanitised, and written under the canonical
    name, overwriting any earlier value from this session.

    Args:
        query:    Query-string key/value pairs of the current request.
        registry: Registry for the current request.
        store:    The visitor's session store.

    Returns:
        Canonical names written, in registry order.
    """
    decode = registry.is_obfuscation_enabled()
    codec = registry.codec
    written: list[str] = []

    for incoming_key, canonical in registry.incoming_keys.items():
        raw = query.get(incoming_key)
        if not raw:
            continue

        value = codec.decode(raw) if decode else raw
        store.set(canonical, sanitize_text(value))
        written.append(canonical)
        logger.debug("capture.stored", key=incoming_key, name=canonical, decoded=decode)

    return written
