"""Append tracked parameters to outbound URLs."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import quote_plus, urlsplit

import structlog

from session_tags.core.registry import ParameterRegistry

logger = structlog.get_logger(__name__)


def split_fragment(url: str) -> tuple[str, str]:
    """Split *url* into ``(everything before '#', '#fragment' or '')``."""
    head, sep, fragment = url.partition("#")
    return head, f"{sep}{fragment}"


def has_query(url: str) -> bool:
    """Return True if *url* already carries a non-empty query string.

    A URL the parser rejects is treated as path-only.
    """
    try:
        return bool(urlsplit(url).query)
    except ValueError:
        return False


def append_query(url: str, pairs: Iterable[tuple[str, str]]) -> str:
    """Append already-chosen ``key=value`` pairs without touching *url*.

    Values are percent-encoded; keys are emitted as given. Any fragment
    stays at the end.
    """
    parts = [f"{key}={quote_plus(value)}" for key, value in pairs]
    if not parts:
        return url
    head, fragment = split_fragment(url)
    if head.endswith(("?", "&")):
        separator = ""
    elif has_query(head):
        separator = "&"
    else:
        separator = "?"
    return f"{head}{separator}{'&'.join(parts)}{fragment}"


class UrlComposer:
    """Builds links that carry tracked parameters.

    Only parameters known to the registry are emitted, under their short
    alias when one is configured, and obfuscated when the registry says so.

    Args:
        registry: Registry for the current request.
    """

    def __init__(self, registry: ParameterRegistry) -> None:
        self._registry = registry

    def query_pairs(self, params: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """Translate logical pairs into the key/value pairs put on the URL."""
        encode = self._registry.is_obfuscation_enabled()
        codec = self._registry.codec
        emitted: list[tuple[str, str]] = []
        for name, value in params:
            param = self._registry.get(name)
            if param is None:
                logger.debug("composer.untracked_dropped", name=name)
                continue
            emitted.append((param.url_key, codec.encode(value) if encode else value))
        return emitted

    def compose(self, base_url: str, params: Iterable[tuple[str, str]]) -> str:
        """Return *base_url* with the tracked subset of *params* appended."""
        return append_query(base_url, self.query_pairs(params))


def compose_url(
    base_url: str,
    params: Iterable[tuple[str, str]],
    registry: ParameterRegistry,
) -> str:
    """Shortcut for ``UrlComposer(registry).compose(base_url, params)``."""
    return UrlComposer(registry).compose(base_url, params)
