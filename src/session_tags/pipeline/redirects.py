"""Per-parameter landing redirects."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from session_tags.core.registry import ParameterRegistry
from session_tags.core.session_store import SessionParameterStore
from session_tags.core.url_composer import compose_url

logger = structlog.get_logger(__name__)


def find_redirect(
    query: Mapping[str, str],
    registry: ParameterRegistry,
    store: SessionParameterStore,
    current_url: str,
) -> str | None:
    """Return the URL to redirect to, or ``None``.

    The first tracked parameter that has a ``redirect_url`` and appears in
    *query* (by name or alias) wins. The captured value is forwarded, so
    run this after :func:`~session_tags.pipeline.capture.capture`. No
    redirect is issued when *current_url* already starts with the target.
    """
    for param in registry.tracked_parameters:
        target = param.redirect_url
        if not target:
            continue
        if param.name not in query and not (param.short_alias and param.short_alias in query):
            continue
        if current_url.startswith(target):
            continue

        location = compose_url(target, [(param.name, store.get(param.name))], registry)
        logger.info("redirect.issued", name=param.name, target=target)
        return location
    return None
