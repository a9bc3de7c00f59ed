"""Prefilled URLs for embedded third-party forms, and form write-back."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from session_tags.core.lookup import lookup_value
from session_tags.core.registry import ParameterRegistry
from session_tags.core.sanitize import sanitize_text
from session_tags.core.session_store import SessionParameterStore
from session_tags.core.url_composer import append_query, split_fragment
from session_tags.exceptions import FormMappingError
from session_tags.models import FieldMapping

logger = structlog.get_logger(__name__)

GOOGLE_ENTRY_PREFIX = "entry."
GOOGLE_VIEWFORM = "viewform"


def google_form_url(url: str, values: Mapping[str, str]) -> str:
    """Append ``entry.<id>=value`` pairs and make sure the path ends in viewform."""
    if not values:
        return url
    pairs = [
        (key if key.startswith(GOOGLE_ENTRY_PREFIX) else f"{GOOGLE_ENTRY_PREFIX}{key}", value)
        for key, value in values.items()
    ]
    if f"/{GOOGLE_VIEWFORM}" not in url:
        head, fragment = split_fragment(url)
        path, sep, query = head.partition("?")
        if not path.endswith("/"):
            path += "/"
        url = f"{path}{GOOGLE_VIEWFORM}{sep}{query}{fragment}"
    return append_query(url, pairs)


def microsoft_form_url(url: str, values: Mapping[str, str]) -> str:
    """Append bare ``key=value`` pairs."""
    return append_query(url, values.items())


_BUILDERS = {
    "google": google_form_url,
    "microsoft": microsoft_form_url,
}


def build_form_url(
    url: str,
    form_type: str,
    session_params: Sequence[str],
    form_params: Sequence[str] | None,
    store: SessionParameterStore,
    registry: ParameterRegistry,
) -> str:
    """Build the prefilled URL for an embedded form.

    Each session parameter is paired with the form field at the same
    position (*form_params* defaults to *session_params*). Values resolve
    like :func:`lookup_value`, so an uncaptured parameter sends its
    configured fallback. Parameters that resolve to nothing are left out;
    with nothing to send, or for an unknown *form_type*, the URL is
    returned as given (stripped).

    Raises:
        FormMappingError: If the two parameter lists differ in length.
    """
    url = url.strip()
    session_params = [p.strip() for p in session_params if p.strip()]
    fields = [p.strip() for p in form_params if p.strip()] if form_params else session_params
    if len(fields) != len(session_params):
        raise FormMappingError(
            "session parameters and form parameters must have the same number of entries"
        )

    values: dict[str, str] = {}
    for session_param, field in zip(session_params, fields):
        value = lookup_value(store, registry, session_param)
        if value:
            values[field] = value

    builder = _BUILDERS.get(form_type.strip().lower())
    if builder is None:
        logger.warning("forms.unknown_type", form_type=form_type)
        return url
    if not values:
        return url
    return builder(url, values)


def store_form_submission(
    fields: Mapping[str, str],
    mappings: Sequence[FieldMapping],
    registry: ParameterRegistry,
    store: SessionParameterStore,
) -> list[str]:
    """Write submitted form values into the session store.

    Mappings with blank ids, untracked target names, or fields absent from
    the submission are skipped. Returns the canonical names written.
    """
    stored: list[str] = []
    for mapping in mappings:
        field_id = mapping.form_field_id.strip()
        name = mapping.session_tag_key.strip()
        if not field_id or not name:
            continue
        if registry.get(name) is None:
            logger.warning("forms.untracked_mapping", name=name)
            continue
        if field_id not in fields:
            continue
        store.set(name, sanitize_text(fields[field_id]))
        stored.append(name)
    logger.info("forms.submission_stored", names=stored)
    return stored
