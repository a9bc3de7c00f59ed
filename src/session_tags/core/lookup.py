"""Value lookup with configured fallbacks, and the display-condition checks."""

from __future__ import annotations

from collections.abc import Iterable

from session_tags.core.registry import ParameterRegistry
from session_tags.core.session_store import SessionParameterStore


def lookup_value(
    store: SessionParameterStore,
    registry: ParameterRegistry,
    name: str,
    default: str = "",
) -> str:
    """Resolve the value shown for *name*.

    Order: the captured value, then a non-empty *default* from the caller,
    then the parameter's configured fallback, then ``""``.
    """
    value = store.get(name)
    if value:
        return value
    if default:
        return default
    param = registry.get(name)
    if param is not None and param.fallback:
        return param.fallback
    return ""


def has_value(store: SessionParameterStore, name: str) -> bool:
    """True if a non-empty value was captured for *name*."""
    return bool(store.get(name))


def has_any_value(store: SessionParameterStore, registry: ParameterRegistry) -> bool:
    """True if any tracked parameter has a captured value."""
    return any(has_value(store, p.name) for p in registry.tracked_parameters)


def value_equals(store: SessionParameterStore, name: str, expected: str) -> bool:
    return store.get(name) == expected


def _candidates(values: str | Iterable[str]) -> list[str]:
    items = values.split("\n") if isinstance(values, str) else values
    return [item.strip() for item in items if item.strip()]


def value_in(store: SessionParameterStore, name: str, values: str | Iterable[str]) -> bool:
    """True if the captured value for *name* is one of *values*.

    *values* may be a newline-separated string; entries are stripped and
    blank lines ignored. A missing value never matches.
    """
    value = store.get(name)
    return bool(value) and value in _candidates(values)
