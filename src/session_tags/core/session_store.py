"""Per-session key/value store for captured parameters."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any


class SessionParameterStore:
    """Captured values held inside the host session mapping.

    The values live in ``session[SESSION_KEY]`` as a plain
    ``{canonical name: value}`` dict, created on first touch. Keys are
    always canonical names; alias resolution happens before :meth:`set`.

    Args:
        session: The host's session mapping for the current visitor.
    """

    SESSION_KEY = "sessiontags_params"

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self._session = session
        self.modified = False

    @property
    def _values(self) -> dict[str, str]:
        values = self._session.get(self.SESSION_KEY)
        if not isinstance(values, dict):
            values = {}
            self._session[self.SESSION_KEY] = values
        return values

    def get(self, name: str, default: str = "") -> str:
        """Return the stored value for *name*, or *default* untouched."""
        return self._values.get(name, default)

    def get_all(self) -> dict[str, str]:
        return dict(self._values)

    def set(self, name: str, value: str) -> None:
        """Store *value* under *name*. Callers sanitise beforehand."""
        values = self._values
        if values.get(name) != value:
            values[name] = value
            self.modified = True

    def __contains__(self, name: object) -> bool:
        return name in self._values
