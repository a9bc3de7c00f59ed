"""Tracked-parameter registry: alias resolution and obfuscation settings."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from session_tags.core.codec import Codec
from session_tags.models import ObfuscationConfig, TrackedParameter

logger = structlog.get_logger(__name__)


class ParameterRegistry:
    """Read-only view of the configured parameters for one request.

    Builds the ``{incoming key -> canonical name}`` map from each
    parameter's name and optional short alias. Input that was not checked
    by :class:`~session_tags.models.ParameterConfig` may collide; the last
    registration wins and the overwrite is logged.

    Args:
        parameters:  Tracked parameters in configuration order.
        obfuscation: Obfuscation toggle and secret key.
    """

    def __init__(
        self,
        parameters: Iterable[TrackedParameter],
        obfuscation: ObfuscationConfig | None = None,
    ) -> None:
        self._parameters = tuple(parameters)
        self._obfuscation = obfuscation or ObfuscationConfig()
        self._codec = Codec(self._obfuscation.secret_key)
        self._by_name = {p.name: p for p in self._parameters}
        self._incoming = self._build_incoming_map(self._parameters)

    @staticmethod
    def _build_incoming_map(parameters: tuple[TrackedParameter, ...]) -> dict[str, str]:
        incoming: dict[str, str] = {}

        def register(key: str, canonical: str) -> None:
            previous = incoming.get(key)
            if previous is not None and previous != canonical:
                logger.warning(
                    "registry.key_collision",
                    key=key,
                    previous=previous,
                    winner=canonical,
                )
            incoming[key] = canonical

        for param in parameters:
            register(param.name, param.name)
            if param.short_alias:
                register(param.short_alias, param.name)
        return incoming

    def resolve_incoming_key(self, key: str) -> str | None:
        """Map a query-string key (name or alias) to its canonical name."""
        return self._incoming.get(key)

    @property
    def incoming_keys(self) -> dict[str, str]:
        return dict(self._incoming)

    @property
    def tracked_parameters(self) -> tuple[TrackedParameter, ...]:
        return self._parameters

    def get(self, name: str) -> TrackedParameter | None:
        """Return the parameter whose canonical name is exactly *name*."""
        return self._by_name.get(name)

    def is_obfuscation_enabled(self) -> bool:
        return self._obfuscation.enabled

    @property
    def codec(self) -> Codec:
        return self._codec

    def __len__(self) -> int:
        return len(self._parameters)
