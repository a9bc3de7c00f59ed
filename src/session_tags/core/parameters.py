"""Loading the tracked-parameter YAML file into a registry."""

from __future__ import annotations

import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from session_tags.core.registry import ParameterRegistry
from session_tags.exceptions import ConfigurationError
from session_tags.models import ObfuscationConfig, ParameterConfig

logger = structlog.get_logger(__name__)


def load_parameter_config(path: Path) -> ParameterConfig:
    """Read and validate the parameter file at *path*.

    A missing file is an empty configuration, which turns capture and URL
    composition into no-ops.

    Raises:
        ConfigurationError: If the YAML is unreadable or fails validation
            (including name/alias collisions).
    """
    if not path.exists():
        logger.warning("registry.config_missing", path=str(path))
        return ParameterConfig()

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot read parameter file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"parameter file {path} must contain a mapping")

    try:
        return ParameterConfig.model_validate({"parameters": raw.get("parameters") or []})
    except ValidationError as exc:
        raise ConfigurationError(f"invalid parameter file {path}: {exc}") from exc


class RegistryProvider:
    """Process-wide registry that follows changes to the parameter file.

    The file's modification time is checked by :meth:`current` at most once
    per *check_interval* seconds; a change triggers a reload before the
    next request is served. A reload that fails validation keeps the
    previous registry in place.

    Args:
        path:           Location of the YAML parameter file.
        obfuscation:    Obfuscation settings applied to every registry built.
        check_interval: Minimum seconds between two mtime checks.
    """

    def __init__(
        self,
        path: Path,
        obfuscation: ObfuscationConfig,
        check_interval: float = 0.0,
    ) -> None:
        self._path = path
        self._obfuscation = obfuscation
        self._check_interval = check_interval
        self._checked_at: float | None = None
        self._registry: ParameterRegistry | None = None
        self._mtime: float | None = None

    def _stat_mtime(self) -> float | None:
        try:
            return self._path.stat().st_mtime
        except OSError:
            return None

    def load(self) -> ParameterRegistry:
        """Load the file unconditionally. Errors propagate to the caller."""
        mtime = self._stat_mtime()
        config = load_parameter_config(self._path)
        self._registry = ParameterRegistry(config.parameters, self._obfuscation)
        self._mtime = mtime
        self._checked_at = time.monotonic()
        logger.info(
            "registry.loaded",
            path=str(self._path),
            parameters=[p.name for p in config.parameters],
        )
        return self._registry

    def current(self) -> ParameterRegistry:
        """Return the registry, reloading first if the file changed."""
        if self._registry is None:
            return self.load()

        now = time.monotonic()
        if self._checked_at is not None and now - self._checked_at < self._check_interval:
            return self._registry
        self._checked_at = now

        mtime = self._stat_mtime()
        if mtime != self._mtime:
            try:
                return self.load()
            except ConfigurationError as exc:
                logger.error("registry.reload_failed", path=str(self._path), error=str(exc))
                self._mtime = mtime
        return self._registry
