"""Exceptions raised across the SessionTags service."""

from __future__ import annotations


class SessionTagsError(RuntimeError):
    """Base class for errors raised by this package."""


class ConfigurationError(SessionTagsError):
    """Raised when the tracked-parameter configuration is unreadable or invalid."""


class SessionUnavailableError(SessionTagsError):
    """Raised when the session backend cannot load or persist a session."""


class FormMappingError(SessionTagsError, ValueError):
    """Raised when session and form parameter lists cannot be paired."""
