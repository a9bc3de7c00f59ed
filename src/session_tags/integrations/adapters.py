"""Capability interface for host integrations (page builders, templates)."""

from __future__ import annotations

import html
from abc import ABC, abstractmethod

from session_tags.core.lookup import lookup_value
from session_tags.core.registry import ParameterRegistry
from session_tags.core.session_store import SessionParameterStore
from session_tags.models import SourceDescriptor


class ParameterSourceAdapter(ABC):
    """What a host needs in order to offer and render tracked parameters."""

    @abstractmethod
    def register_parameter_source(self, registry: ParameterRegistry) -> list[SourceDescriptor]:
        """Describe the tracked parameters the host can offer to editors."""

    @abstractmethod
    def render_parameter_value(
        self,
        store: SessionParameterStore,
        registry: ParameterRegistry,
        name: str,
        default: str = "",
    ) -> str:
        """Return the value for *name*, ready to be inserted by the host."""


class HtmlAdapter(ParameterSourceAdapter):
    """Adapter for hosts that insert values straight into HTML."""

    def register_parameter_source(self, registry: ParameterRegistry) -> list[SourceDescriptor]:
        return [SourceDescriptor(key=p.name, label=p.name) for p in registry.tracked_parameters]

    def render_parameter_value(
        self,
        store: SessionParameterStore,
        registry: ParameterRegistry,
        name: str,
        default: str = "",
    ) -> str:
        return html.escape(lookup_value(store, registry, name, default))
