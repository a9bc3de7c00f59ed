"""Pydantic v2 data models for SessionTags."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from session_tags.core.codec import SEPARATOR


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------


class TrackedParameter(BaseModel):
    """A URL parameter the service is allowed to capture and emit."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    short_alias: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("short_alias", "shortcode"),
    )
    fallback: str = ""
    redirect_url: str = ""

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("parameter name must not be empty")
        return value

    @field_validator("short_alias")
    @classmethod
    def _blank_alias_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("fallback", "redirect_url", mode="before")
    @classmethod
    def _none_is_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def url_key(self) -> str:
        """Key emitted in generated URLs: the alias when one is configured."""
        return self.short_alias or self.name


class ParameterConfig(BaseModel):
    """Validated contents of the tracked-parameter file.

    Rejects duplicate names and any alias that collides with a canonical
    name or with another alias.
    """

    parameters: list[TrackedParameter] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_collisions(self) -> "ParameterConfig":
        names: set[str] = set()
        for param in self.parameters:
            if param.name in names:
                raise ValueError(f"duplicate parameter name {param.name!r}")
            names.add(param.name)

        aliases: set[str] = set()
        for param in self.parameters:
            alias = param.short_alias
            if alias is None:
                continue
            if alias in names:
                raise ValueError(
                    f"alias {alias!r} of {param.name!r} collides with a parameter name"
                )
            if alias in aliases:
                raise ValueError(f"alias {alias!r} is used by more than one parameter")
            aliases.add(alias)
        return self


class ObfuscationConfig(BaseModel):
    """Whether URL values are obfuscated, and the key they are bound to."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    secret_key: str = ""

    @field_validator("secret_key")
    @classmethod
    def _key_without_separator(cls, value: str) -> str:
        # A key containing the separator splits every token into three parts.
        if SEPARATOR in value:
            raise ValueError(f"secret key must not contain {SEPARATOR!r}")
        return value


# ---------------------------------------------------------------------------
# API request models
# ---------------------------------------------------------------------------


class ParamPair(BaseModel):
    """One logical ``name=value`` pair for URL composition."""

    name: str
    value: str


class LinkRequest(BaseModel):
    """Body of POST /links."""

    base_url: str
    params: list[ParamPair] = Field(default_factory=list)


class FormUrlRequest(BaseModel):
    """Body of POST /forms/url."""

    type: str = "google"
    url: str = Field(..., min_length=1)
    params: list[str] = Field(default_factory=list)
    form_params: list[str] = Field(default_factory=list)


class FieldMapping(BaseModel):
    """Maps a submitted form field onto a tracked parameter."""

    form_field_id: str
    session_tag_key: str


class FormSubmission(BaseModel):
    """Body of POST /forms/submissions."""

    fields: dict[str, str] = Field(default_factory=dict)
    mappings: list[FieldMapping] = Field(default_factory=list)


class ParamValueUpdate(BaseModel):
    """Body of PUT /params/{name}."""

    value: str


# ---------------------------------------------------------------------------
# API response models
# ---------------------------------------------------------------------------


class ParamsResponse(BaseModel):
    """Response from GET /params."""

    params: dict[str, str]


class ParamValueResponse(BaseModel):
    """Response from GET /params/{name}."""

    name: str
    value: str


class UrlResponse(BaseModel):
    """Response from POST /links and POST /forms/url."""

    url: str


class SubmissionResponse(BaseModel):
    """Response from POST /forms/submissions."""

    stored: list[str]


class ConditionResponse(BaseModel):
    """Response from GET /conditions/{name}."""

    name: str
    matched: bool


class SourceDescriptor(BaseModel):
    """A tracked parameter as offered to a host integration."""

    key: str
    label: str


class HealthResponse(BaseModel):
    """Response from GET /health."""

    status: str
    redis: str
    tracked_parameters: int
    url_encoding: bool
