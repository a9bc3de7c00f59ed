"""FastAPI application entry point: session middleware and parameter API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from session_tags.config import Settings, settings
from session_tags.core.codec import generate_secret_key
from session_tags.core.lookup import has_any_value, has_value, lookup_value, value_equals, value_in
from session_tags.core.parameters import RegistryProvider
from session_tags.core.registry import ParameterRegistry
from session_tags.core.sanitize import sanitize_text
from session_tags.core.session_store import SessionParameterStore
from session_tags.core.url_composer import compose_url
from session_tags.exceptions import ConfigurationError, FormMappingError, SessionUnavailableError
from session_tags.integrations.adapters import HtmlAdapter
from session_tags.integrations.forms import build_form_url, store_form_submission
from session_tags.models import (
    ConditionResponse,
    FormSubmission,
    FormUrlRequest,
    HealthResponse,
    LinkRequest,
    ObfuscationConfig,
    ParamsResponse,
    ParamValueResponse,
    ParamValueUpdate,
    SourceDescriptor,
    SubmissionResponse,
    UrlResponse,
)
from session_tags.pipeline.capture import capture
from session_tags.pipeline.redirects import find_redirect
from session_tags.services.redis_client import RedisClient
from session_tags.services.session import SessionContext, get_registry, get_store, new_session_id
from session_tags.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

ANY_PARAMETER = "_any"

_adapter = HtmlAdapter()


def obfuscation_from_settings(cfg: Settings) -> ObfuscationConfig:
    """Build the obfuscation config, generating a key if one is required but unset.

    Raises:
        ConfigurationError: If the configured key contains the token separator.
    """
    secret_key = cfg.secret_key
    if cfg.url_encoding and not secret_key:
        # Process-local key: links issued before a restart stop decoding.
        secret_key = generate_secret_key()
        logger.warning("codec.secret_key_generated")
    try:
        return ObfuscationConfig(enabled=cfg.url_encoding, secret_key=secret_key)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid secret key: {exc}") from exc


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the parameter registry and connect to Redis."""
    configure_logging(settings.environment, settings.log_level, settings.quiet_loggers)
    log = structlog.get_logger(__name__)

    log.info("session_tags.startup", environment=settings.environment, port=settings.port)

    # Invalid parameter config is fatal here; later reloads only log.
    app.state.registry_provider = RegistryProvider(
        settings.parameters_file,
        obfuscation_from_settings(settings),
        check_interval=settings.registry_check_seconds,
    )
    app.state.registry_provider.load()

    app.state.sessions = RedisClient(settings.redis_url)
    await app.state.sessions.connect()

    log.info("session_tags.ready")

    yield

    log.info("session_tags.shutdown")
    await app.state.sessions.disconnect()


app = FastAPI(
    title="SessionTags",
    description="Captures tracked URL parameters into the visitor session and reuses them in links and forms.",
    version="1.2.0",
    lifespan=lifespan,
)


def _unavailable() -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": "Session storage unavailable."})


# ---------------------------------------------------------------------------
# Session middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def session_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Load the session, capture tracked parameters, redirect, persist."""
    sessions: RedisClient = request.app.state.sessions
    # stat() and a possible YAML reload are blocking file I/O.
    registry: ParameterRegistry = await run_in_threadpool(
        request.app.state.registry_provider.current
    )
    ttl_seconds = settings.session_ttl_minutes * 60

    cookie_id = request.cookies.get(settings.session_cookie_name)
    try:
        data = await sessions.load_session(cookie_id, ttl_seconds) if cookie_id else None
    except SessionUnavailableError:
        return _unavailable()

    if data is None:
        # Ids the backend does not know are never adopted.
        session = SessionContext(new_session_id(), {}, is_new=True)
    else:
        session = SessionContext(cookie_id, data, is_new=False)
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(session=session.session_id[:8])
    request.state.session = session
    request.state.registry = registry

    query = request.query_params
    captured = capture(query, registry, session.store)
    if captured:
        logger.info("session.captured", names=captured, new_session=session.is_new)

    location = find_redirect(query, registry, session.store, str(request.url))
    if location is not None:
        response: Response = RedirectResponse(location, status_code=302)
    else:
        response = await call_next(request)

    if session.needs_save:
        try:
            await sessions.save_session(session.session_id, session.data, ttl_seconds)
        except SessionUnavailableError:
            return _unavailable()
        if session.is_new:
            response.set_cookie(
                settings.session_cookie_name,
                session.session_id,
                httponly=True,
                samesite="lax",
                secure=settings.cookie_secure,
            )
    return response


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/params", response_model=ParamsResponse, summary="All captured values")
async def list_params(store: SessionParameterStore = Depends(get_store)) -> ParamsResponse:
    return ParamsResponse(params=store.get_all())


@app.get("/params/{name}", response_model=ParamValueResponse, summary="One value with fallback")
async def read_param(
    name: str,
    default: str = Query(default="", description="Used when nothing was captured"),
    escape: bool = Query(default=False, description="HTML-escape the value"),
    store: SessionParameterStore = Depends(get_store),
    registry: ParameterRegistry = Depends(get_registry),
) -> ParamValueResponse:
    """Return the captured value, the caller default, or the configured fallback."""
    if escape:
        value = _adapter.render_parameter_value(store, registry, name, default)
    else:
        value = lookup_value(store, registry, name, default)
    return ParamValueResponse(name=name, value=value)


@app.put("/params/{name}", response_model=ParamValueResponse, summary="Set a tracked value")
async def write_param(
    name: str,
    body: ParamValueUpdate,
    store: SessionParameterStore = Depends(get_store),
    registry: ParameterRegistry = Depends(get_registry),
) -> ParamValueResponse:
    """Adapter write path: store a sanitised value for a tracked parameter."""
    if registry.get(name) is None:
        raise HTTPException(status_code=404, detail=f"Parameter {name!r} is not tracked.")
    value = sanitize_text(body.value)
    store.set(name, value)
    return ParamValueResponse(name=name, value=value)


@app.post("/links", response_model=UrlResponse, summary="Compose a link with tracked parameters")
async def create_link(
    body: LinkRequest,
    registry: ParameterRegistry = Depends(get_registry),
) -> UrlResponse:
    pairs = [(p.name, p.value) for p in body.params]
    return UrlResponse(url=compose_url(body.base_url, pairs, registry))


@app.post("/forms/url", response_model=UrlResponse, summary="Prefilled third-party form URL")
async def create_form_url(
    body: FormUrlRequest,
    store: SessionParameterStore = Depends(get_store),
    registry: ParameterRegistry = Depends(get_registry),
) -> UrlResponse:
    try:
        url = build_form_url(
            body.url, body.type, body.params, body.form_params, store, registry
        )
    except FormMappingError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return UrlResponse(url=url)


@app.post(
    "/forms/submissions",
    response_model=SubmissionResponse,
    summary="Store submitted form fields as tracked values",
)
async def submit_form(
    body: FormSubmission,
    store: SessionParameterStore = Depends(get_store),
    registry: ParameterRegistry = Depends(get_registry),
) -> SubmissionResponse:
    stored = store_form_submission(body.fields, body.mappings, registry, store)
    return SubmissionResponse(stored=stored)


@app.get("/conditions/{name}", response_model=ConditionResponse, summary="Display condition check")
async def check_condition(
    name: str,
    equals: str | None = Query(default=None, description="Match this exact value"),
    one_of: str | None = Query(default=None, description="Newline-separated allowed values"),
    store: SessionParameterStore = Depends(get_store),
    registry: ParameterRegistry = Depends(get_registry),
) -> ConditionResponse:
    """Presence by default; ``equals`` or ``one_of`` compare the value.

    ``_any`` checks whether any tracked parameter has a value.
    """
    if name == ANY_PARAMETER:
        matched = has_any_value(store, registry)
    elif equals is not None:
        matched = value_equals(store, name, equals)
    elif one_of is not None:
        matched = value_in(store, name, one_of)
    else:
        matched = has_value(store, name)
    return ConditionResponse(name=name, matched=matched)


@app.get("/sources", response_model=list[SourceDescriptor], summary="Tracked parameters for hosts")
async def list_sources(
    registry: ParameterRegistry = Depends(get_registry),
) -> list[SourceDescriptor]:
    return _adapter.register_parameter_source(registry)


@app.get("/health", response_model=HealthResponse, summary="Service health check")
async def health(registry: ParameterRegistry = Depends(get_registry)) -> HealthResponse:
    """Check Redis liveness and report the loaded configuration."""
    redis_status = "connected"
    try:
        await app.state.sessions.ping()
    except Exception:  # noqa: BLE001
        redis_status = "unavailable"

    return HealthResponse(
        status="ok" if redis_status == "connected" else "degraded",
        redis=redis_status,
        tracked_parameters=len(registry),
        url_encoding=registry.is_obfuscation_enabled(),
    )


# ---------------------------------------------------------------------------
# Generic error handler
# ---------------------------------------------------------------------------


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all error handler that logs and returns a structured response."""
    logger.error("unhandled_exception", path=str(request.url), error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error.", "error": str(exc)},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
