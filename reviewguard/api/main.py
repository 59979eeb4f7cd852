"""FastAPI application factory for reviewguard."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from reviewguard import __version__
from reviewguard.api.routes import router
from reviewguard.api.security import (
    RequestBodyLimitMiddleware,
    SecurityHeadersMiddleware,
    sanitize_request_id,
)
from reviewguard.config import Settings, configure_logging, get_settings
from reviewguard.engine import GuardEngine
from reviewguard.rate_limit import RateLimiter

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("reviewguard.audit")

# Where a malformed value came from; form fields are reported bare.
_LOCATIONS = frozenset({"body", "query", "header", "path"})


def _install_middleware(app: FastAPI, settings: Settings) -> None:
    # Added innermost first; the request context ends up outermost.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestBodyLimitMiddleware,
        max_bytes=settings.max_request_body_bytes,
    )
    app.middleware("http")(_request_context)


async def _request_context(request: Request, call_next) -> Response:  # noqa: ANN001
    raw_id = request.headers.get("X-Request-ID", "")
    request_id = sanitize_request_id(raw_id) if raw_id else ""
    if raw_id and not request_id:
        audit_logger.warning(
            "INVALID_REQUEST_ID ip=%s",
            request.client.host if request.client else "unknown",
        )
    request.state.request_id = request_id or uuid.uuid4().hex
    start = time.monotonic()
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    response.headers["X-Response-Time-Ms"] = str(round((time.monotonic() - start) * 1000, 2))
    return response


def field_error(err: dict[str, Any]) -> dict[str, str]:
    """Flatten one pydantic error into the shape form errors use.

    ``("body", "phone")`` becomes field ``phone`` with location ``body``.
    The offending input is never included.
    """
    loc = [str(part) for part in err.get("loc", ())]
    location = loc.pop(0) if loc and loc[0] in _LOCATIONS else "body"
    return {
        "field": ".".join(loc) or location,
        "location": location,
        "message": err.get("msg", "Invalid value"),
        "type": err.get("type", "value_error"),
    }


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [field_error(err) for err in exc.errors()]
        logger.debug("Malformed request to %s: %s", request.url.path,
                     [e["field"] for e in errors])
        return JSONResponse(
            status_code=422,
            content={
                "detail": errors,
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled exception request_id=%s", request_id)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "request_id": request_id},
        )


def _policy(limiter: RateLimiter) -> dict[str, int]:
    return {"max_attempts": limiter.max_attempts, "window_ms": limiter.window_ms}


def create_app(settings: Settings | None = None, engine: GuardEngine | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Form input validation, sanitization and abuse rate-limiting",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    _install_middleware(app, settings)
    _install_error_handlers(app)

    app.state.settings = settings
    app.state.engine = engine or GuardEngine(settings=settings)
    app.include_router(router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, Any]:
        guard: GuardEngine = app.state.engine
        return {
            "status": "ok",
            "version": __version__,
            "rate_limits": {
                "auth": _policy(guard.auth_limiter),
                "general": _policy(guard.general_limiter),
            },
        }

    return app


app = create_app()
