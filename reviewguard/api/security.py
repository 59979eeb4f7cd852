"""Security middleware and request helpers for the reviewguard API."""

from __future__ import annotations

import hmac
import logging
import re
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

_REQUEST_ID_RE = re.compile(r"^[\w\-]{1,128}$")
_CLIENT_KEY_RE = re.compile(r"^[\w\-.:@]{1,128}$")


def keys_match(supplied: str | None, expected: str) -> bool:
    """Constant-time comparison of a supplied API key against the configured one."""
    if supplied is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def sanitize_request_id(raw: str) -> str:
    """Keep X-Request-ID safe for logs and headers.

    Allows word characters and hyphens, max 128 chars. Returns an empty
    string when nothing usable remains; the caller then generates an id.
    """
    if _REQUEST_ID_RE.match(raw):
        return raw
    cleaned = re.sub(r"[^\w\-]", "", raw)[:128]
    if cleaned:
        logger.warning("Sanitized X-Request-ID header (contained invalid characters)")
    return cleaned


def client_key(request: Request, trusted_header: str = "") -> str:
    """Rate-limit key for the caller.

    The peer address, unless *trusted_header* names a header set by a proxy
    in front of the app and that header is well-formed. Client-supplied
    headers are otherwise ignored, so a caller cannot pick a fresh bucket.
    """
    peer = request.client.host if request.client else "unknown"
    if not trusted_header:
        return peer
    header = request.headers.get(trusted_header, "").strip()
    if header and _CLIENT_KEY_RE.match(header):
        return header
    if header:
        logger.debug("Ignoring malformed %s header", trusted_header)
    return peer


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject standard security headers into every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=63072000; includeSubDomains"
            )
        return response


class RequestBodyLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length exceeds ``max_bytes``."""

    def __init__(self, app: Any, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit():
            if int(content_length) > self.max_bytes:
                logger.warning(
                    "Rejected request: Content-Length %s exceeds limit %s",
                    content_length, self.max_bytes,
                )
                return JSONResponse(
                    status_code=413,
                    content={
                        "detail": f"Request body too large. Maximum: {self.max_bytes} bytes."
                    },
                )
        return await call_next(request)
