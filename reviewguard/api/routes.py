"""API route definitions for reviewguard."""

from __future__ import annotations

import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from starlette.responses import JSONResponse

from reviewguard.api.security import client_key, keys_match
from reviewguard.engine import GuardEngine
from reviewguard.models import (
    DetectRequest,
    ReviewForm,
    SignInForm,
    SignUpForm,
    SubmissionVerdict,
    SuspiciousInputReport,
)
from reviewguard.suggestions import generate_password_suggestions

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("reviewguard.audit")

router = APIRouter(tags=["guard"])

MAX_SUGGESTIONS = 20

# Never echoed back, even in sanitized form.
_SECRET_FIELDS = ("password", "confirm_password")


def verify_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    """Optional API key auth for /api/v1 endpoints.

    If `RG_API_KEY` is set, requests must include a matching `X-API-Key` header.
    """
    expected = request.app.state.settings.api_key
    if not expected:
        return
    if not keys_match(x_api_key, expected):
        client_ip = request.client.host if request.client else "unknown"
        audit_logger.warning("AUTH_FAILURE ip=%s path=%s", client_ip, request.url.path)
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


def _get_engine(request: Request) -> GuardEngine:
    return request.app.state.engine


def _client_key(request: Request) -> str:
    return client_key(request, request.app.state.settings.trusted_client_key_header)


def retry_after_seconds(retry_after_ms: int) -> int:
    return max(1, math.ceil(retry_after_ms / 1000))


def _verdict_response(verdict: SubmissionVerdict) -> JSONResponse:
    content: dict[str, Any] = verdict.model_dump(mode="json")
    if content.get("outcome"):
        for key in _SECRET_FIELDS:
            content["outcome"]["sanitized_data"].pop(key, None)

    if verdict.rate_limited:
        content["detail"] = "Too many attempts. Please try again later."
        return JSONResponse(
            status_code=429,
            content=content,
            headers={"Retry-After": str(retry_after_seconds(verdict.retry_after_ms))},
        )
    if verdict.suspicious:
        content["detail"] = "Submission rejected: suspicious input"
        return JSONResponse(status_code=400, content=content)
    if not verdict.accepted:
        content["detail"] = "Please fix the errors below"
        return JSONResponse(status_code=422, content=content)
    return JSONResponse(status_code=200, content=content)


@router.post("/signup", dependencies=[Depends(verify_api_key)])
async def sign_up(body: SignUpForm, request: Request) -> JSONResponse:
    engine = _get_engine(request)
    verdict = engine.guard_sign_up(
        body.model_dump(), _client_key(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _verdict_response(verdict)


@router.post("/signin", dependencies=[Depends(verify_api_key)])
async def sign_in(body: SignInForm, request: Request) -> JSONResponse:
    engine = _get_engine(request)
    verdict = engine.guard_sign_in(
        body.model_dump(), _client_key(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _verdict_response(verdict)


@router.post("/reviews", dependencies=[Depends(verify_api_key)])
async def submit_review(body: ReviewForm, request: Request) -> JSONResponse:
    engine = _get_engine(request)
    verdict = engine.guard_review(
        body.model_dump(), _client_key(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _verdict_response(verdict)


@router.post(
    "/detect",
    response_model=SuspiciousInputReport,
    dependencies=[Depends(verify_api_key)],
)
async def detect(body: DetectRequest, request: Request) -> SuspiciousInputReport:
    return _get_engine(request).detector.scan(body.text)


@router.get("/password-suggestions", dependencies=[Depends(verify_api_key)])
async def password_suggestions(
    request: Request,
    count: int = Query(default=3, ge=1, le=MAX_SUGGESTIONS),
) -> dict[str, list[str]]:
    policy = _get_engine(request).forms.password
    return {"suggestions": generate_password_suggestions(count, validator=policy)}
