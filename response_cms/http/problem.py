"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that turn tagged
`ResponseCMSError`s, framework HTTP errors, request validation failures and
unexpected exceptions into application/problem+json responses.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from response_cms.http.error_mapping import ERROR_MAP, INTERNAL_ERROR
from response_cms.logic.errors import ErrorKind, ResponseCMSError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)

_BEARER_KINDS = {ErrorKind.UNAUTHENTICATED, ErrorKind.TOKEN_EXPIRED, ErrorKind.INVALID_CREDENTIALS}


def build_problem(kind: ErrorKind, detail: str, **extra: Any) -> Dict[str, Any]:
    """Return a problem dict for `kind` using the central error map."""
    mapped = ERROR_MAP[kind]
    problem: Dict[str, Any] = {
        "title": mapped["title"],
        "status": mapped["status"],
        "detail": detail,
        "code": mapped["code"],
    }
    problem.update({k: v for k, v in extra.items() if v is not None})
    return problem


def _is_production(request: Request) -> bool:
    cfg = getattr(request.app.state, "config", None)
    return bool(cfg is not None and cfg.server.is_production)


async def handle_cms_error(request: Request, exc: ResponseCMSError) -> JSONResponse:
    extra: Dict[str, Any] = {}
    if isinstance(exc.details, list):
        extra["errors"] = exc.details
    elif isinstance(exc.details, dict) and exc.kind is not ErrorKind.UPSTREAM:
        extra.update(exc.details)
    problem = build_problem(exc.kind, exc.message, **extra)
    if exc.kind is ErrorKind.UPSTREAM:
        logger.error("upstream_error path=%s detail=%s", request.url.path, exc.message, exc_info=exc)
    headers = None
    if exc.kind in _BEARER_KINDS and request.url.path.startswith("/api/management"):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(problem, status_code=int(problem["status"]), media_type=PROBLEM_MEDIA_TYPE, headers=headers)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(getattr(exc, "detail", None), dict):
        detail = dict(exc.detail)
    else:
        detail = {"title": "Error", "status": status_code, "detail": str(getattr(exc, "detail", ""))}
    headers = getattr(exc, "headers", None)
    return JSONResponse(detail, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({"field": ".".join(loc), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))})
    return out


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = build_problem(ErrorKind.VALIDATION, "Validation failed", errors=_validation_errors(exc))
    logger.info("validation_failed path=%s fields=%s", request.url.path, [e["field"] for e in problem["errors"]])
    return JSONResponse(problem, status_code=400, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    problem: Dict[str, Any] = {
        "title": INTERNAL_ERROR["title"],
        "status": INTERNAL_ERROR["status"],
        "detail": "Internal Server Error",
        "code": INTERNAL_ERROR["code"],
    }
    if not _is_production(request):
        problem["detail"] = str(exc) or problem["detail"]
        problem["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    # Server errors are rendered outside the request-id middleware
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-Id": request_id} if request_id else None
    return JSONResponse(problem, status_code=500, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "build_problem",
    "handle_cms_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
