"""Central error mapping for the HTTP layer.

Single source of truth for mapping `ErrorKind` values to problem+json codes,
titles and HTTP statuses. Handlers and guards import from here instead of
hardcoding strings or numbers.
"""

from __future__ import annotations

from typing import Dict

from response_cms.logic.errors import ErrorKind

ERROR_MAP: Dict[ErrorKind, Dict[str, object]] = {
    ErrorKind.UNAUTHENTICATED: {"code": "AUTH_CREDENTIAL_MISSING", "status": 401, "title": "Unauthenticated"},
    ErrorKind.TOKEN_EXPIRED: {"code": "AUTH_TOKEN_EXPIRED", "status": 401, "title": "Token Expired"},
    ErrorKind.INVALID_CREDENTIALS: {"code": "AUTH_INVALID_CREDENTIALS", "status": 401, "title": "Invalid Credentials"},
    ErrorKind.TOKEN_INVALID: {"code": "AUTH_TOKEN_INVALID", "status": 403, "title": "Forbidden"},
    ErrorKind.UNAUTHORIZED: {"code": "AUTH_API_KEY_INVALID", "status": 403, "title": "Forbidden"},
    ErrorKind.VALIDATION: {"code": "VALIDATION_FAILED", "status": 400, "title": "Validation failed"},
    ErrorKind.CONFLICT: {"code": "RESPONSE_KEY_CONFLICT", "status": 409, "title": "Conflict"},
    ErrorKind.NOT_FOUND: {"code": "RESPONSE_NOT_FOUND", "status": 404, "title": "Not Found"},
    ErrorKind.UPSTREAM: {"code": "UPSTREAM_UNAVAILABLE", "status": 502, "title": "Bad Gateway"},
}

INTERNAL_ERROR = {"code": "INTERNAL_ERROR", "status": 500, "title": "Internal Server Error"}

__all__ = ["ERROR_MAP", "INTERNAL_ERROR"]
