"""Tagged error types shared by the store, auth services and routes.

Callers branch on `exc.kind` rather than on message text. The HTTP mapping for
each kind lives in `response_cms/http/error_mapping.py`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional


class ErrorKind(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    INVALID_CREDENTIALS = "invalid_credentials"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


class ResponseCMSError(Exception):
    """Base error carrying an explicit `ErrorKind`."""

    def __init__(self, kind: ErrorKind, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class StoreError(ResponseCMSError):
    """Raised by the response store and its backends."""


class AuthError(ResponseCMSError):
    """Raised by the credential store, token service and auth guards."""


def not_found(key: str) -> StoreError:
    return StoreError(ErrorKind.NOT_FOUND, "Response not found", details={"key": key})


def conflict(key: str) -> StoreError:
    return StoreError(
        ErrorKind.CONFLICT,
        "Key already exists",
        details={"key": key, "reason": f'A response with key "{key}" already exists'},
    )


def upstream(message: str, *, cause: Optional[BaseException] = None) -> StoreError:
    details = {"cause": type(cause).__name__} if cause is not None else None
    return StoreError(ErrorKind.UPSTREAM, message, details=details)


__all__ = [
    "ErrorKind",
    "ResponseCMSError",
    "StoreError",
    "AuthError",
    "not_found",
    "conflict",
    "upstream",
]
