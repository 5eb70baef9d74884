"""Authentication guard dependencies.

`require_operator` enforces a bearer token on management routes and
`require_api_key` enforces the shared delivery key. Both raise tagged
`AuthError`s which the global handler maps to problem+json, so failures are
returned before any store access.
"""

from __future__ import annotations

import hmac
import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from response_cms.logic.errors import AuthError, ErrorKind
from response_cms.logic.repository_responses import ResponseStore
from response_cms.logic.tokens import TokenService
from response_cms.models.auth import OperatorIdentity

logger = logging.getLogger(__name__)


def get_store(request: Request) -> ResponseStore:
    return request.app.state.store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_operator(
    request: Request,
    tokens: Annotated[TokenService, Depends(get_token_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> OperatorIdentity:
    token = _bearer_token(authorization)
    if token is None:
        logger.info("auth_rejected path=%s reason=missing_token", request.url.path)
        raise AuthError(ErrorKind.UNAUTHENTICATED, "Access token required")
    try:
        user = tokens.verify(token)
    except AuthError as e:
        logger.info("auth_rejected path=%s reason=%s", request.url.path, e.kind.value)
        raise
    request.state.user = user
    return user


def require_api_key(
    request: Request,
    x_api_key: Annotated[Optional[str], Header()] = None,
) -> None:
    if not x_api_key:
        logger.info("api_key_rejected path=%s reason=missing", request.url.path)
        raise AuthError(ErrorKind.UNAUTHENTICATED, "API key required")
    expected = request.app.state.config.delivery.api_key
    if not hmac.compare_digest(x_api_key.encode("utf-8"), expected.encode("utf-8")):
        logger.info("api_key_rejected path=%s reason=mismatch", request.url.path)
        raise AuthError(ErrorKind.UNAUTHORIZED, "Invalid API key")


__all__ = ["get_store", "get_token_service", "require_operator", "require_api_key"]
