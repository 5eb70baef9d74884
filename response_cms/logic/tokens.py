"""Bearer token issuance and verification.

Tokens are HS256 JWTs carrying `id`, `username` and `role` claims plus `iat`
and `exp`. Verification distinguishes expired tokens from malformed or
tampered ones so clients can prompt for a fresh login.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from response_cms.logic.errors import AuthError, ErrorKind
from response_cms.models.auth import OperatorIdentity

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        expires_in: int = 24 * 3600,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._secret = secret
        self.expires_in = expires_in
        self.algorithm = algorithm
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_config(cls, auth_cfg) -> "TokenService":  # type: ignore[no-untyped-def]
        return cls(auth_cfg.jwt_secret, expires_in=auth_cfg.jwt_expires_in, algorithm=auth_cfg.jwt_algorithm)

    def issue(self, user: OperatorIdentity) -> str:
        now = self._clock()
        claims = {
            "id": user.id,
            "username": user.username,
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> OperatorIdentity:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthError(ErrorKind.TOKEN_EXPIRED, "Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("token_rejected reason=%s", type(e).__name__)
            raise AuthError(ErrorKind.TOKEN_INVALID, "Invalid token") from e
        try:
            return OperatorIdentity(id=claims["id"], username=claims["username"], role=claims["role"])
        except (KeyError, ValueError) as e:
            raise AuthError(ErrorKind.TOKEN_INVALID, "Invalid token") from e


__all__ = ["TokenService"]
