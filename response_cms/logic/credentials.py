"""Operator credential lookup and password verification.

`CredentialStore` is the lookup interface call sites depend on; the in-memory
implementation is seeded from configuration at startup and can be swapped for
a persistent store without touching the auth routes.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import bcrypt

from response_cms.logic.errors import AuthError, ErrorKind
from response_cms.models.auth import OperatorIdentity

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


@dataclass(frozen=True)
class OperatorAccount:
    id: int
    username: str
    password_hash: bytes
    role: str = "admin"

    def identity(self) -> OperatorIdentity:
        return OperatorIdentity(id=self.id, username=self.username, role=self.role)


def hash_password(password: str, *, rounds: int = BCRYPT_ROUNDS) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))


class CredentialStore(abc.ABC):
    @abc.abstractmethod
    def find_by_username(self, username: str) -> Optional[OperatorAccount]:
        """Return the account for `username`, or None."""

    def authenticate(self, username: str, password: str) -> OperatorIdentity:
        """Verify a username/password pair; raise INVALID_CREDENTIALS on mismatch."""
        account = self.find_by_username(username)
        if account is None:
            logger.info("login_rejected reason=unknown_user")
            raise AuthError(ErrorKind.INVALID_CREDENTIALS, "Invalid credentials")
        try:
            ok = bcrypt.checkpw(password.encode("utf-8"), account.password_hash)
        except ValueError:
            logger.error("stored password hash is malformed for user id=%s", account.id)
            ok = False
        if not ok:
            logger.info("login_rejected reason=bad_password user_id=%s", account.id)
            raise AuthError(ErrorKind.INVALID_CREDENTIALS, "Invalid credentials")
        return account.identity()


class InMemoryCredentialStore(CredentialStore):
    def __init__(self, accounts: Iterable[OperatorAccount] = ()) -> None:
        self._by_username: Dict[str, OperatorAccount] = {}
        for account in accounts:
            self._by_username[account.username] = account

    @classmethod
    def seeded(cls, username: str, password: str, *, role: str = "admin") -> "InMemoryCredentialStore":
        """Build a store holding the single configured admin account."""
        return cls([OperatorAccount(id=1, username=username, password_hash=hash_password(password), role=role)])

    def find_by_username(self, username: str) -> Optional[OperatorAccount]:
        return self._by_username.get(username)


__all__ = [
    "OperatorAccount",
    "CredentialStore",
    "InMemoryCredentialStore",
    "hash_password",
]
