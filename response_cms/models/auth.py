"""Pydantic models for operator login and token claims."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class OperatorIdentity(BaseModel):
    id: int
    username: str
    role: str


class LoginResult(BaseModel):
    token: str
    user: OperatorIdentity


class VerifyResult(BaseModel):
    valid: bool
    user: OperatorIdentity


__all__ = ["LoginRequest", "OperatorIdentity", "LoginResult", "VerifyResult"]
