"""Operator login and token verification routes."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from response_cms.guards.auth import get_token_service, require_operator
from response_cms.logic.tokens import TokenService
from response_cms.models.auth import LoginRequest, LoginResult, OperatorIdentity, VerifyResult

router = APIRouter(prefix="/api/auth")
logger = logging.getLogger(__name__)


@router.post("/login", summary="Exchange operator credentials for a bearer token", response_model=LoginResult)
def login(
    payload: LoginRequest,
    request: Request,
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    user = request.app.state.credentials.authenticate(payload.username, payload.password)
    logger.info("login_succeeded user_id=%s", user.id)
    return {"token": tokens.issue(user), "user": user}


@router.get("/verify", summary="Check that a bearer token is still valid", response_model=VerifyResult)
def verify(user: Annotated[OperatorIdentity, Depends(require_operator)]):
    return {"valid": True, "user": user}


__all__ = ["router"]
