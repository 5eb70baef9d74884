"""Liveness endpoint; does not touch the backend."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Liveness check", include_in_schema=False)
def health(request: Request) -> dict:
    return {"status": "ok", "backend": request.app.state.backend_kind}


__all__ = ["router"]
