"""Delivery routes: API-key gated, read-only access for the bot.

Payloads are projected through `DeliveryResponse`, which has no `notes`
field, so operator annotations never leave the service on this surface.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from response_cms.guards.auth import get_store, require_api_key
from response_cms.logic.repository_responses import ResponseStore
from response_cms.models.response import DeliveryListEnvelope, DeliveryResponse

router = APIRouter(prefix="/api/delivery", dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)

Store = Annotated[ResponseStore, Depends(get_store)]


@router.get(
    "/responses/{key}",
    summary="Get the response text for a key",
    operation_id="deliverResponse",
    response_model=DeliveryResponse,
)
def deliver_response(key: str, store: Store):
    return DeliveryResponse.from_record(store.get(key))


@router.get(
    "/responses",
    summary="Get every response for bot caching",
    operation_id="deliverAllResponses",
    response_model=DeliveryListEnvelope,
)
def deliver_all_responses(store: Store):
    responses = [DeliveryResponse.from_record(r) for r in store.list()]
    return {"responses": responses, "total": len(responses)}


__all__ = ["router"]
