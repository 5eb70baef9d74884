"""Management routes: authenticated CRUD over the response store.

Every route depends on `require_operator`, so a missing, expired or invalid
token is rejected before the store is touched. Store `NOT_FOUND`/`CONFLICT`
errors propagate as tagged errors and are mapped by the global handler.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from response_cms.guards.auth import get_store, require_operator
from response_cms.logic.repository_responses import ResponseStore
from response_cms.models.auth import OperatorIdentity
from response_cms.models.response import (
    MessageEnvelope,
    ResponseCreate,
    ResponseEnvelope,
    ResponseListEnvelope,
    ResponseMutationEnvelope,
    ResponseUpdate,
)

router = APIRouter(prefix="/api/management", dependencies=[Depends(require_operator)])
logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 1000

Store = Annotated[ResponseStore, Depends(get_store)]
Operator = Annotated[OperatorIdentity, Depends(require_operator)]


@router.get(
    "/responses",
    summary="List responses, paginated, or search them",
    operation_id="listResponses",
    response_model=ResponseListEnvelope,
)
def list_responses(
    store: Store,
    search: Optional[str] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Return a page of responses, or up to `limit` search matches.

    Pagination applies only without a search query; with one, `offset` is
    echoed back but not applied.
    """
    if search and search.strip():
        responses = store.search(search, limit)
    else:
        responses = store.page(limit, offset)
    return {"responses": responses, "total": len(responses), "limit": limit, "offset": offset}


@router.get(
    "/responses/{key}",
    summary="Get a single response by key",
    operation_id="getResponse",
    response_model=ResponseEnvelope,
)
def get_response(key: str, store: Store):
    return {"response": store.get(key)}


@router.post(
    "/responses",
    status_code=201,
    summary="Create a new response",
    operation_id="createResponse",
    response_model=ResponseMutationEnvelope,
)
def create_response(payload: ResponseCreate, store: Store, user: Operator):
    created = store.create(payload.key, payload.response_text, payload.notes)
    logger.info("management_create key=%s by=%s", created.key, user.username)
    return {"message": "Response created successfully", "response": created}


@router.put(
    "/responses/{key}",
    summary="Replace the text and notes of an existing response",
    operation_id="updateResponse",
    response_model=ResponseMutationEnvelope,
)
def update_response(key: str, payload: ResponseUpdate, store: Store, user: Operator):
    updated = store.update(key, payload.response_text, payload.notes)
    logger.info("management_update key=%s by=%s", key, user.username)
    return {"message": "Response updated successfully", "response": updated}


@router.delete(
    "/responses/{key}",
    summary="Delete a response",
    operation_id="deleteResponse",
    response_model=MessageEnvelope,
)
def delete_response(key: str, store: Store, user: Operator):
    store.delete(key)
    logger.info("management_delete key=%s by=%s", key, user.username)
    return {"message": "Response deleted successfully"}


__all__ = ["router"]
