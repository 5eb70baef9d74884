"""Pydantic models for Response records and their API payloads.

Declared apart from the route modules so the store, the routes and the tests
share one definition of the record shape.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

KEY_PATTERN = r"^[A-Za-z0-9_]+$"


class Response(BaseModel):
    """A stored key/response record as read from the backing sheet."""

    key: str
    response_text: str
    notes: str = ""
    last_updated: str = ""


class DeliveryResponse(BaseModel):
    """Bot-facing projection of a Response; operator notes are never included."""

    model_config = ConfigDict(extra="forbid")

    key: str
    response_text: str
    last_updated: str

    @classmethod
    def from_record(cls, record: Response) -> "DeliveryResponse":
        return cls(key=record.key, response_text=record.response_text, last_updated=record.last_updated)


def _text_required(v: str) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValueError("Response text is required")
    return v


class ResponseCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=200, pattern=KEY_PATTERN)
    response_text: str
    notes: Optional[str] = None

    @field_validator("response_text")
    @classmethod
    def response_text_required(cls, v: str) -> str:
        return _text_required(v)


class ResponseUpdate(BaseModel):
    response_text: str
    notes: Optional[str] = None

    @field_validator("response_text")
    @classmethod
    def response_text_required(cls, v: str) -> str:
        return _text_required(v)


class ResponseEnvelope(BaseModel):
    response: Response


class ResponseMutationEnvelope(BaseModel):
    message: str
    response: Response


class ResponseListEnvelope(BaseModel):
    responses: list[Response]
    total: int
    limit: int
    offset: int


class DeliveryListEnvelope(BaseModel):
    responses: list[DeliveryResponse]
    total: int


class MessageEnvelope(BaseModel):
    message: str


__all__ = [
    "KEY_PATTERN",
    "Response",
    "DeliveryResponse",
    "ResponseCreate",
    "ResponseUpdate",
    "ResponseEnvelope",
    "ResponseMutationEnvelope",
    "ResponseListEnvelope",
    "DeliveryListEnvelope",
    "MessageEnvelope",
]
