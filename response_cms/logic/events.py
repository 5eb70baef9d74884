"""Domain event constants and publisher.

Defines event type constants and a simple publish() callable used by the
response store's create, update and delete flows.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

RESPONSE_CREATED = "response.created"
RESPONSE_UPDATED = "response.updated"
RESPONSE_DELETED = "response.deleted"

# Bounded so a long-running process does not accumulate audit entries
EVENT_BUFFER_LIMIT = 500


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a domain event.

    Events are logged as an audit trail of operator mutations.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})
    if len(EVENT_BUFFER) > EVENT_BUFFER_LIMIT:
        del EVENT_BUFFER[: len(EVENT_BUFFER) - EVENT_BUFFER_LIMIT]


# In-memory buffer of recent events (test observation)
EVENT_BUFFER: List[Dict[str, Any]] = []


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "RESPONSE_CREATED",
    "RESPONSE_UPDATED",
    "RESPONSE_DELETED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
