"""Functional tests for the management surface via FastAPI TestClient.

Exercises bearer-token enforcement (missing, malformed, expired), request
validation before the store, CRUD semantics, pagination/search envelopes and
problem+json error mapping.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from response_cms.http.problem import PROBLEM_MEDIA_TYPE
from response_cms.logic.repository_responses import ResponseStore
from response_cms.logic.tokens import TokenService
from response_cms.main import create_app

from conftest import TEST_JWT_SECRET

BASE = "/api/management/responses"


def _problem(resp, status: int, code: str) -> dict:
    assert resp.status_code == status, resp.text
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    body = resp.json()
    assert body["code"] == code
    assert body["status"] == status
    return body


@pytest.fixture
def seeded_client(config, seeded_backend, clock, credentials, tokens):
    store = ResponseStore(seeded_backend, clock=clock)
    return TestClient(create_app(config, store=store, credentials=credentials, tokens=tokens))


# -- authentication ----------------------------------------------------------


def test_missing_token_is_unauthenticated(client, backend):
    resp = client.get(BASE)

    _problem(resp, 401, "AUTH_CREDENTIAL_MISSING")
    assert resp.headers["www-authenticate"] == "Bearer"
    assert backend.calls == []


def test_non_bearer_scheme_is_unauthenticated(client):
    resp = client.get(BASE, headers={"Authorization": "Basic YWRtaW46YWRtaW4="})

    _problem(resp, 401, "AUTH_CREDENTIAL_MISSING")


def test_malformed_token_is_rejected_as_invalid(client, backend):
    resp = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})

    body = _problem(resp, 403, "AUTH_TOKEN_INVALID")
    assert body["detail"] == "Invalid token"
    assert backend.calls == []


def test_token_signed_with_other_secret_is_invalid(client, operator):
    forged = TokenService("some-other-secret").issue(operator)

    resp = client.get(BASE, headers={"Authorization": f"Bearer {forged}"})

    _problem(resp, 403, "AUTH_TOKEN_INVALID")


def test_expired_token_is_rejected_distinctly(client, operator, backend):
    issued_long_ago = TokenService(
        TEST_JWT_SECRET,
        expires_in=60,
        clock=lambda: datetime.now(timezone.utc) - timedelta(days=2),
    ).issue(operator)

    resp = client.get(BASE, headers={"Authorization": f"Bearer {issued_long_ago}"})

    body = _problem(resp, 401, "AUTH_TOKEN_EXPIRED")
    assert body["detail"] == "Token expired"
    assert backend.calls == []


# -- create / get ------------------------------------------------------------


def test_create_then_get_round_trip(client, auth_headers):
    created = client.post(
        BASE,
        json={"key": "greeting_welcome", "response_text": "Hi!", "notes": "first contact"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert created.json()["message"] == "Response created successfully"

    fetched = client.get(f"{BASE}/greeting_welcome", headers=auth_headers)

    assert fetched.status_code == 200
    record = fetched.json()["response"]
    assert record["response_text"] == "Hi!"
    assert record["notes"] == "first contact"
    assert record["last_updated"]


def test_create_ignores_client_supplied_last_updated(client, auth_headers):
    resp = client.post(
        BASE,
        json={"key": "k1", "response_text": "v1", "last_updated": "1999-01-01 00:00:00"},
        headers=auth_headers,
    )

    assert resp.status_code == 201
    assert resp.json()["response"]["last_updated"] == "2024-05-01 09:30:00"


def test_create_duplicate_key_conflicts(client, auth_headers, backend):
    client.post(BASE, json={"key": "dup", "response_text": "one"}, headers=auth_headers)
    before = backend.snapshot()

    resp = client.post(BASE, json={"key": "dup", "response_text": "two"}, headers=auth_headers)

    body = _problem(resp, 409, "RESPONSE_KEY_CONFLICT")
    assert body["key"] == "dup"
    assert backend.snapshot() == before


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"response_text": "no key"}, "key"),
        ({"key": "no_text"}, "response_text"),
        ({"key": "blank_text", "response_text": "   "}, "response_text"),
        ({"key": "bad key!", "response_text": "x"}, "key"),
    ],
)
def test_create_validation_failures_never_reach_store(client, auth_headers, backend, payload, field):
    resp = client.post(BASE, json=payload, headers=auth_headers)

    body = _problem(resp, 400, "VALIDATION_FAILED")
    assert field in [e["field"] for e in body["errors"]]
    assert backend.calls == []


def test_get_unknown_key_is_not_found(client, auth_headers):
    resp = client.get(f"{BASE}/missing_key", headers=auth_headers)

    body = _problem(resp, 404, "RESPONSE_NOT_FOUND")
    assert body["key"] == "missing_key"


# -- update / delete ---------------------------------------------------------


def test_update_replaces_text_and_notes(seeded_client, auth_headers, clock):
    clock.advance(60)

    resp = seeded_client.put(
        f"{BASE}/pricing", json={"response_text": "Plans start at $12"}, headers=auth_headers
    )

    assert resp.status_code == 200
    record = resp.json()["response"]
    assert record == {
        "key": "pricing",
        "response_text": "Plans start at $12",
        "notes": "",
        "last_updated": "2024-05-01 09:31:00",
    }


def test_update_unknown_key_is_not_found(client, auth_headers, backend):
    before = backend.snapshot()

    resp = client.put(f"{BASE}/nope", json={"response_text": "x"}, headers=auth_headers)

    _problem(resp, 404, "RESPONSE_NOT_FOUND")
    assert backend.snapshot() == before


def test_update_requires_response_text(seeded_client, auth_headers):
    resp = seeded_client.put(f"{BASE}/pricing", json={"notes": "only notes"}, headers=auth_headers)

    _problem(resp, 400, "VALIDATION_FAILED")


def test_delete_then_get_and_delete_again(seeded_client, auth_headers):
    first = seeded_client.delete(f"{BASE}/farewell", headers=auth_headers)
    assert first.status_code == 200
    assert first.json() == {"message": "Response deleted successfully"}

    _problem(seeded_client.get(f"{BASE}/farewell", headers=auth_headers), 404, "RESPONSE_NOT_FOUND")
    _problem(seeded_client.delete(f"{BASE}/farewell", headers=auth_headers), 404, "RESPONSE_NOT_FOUND")


# -- listing -----------------------------------------------------------------


def test_list_paginates_without_search(seeded_client, auth_headers):
    resp = seeded_client.get(BASE, params={"limit": 2, "offset": 2}, headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert [r["key"] for r in body["responses"]] == ["pricing", "opening_hours"]
    assert body["total"] == 2
    assert body["limit"] == 2
    assert body["offset"] == 2


def test_list_defaults_return_all_with_notes(seeded_client, auth_headers):
    body = seeded_client.get(BASE, headers=auth_headers).json()

    assert body["limit"] == 50
    assert body["offset"] == 0
    assert len(body["responses"]) == 5
    assert body["responses"][0]["notes"] == "shown on first contact"


def test_list_with_search_is_limited_not_offset(seeded_client, auth_headers):
    resp = seeded_client.get(BASE, params={"search": "HI", "limit": 50, "offset": 3}, headers=auth_headers)

    body = resp.json()
    assert [r["key"] for r in body["responses"]] == ["farewell", "pricing"]
    assert body["offset"] == 3


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": "ten"}, {"offset": -1}, {"limit": 5000}])
def test_list_rejects_bad_paging_params(seeded_client, auth_headers, params):
    resp = seeded_client.get(BASE, params=params, headers=auth_headers)

    _problem(resp, 400, "VALIDATION_FAILED")


def test_backend_outage_maps_to_upstream(seeded_client, seeded_backend, auth_headers):
    seeded_backend.unavailable = True

    resp = seeded_client.get(BASE, headers=auth_headers)

    body = _problem(resp, 502, "UPSTREAM_UNAVAILABLE")
    assert "cause" not in body


def test_responses_carry_request_id(client, auth_headers):
    generated = client.get(BASE, headers=auth_headers)
    echoed = client.get(BASE, headers={**auth_headers, "X-Request-Id": "dash-123"})

    assert generated.headers["x-request-id"]
    assert echoed.headers["x-request-id"] == "dash-123"
