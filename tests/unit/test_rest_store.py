"""Unit tests for the remote table API client"""

import json
import httpx
import pytest
from datetime import date

from registration_admin.domain.exceptions import StoreError
from registration_admin.infrastructure.clients.rest_store import RestEntityStore


def _store(handler) -> RestEntityStore:
    return RestEntityStore(
        base_url="http://store.test/rest/v1/",
        api_key="secret",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


async def test_insert_posts_record_and_returns_row():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = json.loads(request.content)
        return httpx.Response(201, json=[{"id": 9, **body}])

    row = await _store(handler).insert("transactions", {"amount": 500, "transaction_date": date(2024, 1, 1)})

    assert row == {"id": 9, "amount": 500, "transaction_date": "2024-01-01"}
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/rest/v1/transactions"
    assert request.headers["Prefer"] == "return=representation"
    assert request.headers["apikey"] == "secret"
    assert request.headers["Authorization"] == "Bearer secret"


async def test_update_filters_by_id_and_returns_none_when_nothing_matched():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    assert await _store(handler).update("registration", 5, {"status": "registered"}) is None
    assert seen[0].method == "PATCH"
    assert seen[0].url.params["id"] == "eq.5"


async def test_get_passes_select_columns():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["select"] == "transaction_id,prospectus_id"
        return httpx.Response(200, json=[{"transaction_id": 9, "prospectus_id": 7}])

    row = await _store(handler).get("registration", 42, select=("transaction_id", "prospectus_id"))

    assert row == {"transaction_id": 9, "prospectus_id": 7}


async def test_delete_with_empty_response():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        return httpx.Response(204)

    assert await _store(handler).delete("transactions", 9) is None


async def test_find_builds_filters_and_order():
    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        assert params["assigned_to"] == "eq.3"
        assert params["admin_assigned"] == "eq.true"
        assert params["order"] == "created_at.desc"
        return httpx.Response(200, json=[{"id": 1}, {"id": 2}])

    rows = await _store(handler).find(
        "registration",
        filters={"assigned_to": 3, "admin_assigned": True},
        order_by="created_at",
        descending=True,
    )

    assert [row["id"] for row in rows] == [1, 2]


async def test_http_error_message_is_passed_through():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "duplicate key value violates unique constraint"})

    with pytest.raises(StoreError, match="duplicate key value"):
        await _store(handler).insert("registration", {"prospectus_id": 7})


async def test_timeout_becomes_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(StoreError, match="timeout"):
        await _store(handler).get("registration", 1)


async def test_connection_failure_becomes_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StoreError, match="unreachable"):
        await _store(handler).delete("registration", 1)
