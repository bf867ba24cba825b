"""HTTP client for a PostgREST-style remote table API"""

import json
import httpx
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from registration_admin.domain.exceptions import StoreError
from registration_admin.domain.models import Record
from registration_admin.config import settings


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _eq(value: Any) -> str:
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


class RestEntityStore:
    """Entity store backed by a remote row API; every request commits independently"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.rest_store_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.rest_store_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> List[Record]:
        """
        Send one request and return the rows it produced.

        Raises:
            StoreError: On timeout, network failure, HTTP errors, or a non-JSON response
        """
        content = json.dumps(body, default=_json_default) if body is not None else None
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.base_url}/{table}",
                    params=params,
                    content=content,
                    headers=self._headers(),
                )
                response.raise_for_status()
                if not response.content:
                    return []
                data = response.json()
                return data if isinstance(data, list) else [data]

            except httpx.TimeoutException as e:
                raise StoreError(f"Store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise StoreError(self._error_message(e.response)) from e
            except httpx.RequestError as e:
                raise StoreError(f"Store unreachable: {e}") from e
            except ValueError as e:
                raise StoreError(f"Invalid response from store: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return f"Store error: {response.status_code}"
        if isinstance(payload, dict) and payload.get("message"):
            return payload["message"]
        return f"Store error: {response.status_code}"

    async def insert(self, table: str, record: Dict[str, Any]) -> Record:
        rows = await self._request("POST", table, body=record)
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        return rows[0]

    async def update(self, table: str, record_id: Any, patch: Dict[str, Any]) -> Optional[Record]:
        rows = await self._request("PATCH", table, params={"id": _eq(record_id)}, body=patch)
        return rows[0] if rows else None

    async def delete(self, table: str, record_id: Any) -> None:
        await self._request("DELETE", table, params={"id": _eq(record_id)})

    async def get(
        self,
        table: str,
        record_id: Any,
        select: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        params = {"id": _eq(record_id), "select": ",".join(select) if select else "*"}
        rows = await self._request("GET", table, params=params)
        return rows[0] if rows else None

    async def find(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Record]:
        params = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = _eq(value)
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        return await self._request("GET", table, params=params)
