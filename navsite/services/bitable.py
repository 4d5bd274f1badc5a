from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from navsite.services.errors import (
    StoreAuthExpiredError,
    StoreNetworkError,
    StoreNotFoundError,
    StoreRejectedError,
)
from navsite.services.tenant_token import TenantTokenCache

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {1254040, 1254041, 1254043, 1254044}
AUTH_EXPIRED_CODES = {99991661, 99991663, 99991664, 99991668, 99991677}
MAX_PAGE_SIZE = 500


@dataclass(slots=True)
class StoreRecord:
    record_id: str
    fields: dict[str, Any] = field(default_factory=dict)
    created_time: int | None = None


@dataclass(slots=True)
class RecordPage:
    items: list[StoreRecord]
    has_more: bool
    page_token: str | None


class BitableClient:
    """Thin async client for the multi-dimensional table REST API.

    Every call is a single request: failures surface as ``StoreError``
    subclasses and are never retried here.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        base_url: str,
        token_cache: TenantTokenCache,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")
        self.token_cache = token_cache
        self._timeout_seconds = timeout_seconds

    async def list_records(
        self,
        app_token: str,
        table_id: str,
        *,
        page_token: str | None = None,
        page_size: int = 100,
        automatic_fields: bool = False,
    ) -> RecordPage:
        params: dict[str, Any] = {"page_size": max(1, min(MAX_PAGE_SIZE, page_size))}
        if page_token:
            params["page_token"] = page_token
        if automatic_fields:
            params["automatic_fields"] = "true"
        data = await self._request("GET", self._records_path(app_token, table_id), params=params)
        raw_items = data.get("items") or []
        return RecordPage(
            items=[_record_from_payload(item) for item in raw_items if isinstance(item, dict)],
            has_more=bool(data.get("has_more")),
            page_token=data.get("page_token") or None,
        )

    async def get_record(self, app_token: str, table_id: str, record_id: str) -> StoreRecord:
        data = await self._request("GET", f"{self._records_path(app_token, table_id)}/{record_id}")
        record = data.get("record")
        if not isinstance(record, dict):
            raise StoreNotFoundError(f"record {record_id} not found")
        return _record_from_payload(record)

    async def create_record(self, app_token: str, table_id: str, fields: dict[str, Any]) -> StoreRecord:
        data = await self._request("POST", self._records_path(app_token, table_id), json={"fields": fields})
        record = data.get("record")
        if not isinstance(record, dict) or not record.get("record_id"):
            raise StoreRejectedError("create record response carries no record id")
        return _record_from_payload(record)

    async def update_record(
        self,
        app_token: str,
        table_id: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> StoreRecord:
        data = await self._request(
            "PUT",
            f"{self._records_path(app_token, table_id)}/{record_id}",
            json={"fields": fields},
        )
        record = data.get("record")
        if not isinstance(record, dict):
            return StoreRecord(record_id=record_id, fields=fields)
        return _record_from_payload(record)

    async def delete_record(self, app_token: str, table_id: str, record_id: str) -> None:
        await self._request("DELETE", f"{self._records_path(app_token, table_id)}/{record_id}")

    async def create_table(self, app_token: str, name: str, fields: list[dict[str, Any]]) -> str:
        data = await self._request(
            "POST",
            f"/bitable/v1/apps/{app_token}/tables",
            json={"table": {"name": name, "fields": fields}},
        )
        table_id = data.get("table_id")
        if not isinstance(table_id, str) or not table_id:
            raise StoreRejectedError("create table response carries no table id")
        return table_id

    @staticmethod
    def _records_path(app_token: str, table_id: str) -> str:
        return f"/bitable/v1/apps/{app_token}/tables/{table_id}/records"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        token = await self.token_cache.get()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        try:
            response = await self._http.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise StoreNetworkError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise StoreNetworkError(f"{method} {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            if response.status_code == 404:
                raise StoreNotFoundError(f"{method} {path} not found")
            raise StoreRejectedError(f"{method} {path} returned status {response.status_code}")

        code = payload.get("code")
        message = payload.get("msg") or f"status {response.status_code}"
        if code in AUTH_EXPIRED_CODES or response.status_code == 401:
            self.token_cache.invalidate()
            raise StoreAuthExpiredError(f"tenant token rejected: {message}")
        if code in NOT_FOUND_CODES or response.status_code == 404:
            raise StoreNotFoundError(f"{method} {path} not found: {message}")
        if code != 0 or response.status_code >= 400:
            logger.warning("table store rejected %s %s code=%s msg=%s", method, path, code, message)
            raise StoreRejectedError(f"table store rejected request: {message}")

        data = payload.get("data")
        return data if isinstance(data, dict) else {}


def _record_from_payload(payload: dict[str, Any]) -> StoreRecord:
    raw_fields = payload.get("fields")
    created_time = payload.get("created_time")
    return StoreRecord(
        record_id=str(payload.get("record_id") or payload.get("id") or ""),
        fields=raw_fields if isinstance(raw_fields, dict) else {},
        created_time=created_time if isinstance(created_time, int) else None,
    )
