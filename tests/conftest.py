from __future__ import annotations

import os

os.environ.setdefault("NAV_OTEL_ENABLED", "false")

from typing import Any

import pytest
from fastapi.testclient import TestClient

from navsite.core.config import Settings, get_settings
from navsite.main import app
from navsite.services.bitable import RecordPage, StoreRecord
from navsite.services.errors import StoreNotConfiguredError, StoreNotFoundError
from navsite.services.stores import TableCoordinates, get_store_gateway

ADMIN_PASSWORD = "test-password"


class FakeTable:
    """In-memory table with offset page tokens and scripted failures."""

    def __init__(self, coordinates: TableCoordinates) -> None:
        self.coordinates = coordinates
        self.records: dict[str, StoreRecord] = {}
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, list[Exception]] = {}
        self._next_id = 1

    def seed(self, record_id: str, fields: dict[str, Any], created_time: int | None = None) -> None:
        self.records[record_id] = StoreRecord(record_id=record_id, fields=fields, created_time=created_time)

    def fail(self, operation: str, *errors: Exception) -> None:
        self.failures.setdefault(operation, []).extend(errors)

    def _maybe_fail(self, operation: str) -> None:
        pending = self.failures.get(operation)
        if pending:
            raise pending.pop(0)

    async def list(self, page_token: str | None = None, page_size: int = 20) -> RecordPage:
        self.calls.append(("list", page_token))
        self._maybe_fail("list")
        offset = int(page_token or 0)
        records = list(self.records.values())
        window = records[offset : offset + page_size]
        has_more = offset + page_size < len(records)
        return RecordPage(items=window, has_more=has_more, page_token=str(offset + page_size) if has_more else None)

    async def list_all(self, page_size: int = 100) -> list[StoreRecord]:
        items: list[StoreRecord] = []
        page_token: str | None = None
        while True:
            page = await self.list(page_token=page_token, page_size=page_size)
            items.extend(page.items)
            if not page.has_more or not page.page_token:
                return items
            page_token = page.page_token

    async def get(self, record_id: str) -> StoreRecord:
        self.calls.append(("get", record_id))
        self._maybe_fail("get")
        record = self.records.get(record_id)
        if record is None:
            raise StoreNotFoundError(f"record {record_id} not found")
        return record

    async def create(self, fields: dict[str, Any]) -> str:
        self.calls.append(("create", fields))
        self._maybe_fail("create")
        record_id = f"rec{self._next_id:04d}"
        self._next_id += 1
        self.records[record_id] = StoreRecord(record_id=record_id, fields=dict(fields))
        return record_id

    async def update(self, record_id: str, fields: dict[str, Any]) -> None:
        self.calls.append(("update", record_id))
        self._maybe_fail("update")
        if record_id not in self.records:
            raise StoreNotFoundError(f"record {record_id} not found")
        self.records[record_id] = StoreRecord(record_id=record_id, fields=dict(fields))

    async def delete(self, record_id: str) -> None:
        self.calls.append(("delete", record_id))
        self._maybe_fail("delete")
        if self.records.pop(record_id, None) is None:
            raise StoreNotFoundError(f"record {record_id} not found")

    def mutations(self) -> list[tuple[str, Any]]:
        return [call for call in self.calls if call[0] in {"create", "update", "delete"}]


class FakeGateway:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.tables: dict[TableCoordinates, FakeTable] = {}
        self.created_tables: list[tuple[str, list[dict[str, Any]]]] = []

    def table(self, coordinates: TableCoordinates) -> FakeTable:
        if coordinates not in self.tables:
            self.tables[coordinates] = FakeTable(coordinates)
        return self.tables[coordinates]

    def default_coordinates(self) -> TableCoordinates:
        return TableCoordinates(app_token=self.settings.app_token or "", table_id=self.settings.table_id or "")

    def published(self, coordinates: TableCoordinates) -> FakeTable:
        return self.table(coordinates)

    def staging(self) -> FakeTable:
        if not self.settings.staging_table_id:
            raise StoreNotConfiguredError("staging table is not configured")
        return self.table(
            TableCoordinates(
                app_token=self.settings.resolved_staging_app_token or "",
                table_id=self.settings.staging_table_id,
            )
        )

    def metadata(self) -> FakeTable:
        if not self.settings.meta_table_id:
            raise StoreNotConfiguredError("metadata table is not configured")
        return self.table(
            TableCoordinates(
                app_token=self.settings.resolved_meta_app_token or "",
                table_id=self.settings.meta_table_id,
            )
        )

    @property
    def default_table(self) -> FakeTable:
        return self.table(self.default_coordinates())

    async def create_table(self, name: str, fields: list[dict[str, Any]]) -> TableCoordinates:
        self.created_tables.append((name, fields))
        coordinates = TableCoordinates(
            app_token=self.settings.resolved_dataset_app_token or "",
            table_id=f"tblNew{len(self.created_tables)}",
        )
        self.table(coordinates)
        return coordinates


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "app_id": "cli_test",
        "app_secret": "secret",
        "app_token": "appDefault",
        "table_id": "tblDefault",
        "staging_app_token": "appStaging",
        "staging_table_id": "tblStaging",
        "meta_table_id": "tblMeta",
        "admin_password": ADMIN_PASSWORD,
        "staging_delete_backoff_seconds": 0.0,
        "otel_enabled": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def gateway(settings: Settings) -> FakeGateway:
    return FakeGateway(settings)


@pytest.fixture
def client(gateway: FakeGateway, settings: Settings) -> TestClient:
    app.dependency_overrides[get_store_gateway] = lambda: gateway
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    response = client.post("/api/auth/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
