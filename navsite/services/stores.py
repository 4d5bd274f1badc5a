from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import httpx

from navsite.core.config import Settings, get_settings
from navsite.services.bitable import BitableClient, RecordPage, StoreRecord
from navsite.services.errors import StoreNotConfiguredError
from navsite.services.tenant_token import TenantTokenCache

logger = logging.getLogger(__name__)

FULL_LISTING_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class TableCoordinates:
    app_token: str
    table_id: str


class BitableTable:
    """One remote table addressed by its coordinates."""

    automatic_fields = False

    def __init__(self, client: BitableClient, coordinates: TableCoordinates) -> None:
        self.client = client
        self.coordinates = coordinates

    async def list(self, page_token: str | None = None, page_size: int = 20) -> RecordPage:
        return await self.client.list_records(
            self.coordinates.app_token,
            self.coordinates.table_id,
            page_token=page_token,
            page_size=page_size,
            automatic_fields=self.automatic_fields,
        )

    async def list_all(self, page_size: int = FULL_LISTING_PAGE_SIZE) -> list[StoreRecord]:
        items: list[StoreRecord] = []
        page_token: str | None = None
        while True:
            page = await self.list(page_token=page_token, page_size=page_size)
            items.extend(page.items)
            if not page.has_more or not page.page_token:
                break
            page_token = page.page_token
        logger.info(
            "listed %s records from table=%s",
            len(items),
            self.coordinates.table_id,
        )
        return items

    async def get(self, record_id: str) -> StoreRecord:
        return await self.client.get_record(self.coordinates.app_token, self.coordinates.table_id, record_id)

    async def create(self, fields: dict[str, Any]) -> str:
        record = await self.client.create_record(self.coordinates.app_token, self.coordinates.table_id, fields)
        return record.record_id

    async def delete(self, record_id: str) -> None:
        await self.client.delete_record(self.coordinates.app_token, self.coordinates.table_id, record_id)


class StagingStore(BitableTable):
    """Guest submissions waiting for review."""

    automatic_fields = True


class PublishedStore(BitableTable):
    """Live, user-facing link records."""

    async def update(self, record_id: str, fields: dict[str, Any]) -> None:
        await self.client.update_record(
            self.coordinates.app_token,
            self.coordinates.table_id,
            record_id,
            fields,
        )


class StoreGateway:
    """Owns the HTTP client and token caches, and hands out table adapters."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._http = http or httpx.AsyncClient()
        primary_tokens = TenantTokenCache(
            http=self._http,
            base_url=settings.store_base_url,
            app_id=settings.app_id,
            app_secret=settings.app_secret,
            refresh_margin_seconds=settings.token_refresh_margin_seconds,
            timeout_seconds=settings.store_auth_timeout_seconds,
        )
        self.primary_client = BitableClient(
            http=self._http,
            base_url=settings.store_base_url,
            token_cache=primary_tokens,
            timeout_seconds=settings.store_timeout_seconds,
        )
        if settings.staging_shares_credentials:
            self.staging_client = self.primary_client
        else:
            self.staging_client = BitableClient(
                http=self._http,
                base_url=settings.store_base_url,
                token_cache=TenantTokenCache(
                    http=self._http,
                    base_url=settings.store_base_url,
                    app_id=settings.resolved_staging_app_id,
                    app_secret=settings.resolved_staging_app_secret,
                    refresh_margin_seconds=settings.token_refresh_margin_seconds,
                    timeout_seconds=settings.store_auth_timeout_seconds,
                ),
                timeout_seconds=settings.store_timeout_seconds,
            )

    def default_coordinates(self) -> TableCoordinates:
        if not self.settings.app_token or not self.settings.table_id:
            raise StoreNotConfiguredError("default table is not configured")
        return TableCoordinates(app_token=self.settings.app_token, table_id=self.settings.table_id)

    def metadata_coordinates(self) -> TableCoordinates:
        app_token = self.settings.resolved_meta_app_token
        if not app_token or not self.settings.meta_table_id:
            raise StoreNotConfiguredError("metadata table is not configured")
        return TableCoordinates(app_token=app_token, table_id=self.settings.meta_table_id)

    def published(self, coordinates: TableCoordinates) -> PublishedStore:
        return PublishedStore(self.primary_client, coordinates)

    def staging(self) -> StagingStore:
        app_token = self.settings.resolved_staging_app_token
        if not app_token or not self.settings.staging_table_id:
            raise StoreNotConfiguredError("staging table is not configured")
        return StagingStore(
            self.staging_client,
            TableCoordinates(app_token=app_token, table_id=self.settings.staging_table_id),
        )

    def metadata(self) -> BitableTable:
        return BitableTable(self.primary_client, self.metadata_coordinates())

    async def create_table(self, name: str, fields: list[dict[str, Any]]) -> TableCoordinates:
        app_token = self.settings.resolved_dataset_app_token
        if not app_token:
            raise StoreNotConfiguredError("dataset application is not configured")
        table_id = await self.primary_client.create_table(app_token, name, fields)
        return TableCoordinates(app_token=app_token, table_id=table_id)

    async def close(self) -> None:
        await self._http.aclose()


@lru_cache
def get_store_gateway() -> StoreGateway:
    return StoreGateway(get_settings())
