from __future__ import annotations

import logging

from fastapi import Depends

from navsite.core.config import Settings, get_settings
from navsite.schemas.bitables import TableDescriptor, TableDescriptorPage
from navsite.services.errors import InputValidationError, StoreError, StoreNotConfiguredError
from navsite.services.normalizer import descriptor_from_record, descriptor_to_store_fields
from navsite.services.stores import StoreGateway, TableCoordinates, get_store_gateway

logger = logging.getLogger(__name__)

TABLE_NAME_MAX_LENGTH = 100
TABLE_DESCRIPTION_MAX_LENGTH = 500

# Field types: 1 text, 2 number, 15 hyperlink.
LINK_TABLE_FIELD_TEMPLATE: list[dict[str, object]] = [
    {"field_name": "站点名称", "type": 1},
    {"field_name": "网址", "type": 15},
    {"field_name": "分类", "type": 1},
    {"field_name": "排序", "type": 2},
    {"field_name": "备用图标", "type": 15},
    {"field_name": "描述", "type": 1},
    {"field_name": "详细介绍", "type": 1},
]


class TableLocator:
    """Resolves which dataset a request targets through the metadata table."""

    def __init__(self, gateway: StoreGateway, settings: Settings) -> None:
        self.gateway = gateway
        self.settings = settings

    def is_default(self, table_id: str | None) -> bool:
        if not table_id:
            return True
        return table_id in {self.settings.default_table_sentinel, self.settings.table_id}

    async def resolve(self, requested_table_id: str | None) -> TableCoordinates:
        """Return coordinates for ``requested_table_id``; unknown ids map to the default table."""
        default = self.gateway.default_coordinates()
        if self.is_default(requested_table_id):
            return default

        try:
            records = await self.gateway.metadata().list_all()
        except StoreError as exc:
            logger.warning(
                "metadata lookup failed for table_id=%s; using default table: %s",
                requested_table_id,
                exc,
            )
            return default

        for record in records:
            descriptor = descriptor_from_record(record)
            if descriptor is not None and descriptor.table_id == requested_table_id:
                return TableCoordinates(app_token=descriptor.app_token, table_id=descriptor.table_id)

        logger.warning("table_id=%s has no descriptor; using default table", requested_table_id)
        return default

    def default_descriptor(self) -> TableDescriptor:
        coordinates = self.gateway.default_coordinates()
        return TableDescriptor(
            table_name=self.settings.default_table_name,
            table_id=coordinates.table_id,
            app_token=coordinates.app_token,
            sort=0,
            is_default=True,
        )

    async def list_available(self) -> list[TableDescriptor]:
        default = self.default_descriptor()
        try:
            records = await self.gateway.metadata().list_all()
        except StoreNotConfiguredError:
            return [default]

        descriptors = [
            descriptor
            for descriptor in (descriptor_from_record(record) for record in records)
            if descriptor is not None and descriptor.table_id != default.table_id
        ]
        descriptors.sort(key=lambda descriptor: descriptor.sort)
        return [default, *descriptors]

    async def list_page(self, page_token: str | None, page_size: int) -> TableDescriptorPage:
        page = await self.gateway.metadata().list(page_token=page_token, page_size=page_size)
        items = [
            descriptor
            for descriptor in (descriptor_from_record(record) for record in page.items)
            if descriptor is not None
        ]
        return TableDescriptorPage(items=items, page_token=page.page_token, has_more=page.has_more)

    async def create_dataset(self, table_name: str | None, description: str | None) -> TableDescriptor:
        name = (table_name or "").strip()
        summary = (description or "").strip()
        if not name:
            raise InputValidationError("table_name must not be empty")
        if len(name) > TABLE_NAME_MAX_LENGTH:
            raise InputValidationError(f"table_name must be at most {TABLE_NAME_MAX_LENGTH} characters")
        if len(summary) > TABLE_DESCRIPTION_MAX_LENGTH:
            raise InputValidationError(
                f"description must be at most {TABLE_DESCRIPTION_MAX_LENGTH} characters"
            )

        metadata = self.gateway.metadata()
        existing = [
            descriptor
            for descriptor in (descriptor_from_record(record) for record in await metadata.list_all())
            if descriptor is not None
        ]
        next_sort = max((descriptor.sort for descriptor in existing), default=0) + 1

        coordinates = await self.gateway.create_table(name, LINK_TABLE_FIELD_TEMPLATE)
        logger.info("created dataset table_id=%s name=%s", coordinates.table_id, name)
        try:
            record_id = await metadata.create(
                descriptor_to_store_fields(
                    table_name=name,
                    table_id=coordinates.table_id,
                    app_token=coordinates.app_token,
                    sort=next_sort,
                    description=summary,
                )
            )
        except StoreError:
            logger.error(
                "dataset table_id=%s was created but its descriptor could not be written; add it manually",
                coordinates.table_id,
            )
            raise

        return TableDescriptor(
            table_name=name,
            table_id=coordinates.table_id,
            app_token=coordinates.app_token,
            sort=next_sort,
            description=summary,
            record_id=record_id,
        )


def get_table_locator(
    gateway: StoreGateway = Depends(get_store_gateway),
    settings: Settings = Depends(get_settings),
) -> TableLocator:
    return TableLocator(gateway, settings)
