from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends

from navsite.core.config import Settings, get_settings
from navsite.core.urls import is_link_url
from navsite.schemas.links import LinkCreateRequest, LinkPatchRequest, LinkRecord, SubmissionTarget
from navsite.services.errors import InputValidationError, StoreNotFoundError
from navsite.services.normalizer import canonical_link, to_store_fields
from navsite.services.stores import StoreGateway, get_store_gateway
from navsite.services.tables import TableLocator, get_table_locator

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50


@dataclass(slots=True)
class LinkSubmission:
    name: str
    url: str
    category: str
    sort: int
    icon: str | None = None
    table_id: str | None = None


@dataclass(slots=True)
class SubmissionResult:
    record_id: str
    target: SubmissionTarget
    table_id: str | None


def validate_submission(payload: LinkCreateRequest, *, default_sort: int) -> LinkSubmission:
    name = (payload.name or "").strip()
    url = (payload.url or "").strip()
    category = (payload.category or "").strip()
    if not name:
        raise InputValidationError("name must not be empty")
    if not url:
        raise InputValidationError("url must not be empty")
    if not category:
        raise InputValidationError("category must not be empty")
    if not is_link_url(url):
        raise InputValidationError("url must be an absolute http:// or https:// address")
    if len(name) > NAME_MAX_LENGTH:
        raise InputValidationError(f"name must be at most {NAME_MAX_LENGTH} characters")
    icon = (payload.icon or "").strip() or None
    if icon and not is_link_url(icon):
        raise InputValidationError("icon must be an absolute http:// or https:// address")

    return LinkSubmission(
        name=name,
        url=url,
        category=category,
        sort=payload.sort if payload.sort is not None else default_sort,
        icon=icon,
        table_id=(payload.table_id or "").strip() or None,
    )


class LinkService:
    """Creates, edits and removes links; guests only ever reach the staging table."""

    def __init__(self, gateway: StoreGateway, locator: TableLocator, settings: Settings) -> None:
        self.gateway = gateway
        self.locator = locator
        self.settings = settings

    async def submit(self, submission: LinkSubmission, *, authorized: bool) -> SubmissionResult:
        if authorized:
            coordinates = await self.locator.resolve(submission.table_id)
            record_id = await self.gateway.published(coordinates).create(
                to_store_fields(
                    name=submission.name,
                    url=submission.url,
                    category=submission.category,
                    sort=submission.sort,
                    icon=submission.icon,
                )
            )
            logger.info("published link id=%s table=%s", record_id, coordinates.table_id)
            return SubmissionResult(record_id=record_id, target="published", table_id=coordinates.table_id)

        target_table_id = None if self.locator.is_default(submission.table_id) else submission.table_id
        record_id = await self.gateway.staging().create(
            to_store_fields(
                name=submission.name,
                url=submission.url,
                category=submission.category,
                sort=submission.sort,
                icon=submission.icon,
                target_table_id=target_table_id,
            )
        )
        logger.info("staged link id=%s target_table=%s", record_id, target_table_id or "default")
        return SubmissionResult(record_id=record_id, target="staging", table_id=target_table_id)

    async def update(self, record_id: str, patch: LinkPatchRequest, table_id: str | None) -> LinkRecord:
        coordinates = await self.locator.resolve(table_id)
        store = self.gateway.published(coordinates)
        current = canonical_link(
            await store.get(record_id),
            default_category=self.settings.uncategorized_label,
            table_id=coordinates.table_id,
        )
        if current is None:
            raise StoreNotFoundError(f"link {record_id} has no name or url")

        merged = validate_submission(
            LinkCreateRequest(
                name=patch.name if patch.name is not None else current.name,
                url=patch.url if patch.url is not None else current.url,
                category=patch.category if patch.category is not None else current.category,
                sort=patch.sort if patch.sort is not None else current.sort,
                icon=patch.icon if patch.icon is not None else current.icon,
            ),
            default_sort=current.sort,
        )
        await store.update(
            record_id,
            to_store_fields(
                name=merged.name,
                url=merged.url,
                category=merged.category,
                sort=merged.sort,
                icon=merged.icon,
            ),
        )
        return current.model_copy(
            update={
                "name": merged.name,
                "url": merged.url,
                "category": merged.category,
                "sort": merged.sort,
                "icon": merged.icon or "",
            }
        )

    async def delete(self, record_id: str, table_id: str | None) -> None:
        coordinates = await self.locator.resolve(table_id)
        await self.gateway.published(coordinates).delete(record_id)
        logger.info("deleted link id=%s table=%s", record_id, coordinates.table_id)


def get_link_service(
    gateway: StoreGateway = Depends(get_store_gateway),
    locator: TableLocator = Depends(get_table_locator),
    settings: Settings = Depends(get_settings),
) -> LinkService:
    return LinkService(gateway, locator, settings)
