from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends

from navsite.core.config import Settings, get_settings
from navsite.core.urls import is_link_url
from navsite.schemas.links import LinkRecord
from navsite.services.errors import InputValidationError, StoreError, StoreNotFoundError
from navsite.services.normalizer import canonical_link, to_store_fields
from navsite.services.stores import StoreGateway, get_store_gateway
from navsite.services.tables import TableLocator, get_table_locator

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class PendingPage:
    items: list[LinkRecord]
    has_more: bool
    page_token: str | None


@dataclass(slots=True)
class ApproveOutcome:
    staging_id: str
    published_id: str
    table_id: str
    cleanup_required: bool = False


class ReviewWorkflow:
    """Moves staged links into the published table, or discards them.

    Approve is create-then-delete. A failed create leaves staging untouched, so
    the call can be retried. A failed delete after a successful create leaves
    the link in both tables; the outcome is flagged for manual cleanup instead
    of failing the request. Two concurrent approves of one id can both publish.
    """

    def __init__(
        self,
        gateway: StoreGateway,
        locator: TableLocator,
        settings: Settings,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.gateway = gateway
        self.locator = locator
        self.settings = settings
        self._sleep = sleep

    async def list_pending(self, page_token: str | None, page_size: int) -> PendingPage:
        page = await self.gateway.staging().list(page_token=page_token, page_size=page_size)
        return PendingPage(
            items=self._canonical_items(page.items),
            has_more=page.has_more,
            page_token=page.page_token,
        )

    async def list_pending_public(self) -> list[LinkRecord]:
        page = await self.gateway.staging().list(page_size=self.settings.public_pending_limit)
        return self._canonical_items(page.items)[: self.settings.public_pending_limit]

    async def approve(self, staging_id: str) -> ApproveOutcome:
        staging = self.gateway.staging()
        record = await staging.get(staging_id)

        link = canonical_link(
            record,
            default_category=self.settings.uncategorized_label,
            default_sort=self.settings.submission_default_sort,
            staged=True,
        )
        if link is None or not link.url:
            raise InputValidationError("staged link has no url")
        if not is_link_url(link.url):
            raise InputValidationError("staged link url is not an http(s) address")

        coordinates = await self.locator.resolve(link.table_id)
        published_id = await self.gateway.published(coordinates).create(
            to_store_fields(
                name=link.name,
                url=link.url,
                category=link.category,
                sort=link.sort,
                icon=link.icon or None,
            )
        )
        logger.info(
            "approved staged link staging_id=%s published_id=%s table=%s",
            staging_id,
            published_id,
            coordinates.table_id,
        )

        outcome = ApproveOutcome(
            staging_id=staging_id,
            published_id=published_id,
            table_id=coordinates.table_id,
        )
        outcome.cleanup_required = not await self._delete_staged_with_retry(staging_id)
        if outcome.cleanup_required:
            logger.error(
                "partial inconsistency: staging_id=%s stays staged after publishing published_id=%s table=%s; "
                "remove it manually",
                staging_id,
                published_id,
                coordinates.table_id,
            )
        return outcome

    async def reject(self, staging_id: str) -> None:
        await self.gateway.staging().delete(staging_id)
        logger.info("rejected staged link staging_id=%s", staging_id)

    async def _delete_staged_with_retry(self, staging_id: str) -> bool:
        staging = self.gateway.staging()
        attempts = max(1, self.settings.staging_delete_attempts)
        for attempt in range(1, attempts + 1):
            try:
                await staging.delete(staging_id)
                return True
            except StoreNotFoundError:
                # Already gone: a lost response from an earlier attempt, or a concurrent review.
                logger.warning("staging record already removed staging_id=%s attempt=%s", staging_id, attempt)
                return True
            except StoreError as exc:
                if attempt == attempts:
                    logger.warning("staging delete failed staging_id=%s attempt=%s: %s", staging_id, attempt, exc)
                    break
                delay = self._compute_retry_delay_seconds(attempt=attempt)
                logger.warning(
                    "staging delete failed staging_id=%s attempt=%s; retry in %.2fs: %s",
                    staging_id,
                    attempt,
                    delay,
                    exc,
                )
                await self._sleep(delay)
        return False

    def _compute_retry_delay_seconds(self, *, attempt: int) -> float:
        return max(0.0, self.settings.staging_delete_backoff_seconds) * (2 ** (attempt - 1))

    def _canonical_items(self, records) -> list[LinkRecord]:
        items: list[LinkRecord] = []
        for record in records:
            link = canonical_link(
                record,
                default_category=self.settings.uncategorized_label,
                staged=True,
            )
            if link is not None:
                items.append(link)
        return items


def get_review_workflow(
    gateway: StoreGateway = Depends(get_store_gateway),
    locator: TableLocator = Depends(get_table_locator),
    settings: Settings = Depends(get_settings),
) -> ReviewWorkflow:
    return ReviewWorkflow(gateway, locator, settings)
