from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from fastapi import Depends

from navsite.core.config import Settings, get_settings
from navsite.schemas.links import LinkRecord
from navsite.services.errors import StoreError
from navsite.services.normalizer import canonical_link
from navsite.services.stores import StoreGateway, get_store_gateway
from navsite.services.tables import TableLocator, get_table_locator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NavigationData:
    groups: dict[str, list[LinkRecord]]
    table_id: str | None
    is_mock_data: bool = False
    categories: list[str] = field(default_factory=list)


def group_by_category(records: Iterable[LinkRecord]) -> dict[str, list[LinkRecord]]:
    """Group by category in first-seen order; each group is stably sorted by ``sort``."""
    groups: dict[str, list[LinkRecord]] = {}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    for category, items in groups.items():
        groups[category] = sorted(items, key=lambda item: item.sort)
    return groups


def _mock_link(record_id: str, name: str, url: str, category: str, sort: int, icon: str) -> LinkRecord:
    return LinkRecord(id=record_id, name=name, url=url, category=category, sort=sort, icon=icon)


MOCK_LINKS: tuple[LinkRecord, ...] = (
    _mock_link("mock_001", "GitHub", "https://github.com", "Code", 1, "bi-github"),
    _mock_link("mock_002", "Stack Overflow", "https://stackoverflow.com", "Code", 2, "bi-stack-overflow"),
    _mock_link("mock_003", "VSCode", "https://code.visualstudio.com", "Code", 3, "bi-code-square"),
    _mock_link("mock_005", "Figma", "https://figma.com", "设计", 1, "bi-palette"),
    _mock_link("mock_006", "Dribbble", "https://dribbble.com", "设计", 2, "bi-dribbble"),
    _mock_link("mock_009", "ProductHunt", "https://producthunt.com", "产品", 1, "bi-graph-up"),
    _mock_link("mock_011", "Notion", "https://notion.so", "产品", 3, "bi-journal-text"),
    _mock_link("mock_013", "百度", "https://baidu.com", "其它", 1, "bi-search"),
    _mock_link("mock_015", "知乎", "https://zhihu.com", "其它", 3, "bi-question-circle"),
)


class NavigationService:
    def __init__(self, gateway: StoreGateway, locator: TableLocator, settings: Settings) -> None:
        self.gateway = gateway
        self.locator = locator
        self.settings = settings

    async def load(self, table_id: str | None) -> NavigationData:
        try:
            coordinates = await self.locator.resolve(table_id)
            records = await self.gateway.published(coordinates).list_all()
        except StoreError:
            if not self.settings.navigation_mock_fallback:
                raise
            logger.exception("navigation data unavailable; serving sample links")
            groups = group_by_category(link.model_copy() for link in MOCK_LINKS)
            return NavigationData(groups=groups, table_id=None, is_mock_data=True, categories=list(groups))

        links = []
        for record in records:
            link = canonical_link(
                record,
                default_category=self.settings.uncategorized_label,
                table_id=coordinates.table_id,
            )
            if link is not None:
                links.append(link)

        groups = group_by_category(links)
        return NavigationData(groups=groups, table_id=coordinates.table_id, categories=list(groups))


def get_navigation_service(
    gateway: StoreGateway = Depends(get_store_gateway),
    locator: TableLocator = Depends(get_table_locator),
    settings: Settings = Depends(get_settings),
) -> NavigationService:
    return NavigationService(gateway, locator, settings)
