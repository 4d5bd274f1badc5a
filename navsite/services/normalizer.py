"""Field normalization between the table store's raw shapes and canonical records.

The store returns field maps whose keys may be Chinese or English and whose
values may be plain scalars, arrays (multi-select, rich text segments) or
hyperlink objects (``{"link": ..., "text": ...}``). Nothing outside this module
should look at raw field values.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Union

from navsite.schemas.bitables import TableDescriptor
from navsite.schemas.links import LinkRecord
from navsite.services.bitable import StoreRecord

RawFieldValue = Union[str, int, float, bool, None, list[Any], dict[str, Any]]

LINK_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "站点名称", "网站名称", "名称"),
    "url": ("url", "网址", "链接", "link"),
    "category": ("category", "分类"),
    "sort": ("sort", "排序"),
    "icon": ("icon", "备用图标", "图标"),
    "description": ("description", "描述", "简介"),
    "full_description": ("fullDescription", "详细介绍", "详细描述"),
    "table_id": ("tableId", "目标表格"),
}

DESCRIPTOR_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "table_id": ("tableId", "表格ID", "table_id"),
    "app_token": ("token", "应用Token", "appToken", "app_token"),
    "table_name": ("name", "表格名称", "table_name", "tableName"),
    "sort": ("sort", "排序"),
    "description": ("description", "描述"),
}

# Keys written back to the store.
STORE_FIELD_NAME = "站点名称"
STORE_FIELD_URL = "网址"
STORE_FIELD_CATEGORY = "分类"
STORE_FIELD_SORT = "排序"
STORE_FIELD_ICON = "备用图标"
STORE_FIELD_TARGET_TABLE = "目标表格"

OBJECT_PROBE_KEYS = ("link", "text", "value")


def normalize_value(value: RawFieldValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        parts = [normalize_value(item) for item in value]
        return " ".join(part for part in parts if part)
    if isinstance(value, dict):
        for key in OBJECT_PROBE_KEYS:
            normalized = normalize_value(value.get(key))
            if normalized:
                return normalized
        return ""
    return ""


def resolve_field(fields: Mapping[str, Any], aliases: tuple[str, ...]) -> str:
    for alias in aliases:
        if alias not in fields:
            continue
        normalized = normalize_value(fields[alias])
        if normalized:
            return normalized
    return ""


def parse_sort(raw: str, default: int) -> int:
    if not raw:
        return default
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return default


def format_created_time(created_time: int | None) -> str | None:
    if created_time is None:
        return None
    try:
        return datetime.fromtimestamp(created_time / 1000, tz=timezone.utc).isoformat()
    except (ValueError, OverflowError, OSError):
        return None


def canonical_link(
    record: StoreRecord,
    *,
    default_category: str,
    default_sort: int = 0,
    table_id: str | None = None,
    staged: bool = False,
) -> LinkRecord | None:
    """Build a canonical record, or None when both name and url are empty."""
    fields = record.fields
    name = resolve_field(fields, LINK_FIELD_ALIASES["name"])
    url = resolve_field(fields, LINK_FIELD_ALIASES["url"])
    if not name and not url:
        return None

    link = LinkRecord(
        id=record.record_id,
        name=name,
        url=url,
        category=resolve_field(fields, LINK_FIELD_ALIASES["category"]) or default_category,
        sort=parse_sort(resolve_field(fields, LINK_FIELD_ALIASES["sort"]), default_sort),
        icon=resolve_field(fields, LINK_FIELD_ALIASES["icon"]),
    )
    if staged:
        link.table_id = resolve_field(fields, LINK_FIELD_ALIASES["table_id"]) or None
        link.created_at = format_created_time(record.created_time)
    else:
        link.table_id = table_id
        link.description = resolve_field(fields, LINK_FIELD_ALIASES["description"])
        link.full_description = resolve_field(fields, LINK_FIELD_ALIASES["full_description"])
    return link


def to_store_fields(
    *,
    name: str,
    url: str,
    category: str,
    sort: int,
    icon: str | None = None,
    target_table_id: str | None = None,
) -> dict[str, Any]:
    fields: dict[str, Any] = {
        STORE_FIELD_CATEGORY: category,
        STORE_FIELD_SORT: sort,
        STORE_FIELD_NAME: name,
        STORE_FIELD_URL: {"link": url, "text": name},
    }
    if icon:
        fields[STORE_FIELD_ICON] = {"link": icon, "text": name}
    if target_table_id:
        fields[STORE_FIELD_TARGET_TABLE] = target_table_id
    return fields


def descriptor_from_record(record: StoreRecord) -> TableDescriptor | None:
    fields = record.fields
    table_id = resolve_field(fields, DESCRIPTOR_FIELD_ALIASES["table_id"])
    app_token = resolve_field(fields, DESCRIPTOR_FIELD_ALIASES["app_token"])
    if not table_id or not app_token:
        return None
    return TableDescriptor(
        table_name=resolve_field(fields, DESCRIPTOR_FIELD_ALIASES["table_name"]) or table_id,
        table_id=table_id,
        app_token=app_token,
        sort=parse_sort(resolve_field(fields, DESCRIPTOR_FIELD_ALIASES["sort"]), 0),
        description=resolve_field(fields, DESCRIPTOR_FIELD_ALIASES["description"]),
        record_id=record.record_id or None,
    )


def descriptor_to_store_fields(
    *,
    table_name: str,
    table_id: str,
    app_token: str,
    sort: int,
    description: str = "",
) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "表格名称": table_name,
        "表格ID": table_id,
        "应用Token": app_token,
        "排序": sort,
    }
    if description:
        fields["描述"] = description
    return fields
