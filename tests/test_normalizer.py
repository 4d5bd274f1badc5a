import pytest

from navsite.services.bitable import StoreRecord
from navsite.services.normalizer import (
    canonical_link,
    descriptor_from_record,
    format_created_time,
    normalize_value,
    parse_sort,
    to_store_fields,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ""),
        ("  GitHub  ", "GitHub"),
        (3, "3"),
        (3.0, "3"),
        (2.5, "2.5"),
        (True, "true"),
        (["Code", "", "Tools"], "Code Tools"),
        ([{"text": "first"}, {"text": " second "}], "first second"),
        ({"link": "https://github.com", "text": "GitHub"}, "https://github.com"),
        ({"text": "GitHub"}, "GitHub"),
        ({"value": 7}, "7"),
        ({"other": "ignored"}, ""),
    ],
)
def test_normalize_value_shapes(raw, expected: str) -> None:
    assert normalize_value(raw) == expected


def test_hyperlink_object_and_plain_string_yield_same_url() -> None:
    as_object = StoreRecord(
        record_id="rec1",
        fields={"站点名称": "GitHub", "网址": {"link": "https://github.com", "text": "GitHub"}},
    )
    as_string = StoreRecord(record_id="rec2", fields={"name": "GitHub", "url": "https://github.com"})

    first = canonical_link(as_object, default_category="其它")
    second = canonical_link(as_string, default_category="其它")

    assert first is not None and second is not None
    assert first.url == second.url == "https://github.com"
    assert first.name == second.name == "GitHub"


def test_canonical_link_applies_defaults_and_aliases() -> None:
    record = StoreRecord(
        record_id="rec1",
        fields={"网站名称": ["Py", "Docs"], "链接": "https://docs.python.org", "排序": "12", "描述": "reference"},
    )
    link = canonical_link(record, default_category="其它", table_id="tblDefault")

    assert link is not None
    assert link.name == "Py Docs"
    assert link.category == "其它"
    assert link.sort == 12
    assert link.icon == ""
    assert link.description == "reference"
    assert link.table_id == "tblDefault"


def test_canonical_link_drops_record_without_name_and_url() -> None:
    record = StoreRecord(record_id="rec1", fields={"分类": "Code", "排序": 3})
    assert canonical_link(record, default_category="其它") is None


def test_canonical_link_keeps_record_with_only_a_name() -> None:
    record = StoreRecord(record_id="rec1", fields={"站点名称": "Draft"})
    link = canonical_link(record, default_category="其它")
    assert link is not None
    assert link.url == ""


def test_staged_link_carries_target_table_and_creation_time() -> None:
    record = StoreRecord(
        record_id="recStaged",
        fields={"站点名称": "Figma", "网址": "https://figma.com", "目标表格": "tblDesign"},
        created_time=1_700_000_000_000,
    )
    link = canonical_link(record, default_category="其它", default_sort=200, staged=True)

    assert link is not None
    assert link.sort == 200
    assert link.table_id == "tblDesign"
    assert link.created_at == "2023-11-14T22:13:20+00:00"
    assert "description" not in link.model_dump(by_alias=True)


@pytest.mark.parametrize(("raw", "expected"), [("", 5), ("abc", 5), ("7", 7), ("7.9", 7), ("-2", -2)])
def test_parse_sort_falls_back_to_default(raw: str, expected: int) -> None:
    assert parse_sort(raw, 5) == expected


def test_to_store_fields_writes_native_shape() -> None:
    fields = to_store_fields(
        name="GitHub",
        url="https://github.com",
        category="Code",
        sort=200,
        icon="https://github.com/favicon.ico",
        target_table_id="tblDesign",
    )
    assert fields == {
        "分类": "Code",
        "排序": 200,
        "站点名称": "GitHub",
        "网址": {"link": "https://github.com", "text": "GitHub"},
        "备用图标": {"link": "https://github.com/favicon.ico", "text": "GitHub"},
        "目标表格": "tblDesign",
    }


def test_to_store_fields_omits_empty_optionals() -> None:
    fields = to_store_fields(name="GitHub", url="https://github.com", category="Code", sort=1)
    assert "备用图标" not in fields
    assert "目标表格" not in fields


def test_descriptor_from_record_accepts_english_and_chinese_keys() -> None:
    english = descriptor_from_record(
        StoreRecord(record_id="m1", fields={"tableId": "tblA", "token": "appA", "name": "Tools", "sort": 2})
    )
    chinese = descriptor_from_record(
        StoreRecord(record_id="m2", fields={"表格ID": "tblB", "应用Token": "appB", "表格名称": "设计"})
    )

    assert english is not None and english.table_id == "tblA" and english.app_token == "appA"
    assert english.table_name == "Tools" and english.sort == 2
    assert chinese is not None and chinese.table_id == "tblB" and chinese.table_name == "设计"


def test_descriptor_without_app_token_is_skipped() -> None:
    assert descriptor_from_record(StoreRecord(record_id="m1", fields={"表格ID": "tblA"})) is None


def test_out_of_range_creation_time_is_left_unset() -> None:
    record = StoreRecord(
        record_id="s1",
        fields={"站点名称": "GitHub", "网址": "https://github.com"},
        created_time=10**18,
    )

    link = canonical_link(record, default_category="其它", staged=True)

    assert link is not None
    assert link.created_at is None
    assert format_created_time(-(10**18)) is None
