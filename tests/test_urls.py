import pytest

from navsite.core.urls import favicon_lookup_url, is_link_url, parse_link_url


def test_parse_link_url_strips_and_accepts_http_and_https() -> None:
    assert parse_link_url("  https://Example.com/docs  ") == "https://Example.com/docs"
    assert parse_link_url("http://localhost:8080") == "http://localhost:8080"


@pytest.mark.parametrize(
    "raw_url",
    ["ftp://example.com", "javascript:alert(1)", "example.com", "https://", "//example.com/path"],
)
def test_parse_link_url_rejects_non_http_or_relative(raw_url: str) -> None:
    with pytest.raises(ValueError):
        parse_link_url(raw_url)
    assert is_link_url(raw_url) is False


def test_favicon_lookup_url_uses_lowercase_hostname() -> None:
    lookup = favicon_lookup_url("https://icons.example/s2/favicons/", "https://Docs.Python.org/3/")
    assert lookup == "https://icons.example/s2/favicons?domain=docs.python.org&sz=32"


def test_favicon_lookup_url_rejects_invalid_link() -> None:
    with pytest.raises(ValueError):
        favicon_lookup_url("https://icons.example/s2/favicons", "not a url")
