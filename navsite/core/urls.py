from urllib.parse import urlencode, urlparse

ALLOWED_SCHEMES = {"http", "https"}


def parse_link_url(raw_url: str) -> str:
    """Return the stripped URL if it is absolute http(s), else raise ValueError."""
    candidate = raw_url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise ValueError("url must use http or https")
    if not parsed.netloc or not parsed.hostname:
        raise ValueError("url must be absolute")
    return candidate


def is_link_url(raw_url: str) -> bool:
    try:
        parse_link_url(raw_url)
    except ValueError:
        return False
    return True


def favicon_lookup_url(service_url: str, link_url: str, size: int = 32) -> str:
    hostname = urlparse(parse_link_url(link_url)).hostname or ""
    query = urlencode({"domain": hostname.lower(), "sz": size})
    return f"{service_url.rstrip('/')}?{query}"
