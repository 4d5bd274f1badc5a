import base64
import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from navsite.core.config import Settings, get_settings
from navsite.core.urls import favicon_lookup_url

router = APIRouter()
logger = logging.getLogger(__name__)

# 1x1 transparent PNG.
FALLBACK_ICON = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@router.get("/favicon")
async def get_favicon(
    url: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> Response:
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="url is required")
    try:
        lookup_url = favicon_lookup_url(settings.favicon_service_url, url)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"invalid url: {exc}") from exc

    try:
        async with httpx.AsyncClient(timeout=settings.favicon_timeout_seconds, follow_redirects=True) as client:
            upstream = await client.get(lookup_url)
            upstream.raise_for_status()
    except httpx.HTTPError:
        logger.exception("favicon lookup failed for url=%s", url)
        return Response(
            content=FALLBACK_ICON,
            media_type="image/png",
            headers={"Cache-Control": "public, max-age=300"},
        )

    return Response(
        content=upstream.content,
        media_type=upstream.headers.get("content-type", "image/png"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
