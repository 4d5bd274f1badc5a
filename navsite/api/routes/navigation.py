from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from navsite.api.errors import store_http_exception
from navsite.schemas.links import NavigationOut
from navsite.services.errors import StoreError
from navsite.services.navigation import NavigationService, get_navigation_service

router = APIRouter()


@router.get("/navigation", response_model=NavigationOut)
async def get_navigation(
    service: NavigationService = Depends(get_navigation_service),
    table_id: str | None = Query(default=None),
) -> NavigationOut:
    try:
        navigation = await service.load(table_id or None)
    except StoreError as exc:
        raise store_http_exception(exc, action="loading navigation") from exc

    return NavigationOut(
        is_mock_data=navigation.is_mock_data,
        data=navigation.groups,
        categories=navigation.categories,
        table_id=navigation.table_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
