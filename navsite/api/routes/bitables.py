from fastapi import APIRouter, Depends, Query

from navsite.api.errors import store_http_exception, validation_http_exception
from navsite.core.security import require_admin
from navsite.schemas.bitables import (
    TableCreateOut,
    TableCreateRequest,
    TableDescriptorListOut,
    TableDescriptorPageOut,
)
from navsite.services.errors import InputValidationError, StoreError
from navsite.services.tables import TableLocator, get_table_locator

router = APIRouter()


@router.get("/available", response_model=TableDescriptorListOut)
async def list_available_bitables(
    locator: TableLocator = Depends(get_table_locator),
) -> TableDescriptorListOut:
    try:
        descriptors = await locator.list_available()
    except StoreError as exc:
        raise store_http_exception(exc, action="loading tables") from exc
    return TableDescriptorListOut(data=descriptors)


@router.get("", response_model=TableDescriptorPageOut)
async def list_bitables(
    _admin=Depends(require_admin),
    locator: TableLocator = Depends(get_table_locator),
    page_token: str | None = Query(default=None),
    page_size: int = Query(default=20, ge=1, le=500),
) -> TableDescriptorPageOut:
    try:
        page = await locator.list_page(page_token=page_token or None, page_size=page_size)
    except StoreError as exc:
        raise store_http_exception(exc, action="loading tables") from exc
    return TableDescriptorPageOut(data=page)


@router.post("", response_model=TableCreateOut)
async def create_bitable(
    payload: TableCreateRequest,
    _admin=Depends(require_admin),
    locator: TableLocator = Depends(get_table_locator),
) -> TableCreateOut:
    try:
        descriptor = await locator.create_dataset(payload.table_name, payload.description)
    except InputValidationError as exc:
        raise validation_http_exception(exc) from exc
    except StoreError as exc:
        raise store_http_exception(exc, action="creating table") from exc
    return TableCreateOut(message="table created", data=descriptor)
