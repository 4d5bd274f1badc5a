from fastapi import APIRouter, Depends, Query

from navsite.api.errors import store_http_exception, validation_http_exception
from navsite.core.auth import Principal
from navsite.core.config import Settings, get_settings
from navsite.core.security import get_principal, require_admin
from navsite.schemas.links import LinkCreateData, LinkCreateOut, LinkCreateRequest, LinkMutationOut, LinkPatchRequest
from navsite.services.errors import InputValidationError, StoreError
from navsite.services.links import LinkService, get_link_service, validate_submission

router = APIRouter()


@router.post("", response_model=LinkCreateOut)
async def create_link(
    payload: LinkCreateRequest,
    principal: Principal = Depends(get_principal),
    service: LinkService = Depends(get_link_service),
    settings: Settings = Depends(get_settings),
) -> LinkCreateOut:
    try:
        submission = validate_submission(payload, default_sort=settings.submission_default_sort)
    except InputValidationError as exc:
        raise validation_http_exception(exc) from exc

    try:
        result = await service.submit(submission, authorized=principal.is_authorized)
    except StoreError as exc:
        raise store_http_exception(exc, action="adding link") from exc

    if result.target == "published":
        message = "link added"
    else:
        message = "submission received, waiting for review"
    return LinkCreateOut(
        message=message,
        data=LinkCreateData(id=result.record_id, target=result.target, table_id=result.table_id),
    )


@router.patch("/{link_id}", response_model=LinkMutationOut)
async def update_link(
    link_id: str,
    payload: LinkPatchRequest,
    _admin=Depends(require_admin),
    service: LinkService = Depends(get_link_service),
    table_id: str | None = Query(default=None),
) -> LinkMutationOut:
    try:
        link = await service.update(link_id, payload, table_id)
    except InputValidationError as exc:
        raise validation_http_exception(exc) from exc
    except StoreError as exc:
        raise store_http_exception(exc, action="updating link") from exc
    return LinkMutationOut(message="link updated", data=link)


@router.delete("/{link_id}", response_model=LinkMutationOut)
async def delete_link(
    link_id: str,
    _admin=Depends(require_admin),
    service: LinkService = Depends(get_link_service),
    table_id: str | None = Query(default=None),
) -> LinkMutationOut:
    try:
        await service.delete(link_id, table_id)
    except StoreError as exc:
        raise store_http_exception(exc, action="deleting link") from exc
    return LinkMutationOut(message="link deleted")
