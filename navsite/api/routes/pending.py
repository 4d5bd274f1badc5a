from fastapi import APIRouter, Depends, Query

from navsite.api.errors import store_http_exception, validation_http_exception
from navsite.core.security import require_admin
from navsite.schemas.links import Pagination, PendingLinkListOut, PendingLinkPageOut, ReviewActionOut
from navsite.services.errors import InputValidationError, StoreError
from navsite.services.review import ReviewWorkflow, get_review_workflow

router = APIRouter()


@router.get("/pending-links-public", response_model=PendingLinkListOut)
async def list_pending_links_public(
    workflow: ReviewWorkflow = Depends(get_review_workflow),
) -> PendingLinkListOut:
    try:
        items = await workflow.list_pending_public()
    except StoreError as exc:
        raise store_http_exception(exc, action="loading pending links") from exc
    return PendingLinkListOut(data=items)


@router.get("/pending-links", response_model=PendingLinkPageOut)
async def list_pending_links(
    _admin=Depends(require_admin),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
    page_token: str | None = Query(default=None),
    page_size: int = Query(default=20, ge=1, le=500),
) -> PendingLinkPageOut:
    try:
        page = await workflow.list_pending(page_token=page_token or None, page_size=page_size)
    except StoreError as exc:
        raise store_http_exception(exc, action="loading pending links") from exc
    return PendingLinkPageOut(
        data=page.items,
        pagination=Pagination(has_more=page.has_more, page_token=page.page_token),
    )


@router.post("/pending-links/{link_id}/approve", response_model=ReviewActionOut)
async def approve_pending_link(
    link_id: str,
    _admin=Depends(require_admin),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
) -> ReviewActionOut:
    try:
        outcome = await workflow.approve(link_id)
    except InputValidationError as exc:
        raise validation_http_exception(exc) from exc
    except StoreError as exc:
        raise store_http_exception(exc, action="approving pending link") from exc

    if outcome.cleanup_required:
        message = "link published, but the pending entry could not be removed; remove it manually"
    else:
        message = "link approved and published"
    return ReviewActionOut(
        message=message,
        published_id=outcome.published_id,
        cleanup_required=outcome.cleanup_required,
    )


@router.post("/pending-links/{link_id}/reject", response_model=ReviewActionOut)
async def reject_pending_link(
    link_id: str,
    _admin=Depends(require_admin),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
) -> ReviewActionOut:
    try:
        await workflow.reject(link_id)
    except StoreError as exc:
        raise store_http_exception(exc, action="rejecting pending link") from exc
    return ReviewActionOut(message="link rejected")
