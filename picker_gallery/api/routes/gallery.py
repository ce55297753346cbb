"""Gallery listing endpoints for the public site and the admin dashboard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from picker_gallery.api.deps import get_db, require_admin
from picker_gallery.schema.gallery import GalleryItemRead, GalleryListResponse
from picker_gallery.services import gallery_service

public_router = APIRouter()
admin_router = APIRouter()


@public_router.get("", response_model=list[GalleryItemRead])
async def list_gallery(session: AsyncSession = Depends(get_db)) -> list[GalleryItemRead]:
    """List ingested gallery items, newest first."""
    items = await gallery_service.list_all(session)
    return [GalleryItemRead.model_validate(item) for item in items]


@admin_router.get("", response_model=GalleryListResponse)
async def list_gallery_admin(
    session: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> GalleryListResponse:
    items = await gallery_service.list_all(session)
    total = await gallery_service.count(session)
    return GalleryListResponse(total=total, items=[GalleryItemRead.model_validate(item) for item in items])


@admin_router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    response_model=None,
)
async def delete_gallery_item(
    item_id: int,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> None:
    """Remove one gallery item; the CDN asset is left in place."""
    if not await gallery_service.delete_item(session, item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gallery item not found")
