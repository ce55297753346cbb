"""Gallery persistence: the idempotency store for ingested picker media.

Invariants:
- At most one row per ``source_media_item_id``; the unique constraint makes a
  concurrent second insert fail atomically.
- Listings are newest first.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from picker_gallery.ingestion.exceptions import DuplicateGalleryItemError
from picker_gallery.models.gallery import GalleryItem
from picker_gallery.schema.gallery import GalleryItemCreate

logger = logging.getLogger("picker_gallery.services.gallery")


async def get_by_source_id(session: AsyncSession, source_media_item_id: str) -> GalleryItem | None:
    result = await session.execute(
        select(GalleryItem).where(GalleryItem.source_media_item_id == source_media_item_id)
    )
    return result.scalar_one_or_none()


async def exists(session: AsyncSession, source_media_item_id: str) -> bool:
    """Return True if the external asset was already ingested."""
    result = await session.execute(
        select(GalleryItem.id).where(GalleryItem.source_media_item_id == source_media_item_id).limit(1)
    )
    return result.first() is not None


async def insert(session: AsyncSession, payload: GalleryItemCreate) -> GalleryItem:
    """Insert a gallery item, raising DuplicateGalleryItemError on a repeated source id."""
    item = GalleryItem(**payload.model_dump())
    session.add(item)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateGalleryItemError(payload.source_media_item_id) from exc
    await session.refresh(item)
    return item


async def list_all(session: AsyncSession) -> list[GalleryItem]:
    result = await session.execute(
        select(GalleryItem).order_by(GalleryItem.uploaded_at.desc(), GalleryItem.id.desc())
    )
    return list(result.scalars().all())


async def count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(GalleryItem.id)))
    return int(result.scalar_one())


async def delete_item(session: AsyncSession, item_id: int) -> bool:
    """Delete one gallery item; return False when it does not exist."""
    result = await session.execute(delete(GalleryItem).where(GalleryItem.id == item_id))
    await session.commit()
    return (result.rowcount or 0) > 0


async def delete_all(session: AsyncSession) -> int:
    """Remove every gallery item and return how many were deleted."""
    result = await session.execute(delete(GalleryItem))
    await session.commit()
    deleted = result.rowcount or 0
    logger.info("Deleted %s gallery items", deleted)
    return deleted
