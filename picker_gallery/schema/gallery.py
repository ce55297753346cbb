"""Gallery item schemas for persistence and listings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from picker_gallery.schema.base import ORMModel


class GalleryItemCreate(BaseModel):
    """Fields recorded for a freshly ingested asset."""
    source_media_item_id: str
    content_url: str
    thumbnail_url: str | None = None
    filename: str | None = None
    width: int | None = None
    height: int | None = None
    mime_type: str | None = None


class GalleryItemRead(ORMModel):
    id: int
    source_media_item_id: str
    content_url: str
    thumbnail_url: str | None = None
    filename: str | None = None
    width: int | None = None
    height: int | None = None
    mime_type: str | None = None
    uploaded_at: datetime


class GalleryListResponse(BaseModel):
    """Admin listing with the total row count."""
    total: int
    items: list[GalleryItemRead]
