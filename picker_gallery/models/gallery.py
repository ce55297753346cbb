"""Gallery records created by picker ingestion runs."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from picker_gallery.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GalleryItem(Base):
    """One re-hosted asset; at most one row per provider media item id."""
    __tablename__ = "gallery_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Unique at the store level so concurrent ingestion runs cannot double insert.
    source_media_item_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    content_url: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(Text)
    filename: Mapped[str | None] = mapped_column(String(512))
    width: Mapped[int | None] = mapped_column(Integer)
    height: Mapped[int | None] = mapped_column(Integer)
    mime_type: Mapped[str | None] = mapped_column(String(128))
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
