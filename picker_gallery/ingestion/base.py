"""Base primitives shared by the picker client and content stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class PickerSession:
    """Provider-issued window in which a person selects media."""
    session_id: str
    picker_uri: str | None = None
    media_items_set: bool = False
    expire_time: datetime | None = None
    polling_config: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class MediaDescriptor:
    """Reference to one selected asset that has not been ingested yet."""
    id: str | None
    download_url: str | None
    filename: str | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class MediaItemsPage:
    """One page of selected media items plus the continuation token."""
    items: list[dict[str, Any]]
    next_page_token: str | None = None


@dataclass(slots=True)
class StoredAsset:
    """Result of re-hosting an asset in the content store."""
    public_id: str
    content_url: str
    thumbnail_url: str | None = None
    resource_type: str | None = None
    format: str | None = None
    width: int | None = None
    height: int | None = None
    original_filename: str | None = None

    @property
    def mime_type(self) -> str | None:
        if not self.format:
            return None
        return f"{self.resource_type or 'image'}/{self.format}"


class BasePickerClient:
    """Interface for the photo picker provider."""
    source_name: str

    async def create_session(self) -> PickerSession:
        """Open a new picker session."""
        raise NotImplementedError

    async def get_session(self, session_id: str) -> PickerSession:
        """Read the current state of a picker session."""
        raise NotImplementedError

    async def list_media_items(self, session_id: str, page_token: str | None = None) -> MediaItemsPage:
        """Return one page of media items selected in a session."""
        raise NotImplementedError

    async def get_access_token(self) -> str:
        """Return the bearer token used for provider asset downloads."""
        raise NotImplementedError


class BaseContentStore:
    """Interface for the CDN that re-hosts ingested assets."""
    source_name: str

    async def upload(
        self,
        content: bytes,
        *,
        public_id: str,
        filename: str | None = None,
        mime_type: str | None = None,
    ) -> StoredAsset:
        """Upload raw bytes and return delivery URLs."""
        raise NotImplementedError
