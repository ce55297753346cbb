"""Shared fakes and helpers for pipeline and API tests."""

from __future__ import annotations

import base64
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from picker_gallery.ingestion.base import (
    BaseContentStore,
    BasePickerClient,
    MediaItemsPage,
    PickerSession,
    StoredAsset,
)
from picker_gallery.ingestion.exceptions import SessionExpired, UploadFailure
from picker_gallery.ingestion.http import DownloadedAsset

ADMIN_USERNAME = "operator"
ADMIN_PASSWORD = "correct-horse"


def basic_auth_header(username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


def picker_media_item(item_id: str, *, base_url: str | None = None, filename: str | None = None) -> dict[str, Any]:
    """Build a media item in the current Picker API shape."""
    media_file: dict[str, Any] = {
        "mimeType": "image/jpeg",
        "filename": filename or f"{item_id}.jpg",
        "mediaFileMetadata": {"width": "1024", "height": "768"},
    }
    if base_url is not None:
        media_file["baseUrl"] = base_url
    return {"id": item_id, "type": "PHOTO", "mediaFile": media_file}


def picker_items(*item_ids: str) -> list[dict[str, Any]]:
    return [
        picker_media_item(item_id, base_url=f"https://lh3.googleusercontent.com/pp/{item_id}")
        for item_id in item_ids
    ]


@dataclass
class FakePickerClient(BasePickerClient):
    """In-memory picker provider with scripted status and paginated items."""

    pages: list[list[dict[str, Any]]] = field(default_factory=list)
    statuses: deque[bool | str] = field(default_factory=deque)
    media_items_set: bool = True
    access_token: str = "picker-token"
    status_calls: int = 0
    list_calls: list[str | None] = field(default_factory=list)
    created: int = 0
    source_name: str = "fake_picker"

    async def create_session(self) -> PickerSession:
        self.created += 1
        session_id = f"session-{self.created}"
        return PickerSession(
            session_id=session_id,
            picker_uri=f"https://photos.google.com/picker/{session_id}",
            raw={"id": session_id, "pickerUri": f"https://photos.google.com/picker/{session_id}"},
        )

    async def get_session(self, session_id: str) -> PickerSession:
        self.status_calls += 1
        state: bool | str = self.statuses.popleft() if self.statuses else self.media_items_set
        if state == "expired":
            raise SessionExpired(session_id, status_code=404, body={"error": {"status": "NOT_FOUND"}})
        return PickerSession(
            session_id=session_id,
            picker_uri=f"https://photos.google.com/picker/{session_id}",
            media_items_set=bool(state),
            raw={"id": session_id, "mediaItemsSet": bool(state)},
        )

    async def list_media_items(self, session_id: str, page_token: str | None = None) -> MediaItemsPage:
        self.list_calls.append(page_token)
        index = int(page_token) if page_token else 0
        items = self.pages[index] if index < len(self.pages) else []
        next_token = str(index + 1) if index + 1 < len(self.pages) else None
        return MediaItemsPage(items=items, next_page_token=next_token)

    async def get_access_token(self) -> str:
        return self.access_token


@dataclass
class FakeContentStore(BaseContentStore):
    """Content store that records uploads and can fail chosen public ids."""

    uploads: list[dict[str, Any]] = field(default_factory=list)
    fail_public_ids: set[str] = field(default_factory=set)
    source_name: str = "fake_cdn"

    async def upload(
        self,
        content: bytes,
        *,
        public_id: str,
        filename: str | None = None,
        mime_type: str | None = None,
    ) -> StoredAsset:
        if public_id in self.fail_public_ids:
            raise UploadFailure(None, "HTTP error: 500 Internal Server Error")
        self.uploads.append({"public_id": public_id, "size": len(content), "filename": filename})
        return StoredAsset(
            public_id=f"gallery/google-photos/{public_id}",
            content_url=f"https://res.cloudinary.com/demo/image/upload/v1/gallery/google-photos/{public_id}.jpg",
            thumbnail_url=f"https://res.cloudinary.com/demo/image/upload/c_thumb,h_300,w_300/{public_id}",
            resource_type="image",
            format="jpg",
            width=800,
            height=600,
            original_filename=filename.rsplit(".", 1)[0] if filename else None,
        )


class FakeDownloader:
    """Stand-in for ``download_asset`` that records every requested URL."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, url: str, **kwargs: Any) -> DownloadedAsset:
        self.calls.append({"url": url, **kwargs})
        return DownloadedAsset(url=url, content=b"\xff\xd8\xff-jpeg-bytes", content_type="image/jpeg")
