"""Error taxonomy for the picker ingestion pipeline.

Session-level errors abort a whole run before any item is touched. Item-level
errors are collected into the run result and never escape the per-item loop.
"""

from __future__ import annotations

from typing import Any


class PickerError(Exception):
    """Base class for failures talking to the photo picker provider."""


class ProviderError(PickerError):
    """The picker API answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None, body: Any = None) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message}: {status_code} - {body}"
        self.message = message
        super().__init__(message)


class PickerAuthError(ProviderError):
    """No usable OAuth credential is available for the picker API."""


class SessionExpired(ProviderError):
    """The picker session is unknown to the provider or no longer valid."""

    def __init__(self, session_id: str, *, status_code: int | None = None, body: Any = None) -> None:
        self.session_id = session_id
        super().__init__(f"Picker session {session_id} is expired or invalid", status_code=status_code, body=body)


class PollingTimeout(PickerError):
    """The user never finished selecting media within the polling budget."""

    def __init__(self, session_id: str, attempts: int) -> None:
        self.session_id = session_id
        self.attempts = attempts
        self.message = f"Picker session {session_id} not finalized after {attempts} attempts"
        super().__init__(self.message)


class ItemIngestionError(Exception):
    """Failure scoped to a single media item; recorded, never fatal."""

    def __init__(self, item_id: str | None, message: str) -> None:
        self.item_id = item_id
        self.message = message
        super().__init__(message)


class MalformedDescriptor(ItemIngestionError):
    """The media item has no usable download locator."""


class DownloadFailure(ItemIngestionError):
    """Fetching the source asset failed or timed out."""

    def __init__(self, item_id: str | None, message: str | None = None) -> None:
        super().__init__(item_id, f"Download failed: {message}" if message else "Download failed")


class UploadFailure(ItemIngestionError):
    """Re-hosting the asset in the content store failed."""

    def __init__(self, item_id: str | None, message: str | None = None) -> None:
        super().__init__(item_id, f"Upload failed: {message}" if message else "Upload failed")


class DuplicateGalleryItemError(Exception):
    """A gallery item already exists for the given source media item id."""

    def __init__(self, source_media_item_id: str) -> None:
        self.source_media_item_id = source_media_item_id
        super().__init__(f"Gallery item with source_media_item_id {source_media_item_id} already exists")
