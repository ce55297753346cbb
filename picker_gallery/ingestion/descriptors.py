"""Normalization of picker media item payloads into descriptors.

The picker API has returned the download locator in several shapes across
versions. All shape probing lives here; the fallback order is:

1. ``mediaFile.baseUrl`` (current Picker API)
2. ``baseUrl`` (Library API style, top level)
3. ``base_url`` (snake_case payloads from older proxies)
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlparse

from picker_gallery.ingestion.base import MediaDescriptor
from picker_gallery.ingestion.exceptions import MalformedDescriptor

DOWNLOAD_URL_PATHS: tuple[tuple[str, ...], ...] = (
    ("mediaFile", "baseUrl"),
    ("baseUrl",),
    ("base_url",),
)
FILENAME_PATHS: tuple[tuple[str, ...], ...] = (("mediaFile", "filename"), ("filename",))
MIME_TYPE_PATHS: tuple[tuple[str, ...], ...] = (("mediaFile", "mimeType"), ("mimeType",))
WIDTH_PATHS: tuple[tuple[str, ...], ...] = (
    ("mediaFile", "mediaFileMetadata", "width"),
    ("mediaMetadata", "width"),
)
HEIGHT_PATHS: tuple[tuple[str, ...], ...] = (
    ("mediaFile", "mediaFileMetadata", "height"),
    ("mediaMetadata", "height"),
)


def _dig(payload: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = payload
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _first_string(payload: Mapping[str, Any], paths: tuple[tuple[str, ...], ...]) -> str | None:
    for path in paths:
        value = _dig(payload, path)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _first_int(payload: Mapping[str, Any], paths: tuple[tuple[str, ...], ...]) -> int | None:
    # int64 fields arrive as strings in the Picker API.
    for path in paths:
        value = _dig(payload, path)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


def normalize_media_item(payload: Mapping[str, Any]) -> MediaDescriptor:
    """Build a descriptor from any known picker media item shape."""
    item_id = payload.get("id")
    return MediaDescriptor(
        id=str(item_id) if item_id not in (None, "") else None,
        download_url=_first_string(payload, DOWNLOAD_URL_PATHS),
        filename=_first_string(payload, FILENAME_PATHS),
        mime_type=_first_string(payload, MIME_TYPE_PATHS),
        width=_first_int(payload, WIDTH_PATHS),
        height=_first_int(payload, HEIGHT_PATHS),
        raw=dict(payload),
    )


def resolve_download_url(descriptor: MediaDescriptor) -> str:
    """Return the descriptor's absolute http(s) URL or raise MalformedDescriptor."""
    url = descriptor.download_url
    if not url:
        raise MalformedDescriptor(descriptor.id, "Missing baseUrl in media item")
    try:
        parsed = urlparse(url)
        valid = parsed.scheme in {"http", "https"} and bool(parsed.hostname)
    except ValueError as exc:
        raise MalformedDescriptor(descriptor.id, f"Invalid URL: {url}") from exc
    if not valid:
        raise MalformedDescriptor(descriptor.id, f"Invalid URL: {url}")
    return url
