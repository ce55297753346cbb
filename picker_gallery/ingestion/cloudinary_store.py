"""Cloudinary content store built on the Cloudinary SDK."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any

import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError

from picker_gallery.core.config import settings
from picker_gallery.ingestion.base import BaseContentStore, StoredAsset
from picker_gallery.ingestion.exceptions import UploadFailure
from picker_gallery.ingestion.observability import PipelineMonitor, pipeline_monitor

logger = logging.getLogger("picker_gallery.ingestion.cloudinary")

DEFAULT_TRANSFORMATION = {"quality": "auto:good", "fetch_format": "auto"}
THUMBNAIL_TRANSFORMATION = {"crop": "thumb", "width": 300, "height": 300}


def _as_int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class CloudinaryContentStore(BaseContentStore):
    """Upload raw bytes to Cloudinary and build optimized delivery URLs.

    Credentials travel with every SDK call instead of through the SDK's global
    ``cloudinary.config()``, so each store instance is self-contained.
    """
    source_name = "cloudinary"

    def __init__(
        self,
        *,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        folder: str | None = None,
        timeout: float | None = None,
        monitor: PipelineMonitor | None = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder if folder is not None else settings.cloudinary_folder
        self.timeout = timeout if timeout is not None else settings.transfer_timeout_seconds
        self.monitor = monitor or pipeline_monitor

    @classmethod
    def from_settings(cls) -> CloudinaryContentStore:
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def sdk_config(self) -> dict[str, Any]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "secure": True,
        }

    def delivery_url(
        self,
        public_id: str,
        *,
        resource_type: str = "image",
        version: int | str | None = None,
        format: str | None = None,
        transformations: tuple[dict[str, Any], ...] = (),
    ) -> str:
        """Return an https URL with the default quality/format transformation first."""
        options: dict[str, Any] = {
            **self.sdk_config,
            "resource_type": resource_type,
            "transformation": [DEFAULT_TRANSFORMATION, *transformations],
        }
        if version:
            options["version"] = version
        if format:
            options["format"] = format
        url, _ = cloudinary.utils.cloudinary_url(public_id, **options)
        return url

    def _upload_sync(self, content: bytes, public_id: str, filename: str | None) -> dict[str, Any]:
        stream = io.BytesIO(content)
        stream.name = filename or public_id
        return cloudinary.uploader.upload(
            stream,
            folder=self.folder,
            public_id=public_id,
            resource_type="auto",
            timeout=self.timeout,
            **self.sdk_config,
        )

    async def upload(
        self,
        content: bytes,
        *,
        public_id: str,
        filename: str | None = None,
        mime_type: str | None = None,
    ) -> StoredAsset:
        if not self.configured:
            raise UploadFailure(None, "Cloudinary credentials are not configured")

        async def _call() -> dict[str, Any]:
            try:
                payload = await asyncio.wait_for(
                    asyncio.to_thread(self._upload_sync, content, public_id, filename), timeout=self.timeout
                )
            except asyncio.TimeoutError as exc:
                raise UploadFailure(None, "Request timeout") from exc
            except CloudinaryError as exc:
                raise UploadFailure(None, str(exc) or exc.__class__.__name__) from exc
            if not isinstance(payload, dict) or not payload.get("secure_url"):
                raise UploadFailure(None, "Cloudinary response missing secure_url")
            return payload

        payload = await self.monitor.track(self.source_name, "upload", _call, context={"public_id": public_id})
        stored_public_id = payload.get("public_id") or public_id
        resource_type = payload.get("resource_type") or "image"
        thumbnail_url = self.delivery_url(
            stored_public_id,
            resource_type=resource_type,
            version=payload.get("version"),
            format="jpg" if resource_type == "video" else None,
            transformations=(THUMBNAIL_TRANSFORMATION,),
        )
        logger.info("Uploaded %s to Cloudinary as %s", public_id, stored_public_id)
        return StoredAsset(
            public_id=stored_public_id,
            content_url=payload["secure_url"],
            thumbnail_url=thumbnail_url,
            resource_type=resource_type,
            format=payload.get("format"),
            width=_as_int(payload.get("width")),
            height=_as_int(payload.get("height")),
            original_filename=payload.get("original_filename"),
        )
