"""Picker ingestion worker: download selected media, re-host it, record it.

Invariants:
- Session-level errors propagate before any item is touched.
- Items run sequentially in provider order; one item's failure is recorded
  and never aborts the batch.
- A source media item id is ingested at most once across runs.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from picker_gallery.core.config import settings
from picker_gallery.ingestion.base import BaseContentStore, BasePickerClient, MediaDescriptor
from picker_gallery.ingestion.descriptors import resolve_download_url
from picker_gallery.ingestion.exceptions import DuplicateGalleryItemError, ItemIngestionError
from picker_gallery.ingestion.http import download_asset
from picker_gallery.ingestion.observability import PipelineMonitor, pipeline_monitor
from picker_gallery.schema.gallery import GalleryItemCreate
from picker_gallery.services import gallery_service, picker_service
from picker_gallery.utils.redaction import redact_secrets

logger = logging.getLogger("picker_gallery.services.ingestion")

NO_SELECTION_MESSAGE = "No media items selected in this session"


@dataclass(slots=True)
class IngestionItemError:
    """Failure recorded for a single media item."""
    item_id: str | None
    error: str


@dataclass
class IngestionResult:
    """Aggregate outcome of one ingestion run."""
    ingested: int = 0
    skipped: int = 0
    errors: list[IngestionItemError] = field(default_factory=list)
    message: str | None = None

    @property
    def success(self) -> bool:
        return not self.errors


def build_public_id(source_media_item_id: str) -> str:
    """Derive a CDN-safe public id from the provider media item id."""
    return "gallery-" + re.sub(r"[^a-zA-Z0-9]", "-", source_media_item_id)


@dataclass
class _ItemContext:
    content_store: BaseContentStore
    access_token: str | None
    trusted_hosts: list[str]
    transfer_timeout: float
    monitor: PipelineMonitor


async def _ingest_item(session: AsyncSession, descriptor: MediaDescriptor, ctx: _ItemContext) -> bool:
    """Ingest one descriptor; return False when it was already present."""
    url = resolve_download_url(descriptor)
    source_id = descriptor.id
    if not source_id:
        raise ItemIngestionError(None, "Media item has no id")

    if await gallery_service.exists(session, source_id):
        await ctx.monitor.record_skip(
            "gallery", "ingest_item", reason="duplicate", context={"source_media_item_id": source_id}
        )
        return False

    asset = await ctx.monitor.track(
        "asset_download",
        "download",
        lambda: download_asset(
            url,
            item_id=source_id,
            access_token=ctx.access_token,
            trusted_hosts=ctx.trusted_hosts,
            timeout=ctx.transfer_timeout,
        ),
        context={"source_media_item_id": source_id},
    )
    stored = await ctx.content_store.upload(
        asset.content,
        public_id=build_public_id(source_id),
        filename=descriptor.filename,
        mime_type=descriptor.mime_type or asset.content_type,
    )
    payload = GalleryItemCreate(
        source_media_item_id=source_id,
        content_url=stored.content_url,
        thumbnail_url=stored.thumbnail_url,
        filename=stored.original_filename or descriptor.filename,
        width=stored.width or descriptor.width,
        height=stored.height or descriptor.height,
        mime_type=stored.mime_type or descriptor.mime_type,
    )
    try:
        await gallery_service.insert(session, payload)
    except DuplicateGalleryItemError:
        # Another run inserted the same source id between our check and insert.
        await ctx.monitor.record_skip(
            "gallery", "ingest_item", reason="duplicate_race", context={"source_media_item_id": source_id}
        )
        return False
    return True


async def ingest_session(
    session: AsyncSession,
    *,
    picker: BasePickerClient,
    content_store: BaseContentStore,
    session_id: str,
    replace_mode: bool = False,
    wait_for_selection: bool = False,
    poll_interval_seconds: float | None = None,
    poll_max_attempts: int | None = None,
    trusted_hosts: Iterable[str] | None = None,
    transfer_timeout: float | None = None,
    monitor: PipelineMonitor | None = None,
) -> IngestionResult:
    """Ingest every item selected in a picker session into the gallery.

    Implementation notes:
    - Replace mode deletes existing rows before fetching; it is not
      transactional with the ingestion that follows.
    - The bearer token is fetched once per batch and only sent to
      trusted provider asset hosts.
    """
    if wait_for_selection:
        picker_session = await picker_service.poll_until_selected(
            picker, session_id, interval_seconds=poll_interval_seconds, max_attempts=poll_max_attempts
        )
    else:
        picker_session = await picker.get_session(session_id)
    if not picker_session.media_items_set:
        return IngestionResult(message=NO_SELECTION_MESSAGE)

    if replace_mode:
        deleted = await gallery_service.delete_all(session)
        logger.info("Replace mode: deleted %s existing gallery items", deleted)

    descriptors = await picker_service.get_all_media_items(picker, session_id)
    result = IngestionResult()
    if not descriptors:
        return result

    ctx = _ItemContext(
        content_store=content_store,
        access_token=await picker.get_access_token(),
        trusted_hosts=list(trusted_hosts if trusted_hosts is not None else settings.picker_asset_hosts),
        transfer_timeout=transfer_timeout if transfer_timeout is not None else settings.transfer_timeout_seconds,
        monitor=monitor or pipeline_monitor,
    )
    for descriptor in descriptors:
        logger.debug(
            "Processing item %s: %s", descriptor.id, redact_secrets(json.dumps(descriptor.raw, default=str))
        )
        try:
            if await _ingest_item(session, descriptor, ctx):
                result.ingested += 1
                logger.info("Ingested item %s", descriptor.id)
            else:
                result.skipped += 1
                logger.info("Skipping duplicate item %s", descriptor.id)
        except ItemIngestionError as exc:
            logger.warning("Error processing item %s: %s", descriptor.id, exc.message)
            result.errors.append(IngestionItemError(item_id=descriptor.id, error=exc.message))
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.warning("Database error processing item %s: %s", descriptor.id, exc.__class__.__name__)
            result.errors.append(IngestionItemError(item_id=descriptor.id, error=f"Database error: {exc.__class__.__name__}"))
        except Exception as exc:  # noqa: BLE001
            error = redact_secrets(str(exc)) or exc.__class__.__name__
            logger.exception("Unexpected error processing item %s", descriptor.id)
            result.errors.append(IngestionItemError(item_id=descriptor.id, error=error))

    logger.info(
        "Ingestion of session %s finished: ingested=%s skipped=%s errors=%s",
        session_id,
        result.ingested,
        result.skipped,
        len(result.errors),
    )
    return result
