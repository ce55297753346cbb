"""Picker session polling and media listing on top of a picker client."""

from __future__ import annotations

import asyncio
import logging

from picker_gallery.core.config import settings
from picker_gallery.ingestion.base import BasePickerClient, MediaDescriptor, PickerSession
from picker_gallery.ingestion.descriptors import normalize_media_item
from picker_gallery.ingestion.exceptions import PollingTimeout

logger = logging.getLogger("picker_gallery.services.picker")


async def poll_until_selected(
    picker: BasePickerClient,
    session_id: str,
    *,
    interval_seconds: float | None = None,
    max_attempts: int | None = None,
) -> PickerSession:
    """Poll a session at a fixed interval until the user finishes selecting.

    SessionExpired from the status read propagates immediately; running out of
    attempts raises PollingTimeout. No sleep follows the final attempt, so the
    call is bounded by ``max_attempts * interval_seconds`` plus request time.
    """
    interval = settings.picker_poll_interval_seconds if interval_seconds is None else interval_seconds
    attempts = settings.picker_poll_max_attempts if max_attempts is None else max_attempts
    for attempt in range(1, attempts + 1):
        session = await picker.get_session(session_id)
        if session.media_items_set:
            logger.info("Picker session %s finalized after %s attempt(s)", session_id, attempt)
            return session
        if attempt < attempts:
            await asyncio.sleep(interval)
    raise PollingTimeout(session_id, attempts)


async def get_all_media_items(picker: BasePickerClient, session_id: str) -> list[MediaDescriptor]:
    """Follow continuation tokens and return every selected item in provider order."""
    descriptors: list[MediaDescriptor] = []
    page_token: str | None = None
    while True:
        page = await picker.list_media_items(session_id, page_token)
        descriptors.extend(normalize_media_item(item) for item in page.items)
        page_token = page.next_page_token
        if not page_token:
            break
    logger.info("Picker session %s has %s selected item(s)", session_id, len(descriptors))
    return descriptors
