"""Admin endpoints that drive the Google Photos Picker ingestion flow."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from picker_gallery.api.deps import get_content_store, get_db, get_picker_client, require_admin
from picker_gallery.core.config import settings
from picker_gallery.ingestion.base import BaseContentStore, BasePickerClient
from picker_gallery.ingestion.exceptions import PickerError, PollingTimeout, ProviderError, SessionExpired
from picker_gallery.schema.ingest import IngestErrorRead, IngestRequest, IngestResponse, PickerSessionCreated
from picker_gallery.services import ingestion_service

logger = logging.getLogger("picker_gallery.api.picker")

router = APIRouter()


def _http_error(exc: PickerError) -> HTTPException:
    """Translate session-level pipeline errors into HTTP responses."""
    if isinstance(exc, SessionExpired):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, PollingTimeout):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=exc.message)
    if isinstance(exc, ProviderError) and exc.status_code in (status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND):
        return HTTPException(status_code=exc.status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post("/sessions", response_model=PickerSessionCreated)
async def create_picker_session(
    picker: BasePickerClient = Depends(get_picker_client),
    _: str = Depends(require_admin),
) -> PickerSessionCreated:
    """Open a picker session and return its id and picker URL."""
    try:
        picker_session = await picker.create_session()
    except PickerError as exc:
        logger.warning("Error creating picker session: %s", exc)
        raise _http_error(exc) from exc
    return PickerSessionCreated(session_id=picker_session.session_id, picker_uri=picker_session.picker_uri)


@router.get("/sessions/{session_id}/status")
async def get_picker_session_status(
    session_id: str,
    picker: BasePickerClient = Depends(get_picker_client),
    _: str = Depends(require_admin),
) -> dict[str, Any]:
    """Return the provider's session object verbatim."""
    try:
        picker_session = await picker.get_session(session_id)
    except PickerError as exc:
        logger.warning("Error getting session status for %s: %s", session_id, exc)
        raise _http_error(exc) from exc
    return picker_session.raw


@router.post("/sessions/{session_id}/ingest", response_model=IngestResponse)
async def ingest_picker_session(
    session_id: str,
    payload: IngestRequest | None = Body(default=None),
    session: AsyncSession = Depends(get_db),
    picker: BasePickerClient = Depends(get_picker_client),
    content_store: BaseContentStore = Depends(get_content_store),
    _: str = Depends(require_admin),
) -> IngestResponse:
    """Ingest the session's selection; per-item failures still return 200."""
    options = payload or IngestRequest()
    replace_mode = settings.gallery_replace_mode if options.replace_mode is None else options.replace_mode
    try:
        result = await ingestion_service.ingest_session(
            session,
            picker=picker,
            content_store=content_store,
            session_id=session_id,
            replace_mode=replace_mode,
            wait_for_selection=options.wait_for_selection,
        )
    except PickerError as exc:
        logger.warning("Error ingesting picker session %s: %s", session_id, exc)
        raise _http_error(exc) from exc
    return IngestResponse(
        success=result.success,
        ingested=result.ingested,
        skipped=result.skipped,
        errors=[IngestErrorRead(item_id=error.item_id, error=error.error) for error in result.errors],
        message=result.message,
    )
