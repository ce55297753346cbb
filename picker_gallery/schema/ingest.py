"""Picker session and ingestion request/response schemas."""

from __future__ import annotations

from pydantic import Field

from picker_gallery.schema.base import CamelModel


class PickerSessionCreated(CamelModel):
    """Identifier and URL handed to the operator after opening a session."""
    session_id: str
    picker_uri: str | None = None


class IngestRequest(CamelModel):
    """Options for ingesting a picker session into the gallery."""
    replace_mode: bool | None = Field(default=None, description="Clear the gallery first; defaults to GALLERY_REPLACE_MODE")
    wait_for_selection: bool = Field(default=False, description="Poll until the selection is finalized before ingesting")


class IngestErrorRead(CamelModel):
    item_id: str | None
    error: str


class IngestResponse(CamelModel):
    """Aggregate outcome of one ingestion run."""
    success: bool
    ingested: int
    skipped: int
    errors: list[IngestErrorRead] = Field(default_factory=list)
    message: str | None = None
