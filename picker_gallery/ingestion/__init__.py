"""Factories for the pipeline's external collaborators, built fresh from settings."""

from __future__ import annotations

from picker_gallery.ingestion.base import BaseContentStore, BasePickerClient
from picker_gallery.ingestion.cloudinary_store import CloudinaryContentStore
from picker_gallery.ingestion.google_picker import GooglePhotosPickerClient


def build_picker_client() -> BasePickerClient:
    """Return a picker client authenticated with the stored OAuth token."""
    return GooglePhotosPickerClient.from_settings()


def build_content_store() -> BaseContentStore:
    """Return the configured content store."""
    return CloudinaryContentStore.from_settings()
