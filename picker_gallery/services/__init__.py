from . import (
    gallery_service,
    picker_service,
    ingestion_service,
)

__all__ = [
    "gallery_service",
    "ingestion_service",
    "picker_service",
]
