"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import gallery, picker

api_router = APIRouter()
api_router.include_router(picker.router, prefix="/admin/google/photos", tags=["picker"])
api_router.include_router(gallery.admin_router, prefix="/admin/gallery", tags=["gallery"])
api_router.include_router(gallery.public_router, prefix="/gallery", tags=["gallery"])
