"""Import all models here so metadata.create_all sees every table."""

from picker_gallery.db.base_class import Base
from picker_gallery.models import gallery  # noqa: F401

__all__ = ["Base"]
