from picker_gallery.models.gallery import GalleryItem

__all__ = ["GalleryItem"]
