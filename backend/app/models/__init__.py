from app.models.photo import Photo
from app.models.tag import PhotoTag, Tag

__all__ = [
    "Photo",
    "Tag",
    "PhotoTag",
]
