"""Data models for imgurup."""

from .album import AlbumEntity
from .image import DELETED_MARKER, ImageEntity
from .resource import RemoteResource

__all__ = ["AlbumEntity", "DELETED_MARKER", "ImageEntity", "RemoteResource"]
