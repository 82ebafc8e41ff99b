"""Input file collection utilities."""

from .image_collector import SUPPORTED_IMAGE_EXTENSIONS, collect_image_files, rejection_reason

__all__ = ["SUPPORTED_IMAGE_EXTENSIONS", "collect_image_files", "rejection_reason"]
