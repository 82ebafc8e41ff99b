"""Metadata stripping for images about to be uploaded."""

from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageOps

# Image.info keys that describe pixels rather than metadata
KEPT_INFO_KEYS = ("icc_profile", "transparency")


def strip_exif(image_path: Path) -> None:
    """
    Remove EXIF and text metadata from an image, rewriting it in place.

    The EXIF orientation is applied to the pixels first so the picture
    does not turn sideways once the tag is gone. The ICC profile and
    palette transparency are kept.

    Args:
        image_path: Image to rewrite; must be a copy, never the user's file

    Raises:
        PIL.UnidentifiedImageError: If the file is not a readable image
        PIL.Image.DecompressionBombError: If the declared size is too large to decode
        OSError: If the file cannot be read or written
    """
    with Image.open(image_path) as img:
        image_format = img.format
        save_options: dict[str, object] = {
            key: img.info[key] for key in KEPT_INFO_KEYS if img.info.get(key) is not None
        }
        clean = ImageOps.exif_transpose(img)

    clean.info = {}
    if image_format == "JPEG":
        save_options["quality"] = 95

    clean.save(image_path, format=image_format, **save_options)
