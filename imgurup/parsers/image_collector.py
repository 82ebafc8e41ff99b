"""Input image validation."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path

# Supported image file extensions
SUPPORTED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def rejection_reason(file_path: Path) -> str | None:
    """
    Explain why a path cannot be uploaded.

    Args:
        file_path: Candidate input path

    Returns:
        str | None: Reason for rejecting the path, or None if it is usable
    """
    if not file_path.is_file():
        return "not a readable file"
    if not os.access(file_path, os.R_OK):
        return "not a readable file"
    if file_path.suffix.lower() not in SUPPORTED_IMAGE_EXTENSIONS:
        return "unsupported file type (use .jpg, .jpeg or .png)"
    return None


def collect_image_files(
    paths: Iterable[Path | str],
    on_rejected: Callable[[Path, str], None] | None = None,
) -> list[Path]:
    """
    Keep the uploadable paths, in the order given.

    Args:
        paths: Paths supplied by the user
        on_rejected: Called with the path and reason for every skipped entry

    Returns:
        list[Path]: Readable .jpg/.jpeg/.png files
    """
    image_files: list[Path] = []
    for raw_path in paths:
        file_path = Path(raw_path)
        reason = rejection_reason(file_path)
        if reason is None:
            image_files.append(file_path)
        elif on_rejected is not None:
            on_rejected(file_path, reason)
    return image_files
