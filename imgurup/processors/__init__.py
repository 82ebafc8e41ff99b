"""Upload processing."""

from .exif import strip_exif
from .upload_processor import RunResult, UploadProcessor

__all__ = ["RunResult", "UploadProcessor", "strip_exif"]
