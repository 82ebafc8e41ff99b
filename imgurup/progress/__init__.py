"""Console progress and reporting."""

from .tracker import ProgressTracker, UploadProgressContext

__all__ = ["ProgressTracker", "UploadProgressContext"]
