"""Screenshot capture."""

from .screenshot import CaptureInterrupted, capture_screenshot

__all__ = ["CaptureInterrupted", "capture_screenshot"]
