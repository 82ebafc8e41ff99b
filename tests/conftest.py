"""Shared fixtures for the imgurup test suite."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image
from rich.console import Console

from imgurup.config import Config
from imgurup.progress.tracker import ProgressTracker


class FakeUploader:
    """Stand-in for ImgurUploader that replays canned responses.

    Each entry of ``upload_results`` is either a response dict or an
    exception to raise.
    """

    def __init__(self, upload_results=None, album_result=None):
        self.upload_results = list(upload_results or [])
        self.album_result = album_result
        self.uploaded_paths: list[Path] = []
        self.uploaded_bytes: list[bytes] = []
        self.album_calls: list[tuple[list[str], str | None]] = []
        self.progress_callbacks: list = []

    def upload_image(self, image_path, progress_callback=None):
        self.uploaded_paths.append(image_path)
        self.uploaded_bytes.append(image_path.read_bytes())
        self.progress_callbacks.append(progress_callback)
        if progress_callback is not None:
            progress_callback(len(self.uploaded_bytes[-1]))
        result = self.upload_results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    def create_album(self, deletehashes, layout=None):
        self.album_calls.append((list(deletehashes), layout))
        if isinstance(self.album_result, BaseException):
            raise self.album_result
        return self.album_result


def image_response(image_id: str, deletehash: str) -> dict[str, str]:
    return {
        "id": image_id,
        "link": f"https://i.imgur.com/{image_id}.png",
        "deletehash": deletehash,
    }


@pytest.fixture
def config(tmp_path):
    """Config rooted in a temporary directory."""
    return Config(client_id="test-client", config_dir=tmp_path / "config")


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=300, color_system=None)


@pytest.fixture
def tracker(console):
    return ProgressTracker(console)


@pytest.fixture
def output(console):
    """Callable returning everything printed to the test console so far."""
    return lambda: console.file.getvalue()


@pytest.fixture
def make_image(tmp_path):
    """Create a small real image file."""

    def _make(name: str, size: tuple[int, int] = (8, 8), **save_kwargs) -> Path:
        path = tmp_path / name
        image_format = "PNG" if path.suffix.lower() == ".png" else "JPEG"
        Image.new("RGB", size, color=(200, 30, 30)).save(path, format=image_format, **save_kwargs)
        return path

    return _make


@pytest.fixture
def fake_uploader():
    """Factory for FakeUploader instances."""
    return FakeUploader


@pytest.fixture
def response_for():
    """Build an image upload response payload."""
    return image_response
