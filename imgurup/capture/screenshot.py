"""Screenshot capture through an external selection tool."""

from __future__ import annotations

import os
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path


class CaptureInterrupted(RuntimeError):
    """The selection tool was cancelled or produced no image."""


def capture_screenshot(command: Sequence[str]) -> Path:
    """Let the user select a screen region and save it to a temporary PNG.

    The output path is appended as the last argument of ``command``
    (``maim --select /tmp/imgurup-xxxx.png``).

    Args:
        command: Selection tool and its arguments

    Returns:
        Path to the captured PNG. The caller owns the file.

    Raises:
        CaptureInterrupted: If the tool exits non-zero, cannot be run, or
            leaves an empty file
    """
    fd, name = tempfile.mkstemp(prefix="imgurup-", suffix=".png")
    os.close(fd)
    screenshot = Path(name)

    try:
        completed = subprocess.run([*command, str(screenshot)], check=False)
    except OSError as e:
        screenshot.unlink(missing_ok=True)
        raise CaptureInterrupted(f"Could not run {command[0]}: {e}") from e

    if completed.returncode != 0 or not screenshot.exists() or screenshot.stat().st_size == 0:
        screenshot.unlink(missing_ok=True)
        raise CaptureInterrupted(f"{command[0]} exited with status {completed.returncode}")

    return screenshot
