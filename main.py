#!/usr/bin/env python3
"""
imgurup

Upload images, or a freshly selected screenshot, to Imgur anonymously.
Metadata is stripped from a temporary copy before upload, several images
are grouped into an album, and every created resource is written to a
history log together with the command that deletes it.

Usage:
    uv run main.py IMAGE [IMAGE ...]
    uv run main.py --screenshot
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console

from imgurup.capture.screenshot import CaptureInterrupted, capture_screenshot
from imgurup.config import Config, ConfigError
from imgurup.metadata.journal import Journal
from imgurup.parsers.image_collector import collect_image_files
from imgurup.processors.upload_processor import RunResult, UploadProcessor
from imgurup.progress.tracker import ProgressTracker
from imgurup.uploaders.imgur import ImgurUploader

# Initialize Rich console for output
console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="imgurup",
        description="Upload images to Imgur and keep a history of deletion links",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  imgurup photo.jpg               # Upload one image
  imgurup a.png b.png c.jpg       # Upload three images and group them in an album
  imgurup --screenshot            # Select a screen region and upload it
  imgurup -d *.png                # Delete the local files after uploading
        """,
    )

    _ = parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Images to upload (.jpg, .jpeg or .png)",
    )

    _ = parser.add_argument(
        "-s",
        "--screenshot",
        action="store_true",
        help="Select a screen region and upload it instead of files",
    )

    _ = parser.add_argument(
        "-d",
        "--delete-after-upload",
        action="store_true",
        help="Delete local files once they are uploaded",
    )

    _ = parser.add_argument(
        "--test",
        action="store_true",
        help="Test API connection and exit",
    )

    _ = parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output for debugging",
    )

    return parser


def load_config(tracker: ProgressTracker) -> Config | None:
    """Load configuration, reporting what is missing."""
    try:
        return Config.from_env()
    except ConfigError as e:
        tracker.display_error(str(e))
        return None


def run_test_mode(config: Config, tracker: ProgressTracker) -> int:
    """Check the client ID against the API."""
    tracker.display_info("Testing Imgur API connection...")
    if ImgurUploader(config).test_connection():
        tracker.display_success("Imgur API connection OK")
        return 0
    tracker.display_error("Imgur API connection failed")
    return 1


def upload(
    config: Config,
    tracker: ProgressTracker,
    paths: list[Path],
    delete_after_upload: bool,
) -> RunResult:
    """Upload ``paths`` and print the summary table.

    The journal is held for the duration of the run and released on
    every exit path.
    """
    with Journal(config.journal_path) as journal:
        processor = UploadProcessor(config, journal, progress_tracker=tracker)
        images = processor.create_entities(paths, delete_after_upload=delete_after_upload)
        result = processor.run(images)

        if journal.error is not None:
            tracker.display_debug(f"History not written to {config.journal_path}: {journal.error}")

    if result.success:
        tracker.display_run_summary(result.images, result.album)
    return result


def main(argv: list[str] | None = None) -> int:
    """Main entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.files and not args.screenshot and not args.test:
        parser.print_usage(sys.stderr)
        return 1

    tracker = ProgressTracker(console, verbose=args.verbose)
    if args.verbose:
        tracker.display_debug("Verbose mode enabled")

    config = load_config(tracker)
    if config is None:
        return 1

    if args.test:
        return run_test_mode(config, tracker)

    delete_after_upload: bool = args.delete_after_upload
    if args.screenshot:
        try:
            paths = [capture_screenshot(config.screenshot_command)]
        except CaptureInterrupted as e:
            tracker.display_debug(str(e))
            console.print("Screenshot interrupted, nothing was uploaded.")
            return 1
        delete_after_upload = True
    else:
        paths = collect_image_files(
            args.files,
            on_rejected=lambda path, reason: tracker.display_warning(
                f"Skipping {path}: {reason}"
            ),
        )

    try:
        result = upload(config, tracker, paths, delete_after_upload)
    except KeyboardInterrupt:
        tracker.display_warning("Upload interrupted by user.")
        return 1
    except Exception as e:
        tracker.display_error(f"Critical error during upload: {e}", e)
        return 1

    if args.screenshot and not result.success:
        tracker.display_info(f"Screenshot kept at {paths[0]}")

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
