"""Console reporting and progress bars with Rich."""

from __future__ import annotations

import traceback
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import final

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from imgurup.models.album import AlbumEntity
from imgurup.models.image import ImageEntity


@final
class ProgressTracker:
    """Reports upload progress, errors and the final summary."""

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        """Initialize the progress tracker.

        Args:
            console: Rich console instance. If None, creates a new one.
            verbose: Show debug messages and tracebacks
        """
        self.console = console or Console()
        self.verbose = verbose

    @contextmanager
    def track_uploads(self, total_images: int) -> Iterator[UploadProgressContext]:
        """Context manager for tracking per-image upload progress.

        Args:
            total_images: Number of images in the batch

        Yields:
            Context for advancing the progress bar
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Uploading images...", total=total_images)
            transfer_id = progress.add_task("Sending", total=None)
            yield UploadProgressContext(progress, task_id, transfer_id)

    def display_run_summary(
        self, images: Sequence[ImageEntity], album: AlbumEntity | None = None
    ) -> None:
        """Display the file / delete link / link table, then the album link.

        Args:
            images: Every processed image, in input order
            album: Album of the run, shown only if it was created
        """
        table = Table(title="Upload Summary")
        table.add_column("File", style="cyan")
        table.add_column("Delete link", style="red")
        table.add_column("Link", style="green")

        for image in images:
            table.add_row(
                escape(image.file),
                image.delete_link or "-",
                image.link or "-",
            )

        self.console.print()
        self.console.print(table)
        if album is not None and album.created:
            self.console.print(f"[bold]Album:[/bold] {album.link}")

    def display_error(self, message: str, exception: BaseException | None = None) -> None:
        """Display an error message with optional exception details.

        Args:
            message: Error message to display
            exception: Optional exception for additional context
        """
        self.console.print(f"[red]Error: {escape(message)}[/red]")
        if exception is not None and self.verbose:
            formatted = "".join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            )
            self.console.print(f"[dim]{escape(formatted)}[/dim]")

    def display_warning(self, message: str) -> None:
        """Display a warning message."""
        self.console.print(f"[yellow]Warning: {escape(message)}[/yellow]")

    def display_success(self, message: str) -> None:
        """Display a success message."""
        self.console.print(f"[green]Success: {escape(message)}[/green]")

    def display_info(self, message: str) -> None:
        """Display an info message."""
        self.console.print(f"[blue]Info: {escape(message)}[/blue]")

    def display_debug(self, message: str) -> None:
        """Display a message only in verbose mode."""
        if self.verbose:
            self.console.print(f"[dim]{escape(message)}[/dim]")


@final
class UploadProgressContext:
    """Context for tracking upload progress."""

    def __init__(self, progress: Progress, task_id: TaskID, transfer_id: TaskID) -> None:
        """Initialize the context.

        Args:
            progress: Rich Progress instance
            task_id: Task ID for the per-image progress bar
            transfer_id: Task ID for the bytes sent of the current image
        """
        self.progress = progress
        self.task_id = task_id
        self.transfer_id = transfer_id
        self._transfer_total = 0

    def update(self, advance: int = 1, description: str | None = None) -> None:
        """Advance the bar by ``advance`` images."""
        self.progress.update(self.task_id, advance=advance, description=description)

    def set_description(self, description: str) -> None:
        self.progress.update(self.task_id, description=escape(description))

    def start_transfer(self, total_bytes: int) -> None:
        """Reset the byte bar for the next image."""
        self._transfer_total = total_bytes
        self.progress.reset(self.transfer_id, total=total_bytes)

    def update_transfer(self, bytes_sent: int) -> None:
        """Callback for multipart upload progress.

        The multipart body is slightly larger than the file, so the bar is
        capped at the file size.
        """
        self.progress.update(self.transfer_id, completed=min(bytes_sent, self._transfer_total))
