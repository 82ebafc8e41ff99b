"""Batch upload orchestration."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import final

from requests.exceptions import RequestException

from imgurup.config import Config
from imgurup.metadata.journal import Journal
from imgurup.models.album import AlbumEntity
from imgurup.models.image import ImageEntity
from imgurup.processors.exif import strip_exif
from imgurup.progress.tracker import ProgressTracker, UploadProgressContext
from imgurup.uploaders.imgur import ImgurUploader


@dataclass
class RunResult:
    """Outcome of one batch."""

    images: list[ImageEntity]
    album: AlbumEntity | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        return sum(1 for image in self.images if image.uploaded)

    @property
    def success(self) -> bool:
        return self.uploaded_count > 0

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


@final
class UploadProcessor:
    """Uploads a batch of images in order and groups them into an album."""

    def __init__(
        self,
        config: Config,
        journal: Journal,
        uploader: ImgurUploader | None = None,
        progress_tracker: ProgressTracker | None = None,
        strip_metadata: Callable[[Path], None] = strip_exif,
    ) -> None:
        """Initialize the upload processor.

        Args:
            config: Runtime configuration
            journal: Journal receiving one line per created resource
            uploader: Imgur client; built from ``config`` if omitted
            progress_tracker: Console reporter
            strip_metadata: Rewrites an image copy without metadata
        """
        self.config = config
        self.journal = journal
        self.uploader = uploader or ImgurUploader(config)
        self.progress_tracker = progress_tracker or ProgressTracker()
        self.strip_metadata = strip_metadata

    def create_entities(
        self, paths: Sequence[Path], delete_after_upload: bool = False
    ) -> list[ImageEntity]:
        """Create one unuploaded entity per path, keeping input order."""
        return [
            ImageEntity(config=self.config, path=path, delete_after_upload=delete_after_upload)
            for path in paths
        ]

    def run(self, images: list[ImageEntity]) -> RunResult:
        """Upload every image, then create an album if more than one succeeded.

        Args:
            images: Entities to upload, in order

        Returns:
            RunResult with the same entities and the album, if any
        """
        result = RunResult(images=images)

        if images:
            with self.progress_tracker.track_uploads(len(images)) as progress:
                for image in images:
                    error = self.upload_image(image, progress)
                    if error is not None:
                        result.errors.append(error)
                    progress.update(advance=1)

        uploaded = [image for image in images if image.uploaded]

        if not uploaded:
            message = "No images uploaded"
            self.progress_tracker.display_error(message)
            result.errors.append(message)
        elif len(uploaded) > 1:
            result.album = self.create_album(uploaded)
            if not result.album.created:
                result.errors.append("Album creation failed")

        return result

    def upload_image(
        self, image: ImageEntity, progress: UploadProgressContext | None = None
    ) -> str | None:
        """Upload a single image and journal it.

        The file is copied into a private temporary directory and the copy is
        stripped of metadata; the user's file is only touched when
        ``delete_after_upload`` is set and the upload succeeded.

        Args:
            image: Entity to upload
            progress: Optional progress context for status text and bytes sent

        Returns:
            None on success, otherwise the reported error message
        """
        if progress is not None:
            progress.set_description(f"Uploading {image.file}")

        try:
            with tempfile.TemporaryDirectory(prefix="imgurup-") as temp_dir:
                upload_copy = Path(temp_dir) / image.path.name
                _ = shutil.copyfile(image.path, upload_copy)
                self.strip_metadata(upload_copy)
                if progress is not None:
                    progress.start_transfer(upload_copy.stat().st_size)
                    response = self.uploader.upload_image(
                        upload_copy, progress_callback=progress.update_transfer
                    )
                else:
                    response = self.uploader.upload_image(upload_copy)
        except Exception as e:
            message = f"Error while uploading {image.file}: {e}"
            self.progress_tracker.display_error(message, e)
            return message

        try:
            image.mark_uploaded(
                str(response["id"]), str(response["link"]), str(response["deletehash"])
            )
        except ValueError as e:
            message = f"Error while uploading {image.file}: invalid response ({e})"
            self.progress_tracker.display_error(message, e)
            return message

        if image.delete_after_upload:
            self._delete_local_file(image)

        if image.history_line:
            self.journal.write(image.history_line)
        self.progress_tracker.display_success(f"Uploaded {image.file}: {image.link}")
        return None

    def _delete_local_file(self, image: ImageEntity) -> None:
        try:
            image.path.unlink()
        except OSError as e:
            self.progress_tracker.display_warning(f"Could not delete {image.path}: {e}")
            return
        image.mark_deleted()

    def create_album(self, images: Sequence[ImageEntity]) -> AlbumEntity:
        """Group uploaded images into an album.

        Failure is reported but leaves the images and their journal lines
        as they are.

        Args:
            images: Uploaded entities to include

        Returns:
            The album; ``created`` is False if the API call failed
        """
        album = AlbumEntity(config=self.config)
        deletehashes = [image.deletehash for image in images if image.deletehash]

        try:
            response = self.uploader.create_album(deletehashes, self.config.album_layout)
        except RequestException as e:
            self.progress_tracker.display_error(f"Error while creating album: {e}", e)
            return album

        try:
            album.mark_created(str(response["id"]), str(response["deletehash"]))
        except ValueError as e:
            self.progress_tracker.display_error(f"Error while creating album: invalid response ({e})", e)
            return album

        if album.history_line:
            self.journal.write(album.history_line)
        self.progress_tracker.display_success(f"Created album: {album.link}")
        return album
