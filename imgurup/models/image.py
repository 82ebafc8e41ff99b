"""Image entity: one local file on its way to Imgur."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from imgurup.models.resource import RemoteResource
from imgurup.uploaders.tokens import sanitize_token

DELETED_MARKER = "<deleted>"


@dataclass
class ImageEntity(RemoteResource):
    """A local image file and, once uploaded, its remote identity.

    ``id``, ``deletehash`` and ``link`` are set together by
    :meth:`mark_uploaded`, which is the only transition an entity makes.
    """

    path: Path
    delete_after_upload: bool = False
    file: str = field(default="", init=False)
    link: str | None = field(default=None, init=False)
    uploaded: bool = field(default=False, init=False)

    kind = "image"

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.file = self.path.name

    def mark_uploaded(self, image_id: str, link: str, deletehash: str) -> None:
        """Record a successful upload.

        Args:
            image_id: Remote image ID
            link: Public URL of the image
            deletehash: Deletion token as returned by the API; sanitized here

        Raises:
            RuntimeError: If the entity was already uploaded
            ValueError: If any value is empty
        """
        if self.uploaded:
            raise RuntimeError(f"{self.file} was already uploaded as {self.id}")
        clean_hash = sanitize_token(deletehash)
        if not image_id or not link or not clean_hash:
            raise ValueError("id, link and deletehash are all required")

        self.id = image_id
        self.link = link
        self.deletehash = clean_hash
        self.uploaded = True

    def mark_deleted(self) -> None:
        """Note that the local file has been removed."""
        self.file = DELETED_MARKER

    def _history_fields(self) -> list[tuple[str, str | None]]:
        return [("file", self.file), ("id", self.id), ("link", self.link)]
