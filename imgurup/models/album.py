"""Album entity."""

from __future__ import annotations

from dataclasses import dataclass

from imgurup.models.resource import RemoteResource
from imgurup.uploaders.endpoint import Endpoint
from imgurup.uploaders.tokens import sanitize_token


@dataclass
class AlbumEntity(RemoteResource):
    """The optional album grouping the images uploaded in one run."""

    kind = "album"

    @property
    def created(self) -> bool:
        return self.id is not None

    @property
    def link(self) -> str | None:
        if self.id is None:
            return None
        return str(Endpoint(self.config.album_root) / self.id)

    def mark_created(self, album_id: str, deletehash: str) -> None:
        """Record the album returned by the API.

        Raises:
            RuntimeError: If the album was already created
            ValueError: If either value is empty
        """
        if self.created:
            raise RuntimeError(f"Album was already created as {self.id}")
        clean_hash = sanitize_token(deletehash)
        if not album_id or not clean_hash:
            raise ValueError("id and deletehash are both required")

        self.id = album_id
        self.deletehash = clean_hash

    def _history_fields(self) -> list[tuple[str, str | None]]:
        return [("id", self.id), ("link", self.link)]
