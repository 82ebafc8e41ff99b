"""Shared behaviour of remote Imgur resources."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field

from imgurup.config import Config
from imgurup.uploaders.endpoint import Endpoint


@dataclass
class RemoteResource:
    """A resource that exists on Imgur once ``id`` and ``deletehash`` are set.

    Subclasses set ``kind`` (the API collection name, also used as the
    journal ``type``) and may add fields to the history line.
    """

    config: Config = field(repr=False)
    id: str | None = field(default=None, init=False)
    deletehash: str | None = field(default=None, init=False)

    kind = "resource"

    @property
    def delete_link(self) -> str | None:
        """Public URL that deletes the resource when visited."""
        if self.deletehash is None:
            return None
        return str(Endpoint(self.config.delete_root) / self.deletehash)

    @property
    def delete_command(self) -> str | None:
        """Shell command that deletes the resource through the API."""
        if self.deletehash is None:
            return None
        url = Endpoint(self.config.api_root).join(self.kind, self.deletehash)
        header = shlex.quote(f"Authorization: {self.config.authorization}")
        return f"curl -s -X DELETE -H {header} {url}"

    @staticmethod
    def _history_value(value: str | None) -> str:
        """Escape control and line-separator characters so a value stays on one line."""
        if not value:
            return ""
        return "".join(char if char.isprintable() else repr(char)[1:-1] for char in value)

    def _history_fields(self) -> list[tuple[str, str | None]]:
        return []

    @property
    def history_line(self) -> str | None:
        """Single journal line describing the resource, or None if not created."""
        if self.id is None:
            return None
        fields: list[tuple[str, str | None]] = [
            *self._history_fields(),
            ("deletehash", self.deletehash),
            ("delete_link", self.delete_link),
            ("delete_command", self.delete_command),
        ]
        pairs = " ".join(f"{key}=[{self._history_value(value)}]" for key, value in fields)
        return f"type={self.kind} {pairs}"
