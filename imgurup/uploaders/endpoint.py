"""Composable API endpoint URLs."""

from __future__ import annotations

from typing import final


@final
class Endpoint:
    """An API URL built from a root and normalized path segments.

    Endpoints are immutable; ``join`` and ``/`` return new instances.
    """

    def __init__(self, root: str) -> None:
        self._url: str = root.rstrip("/")

    def join(self, *segments: str) -> Endpoint:
        """Append path segments, keeping exactly one ``/`` between parts.

        Args:
            *segments: Path segments; surrounding slashes are stripped and
                empty segments are ignored

        Returns:
            A new Endpoint
        """
        url = self._url
        for segment in segments:
            for part in str(segment).split("/"):
                if part:
                    url = f"{url}/{part}"
        return Endpoint(url)

    def __truediv__(self, segment: str) -> Endpoint:
        return self.join(segment)

    def __str__(self) -> str:
        return self._url

    def __repr__(self) -> str:
        return f"Endpoint({self._url!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Endpoint):
            return self._url == other._url
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._url)
