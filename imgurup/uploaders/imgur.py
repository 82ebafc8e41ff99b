"""Imgur API client for anonymous uploads."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Callable

import requests
from requests.exceptions import RequestException
from requests_toolbelt.multipart.encoder import MultipartEncoder, MultipartEncoderMonitor

from imgurup.config import Config
from imgurup.uploaders.endpoint import Endpoint


class ImgurAPIError(RequestException):
    """Imgur answered with a non-success status.

    ``str()`` of the error is the server-provided message when the body
    was JSON, otherwise the bare HTTP status code.
    """

    def __init__(self, message: str, status_code: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.message: str = message
        self.status_code: int | None = status_code

    def __str__(self) -> str:
        return self.message


class MalformedResponseError(ImgurAPIError):
    """A success response was missing fields we rely on."""


def error_message_from_response(response: requests.Response) -> str:
    """Extract the human readable error from an Imgur response.

    Args:
        response: Failed response

    Returns:
        ``data.error.message`` (or ``data.error`` if it is a string) when the
        body is JSON, otherwise the status code as a string
    """
    try:
        payload = response.json()
    except ValueError:
        return str(response.status_code)

    data = payload.get("data") if isinstance(payload, dict) else None
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return str(response.status_code)


class ImgurUploader:
    """Handles Imgur API calls for image and album creation."""

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        """Initialize the uploader.

        Args:
            config: Runtime configuration carrying the client ID and API root
            session: Optional session, mainly for tests
        """
        self.config: Config = config
        self.api: Endpoint = Endpoint(config.api_root)
        self.timeout: float = config.timeout
        self.session: requests.Session = session or requests.Session()
        self.session.headers["Authorization"] = config.authorization

    def _make_request(
        self,
        method: str,
        endpoint: Endpoint,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Make an API request and return the ``data`` object of the response.

        Args:
            method: HTTP method
            endpoint: Endpoint to call
            data: Form fields or a MultipartEncoder(Monitor)
            headers: Additional headers

        Returns:
            The ``data`` object of the JSON response

        Raises:
            ImgurAPIError: If the API answered with an error status
            MalformedResponseError: If a success response is not the expected JSON
            requests.exceptions.RequestException: On transport failures
        """
        request_headers = dict(headers or {})

        # A MultipartEncoder(Monitor) carries its own boundary
        if hasattr(data, "content_type"):
            request_headers["Content-Type"] = data.content_type

        response = self.session.request(
            method,
            str(endpoint),
            data=data,
            headers=request_headers,
            timeout=self.timeout,
        )

        if not response.ok:
            raise ImgurAPIError(
                error_message_from_response(response),
                status_code=response.status_code,
                response=response,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Invalid JSON in response ({response.status_code})",
                status_code=response.status_code,
                response=response,
            ) from e

        result = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            raise MalformedResponseError(
                "Response has no data object",
                status_code=response.status_code,
                response=response,
            )
        return result

    def upload_image(
        self,
        image_path: Path,
        progress_callback: Callable[[int], None] | None = None,
    ) -> dict[str, Any]:
        """Upload one image file.

        Args:
            image_path: File to upload
            progress_callback: Called with the number of bytes sent so far

        Returns:
            The created image's ``data`` object
        """
        mime_type = mimetypes.guess_type(image_path.name)[0] or "application/octet-stream"

        with image_path.open("rb") as image_file:
            encoder = MultipartEncoder(
                fields={"image": (image_path.name, image_file, mime_type)}
            )
            if progress_callback:
                data: MultipartEncoder | MultipartEncoderMonitor = MultipartEncoderMonitor(
                    encoder, lambda monitor: progress_callback(monitor.bytes_read)
                )
            else:
                data = encoder
            result = self._make_request("POST", self.api / "upload", data=data)

        for key in ("id", "link", "deletehash"):
            if not result.get(key):
                raise MalformedResponseError(f"Upload response is missing '{key}'")
        return result

    def create_album(self, deletehashes: list[str], layout: str | None = None) -> dict[str, Any]:
        """Create an anonymous album from uploaded images.

        Args:
            deletehashes: Sanitized deletehashes of the images to include
            layout: Album layout; defaults to the configured one

        Returns:
            The created album's ``data`` object
        """
        fields = {
            "deletehashes": ",".join(deletehashes),
            "layout": layout or self.config.album_layout,
        }
        result = self._make_request("POST", self.api / "album", data=fields)

        for key in ("id", "deletehash"):
            if not result.get(key):
                raise MalformedResponseError(f"Album response is missing '{key}'")
        return result

    def test_connection(self) -> bool:
        """Check that the API accepts the configured client ID.

        Returns:
            True if the credits endpoint answered successfully
        """
        try:
            credits = self._make_request("GET", self.api / "credits")
        except RequestException:
            return False
        return "ClientRemaining" in credits or "UserRemaining" in credits
