"""Imgur API access."""

from .endpoint import Endpoint
from .imgur import ImgurAPIError, ImgurUploader, MalformedResponseError
from .tokens import sanitize_token

__all__ = ["Endpoint", "ImgurAPIError", "ImgurUploader", "MalformedResponseError", "sanitize_token"]
