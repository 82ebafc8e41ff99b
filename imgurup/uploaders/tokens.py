"""Deletion token sanitization."""

from __future__ import annotations

import string

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits)


def sanitize_token(token: str) -> str:
    """Strip everything but ASCII letters and digits from a remote token.

    Deletehashes end up inside generated shell commands and URL path
    segments, so only ``[0-9A-Za-z]`` is allowed through.

    Args:
        token: Opaque token as returned by the API

    Returns:
        The token with every other character removed
    """
    return "".join(char for char in token if char in _TOKEN_CHARS)
