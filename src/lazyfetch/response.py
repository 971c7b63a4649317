"""Response class for lazyfetch."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def fold_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> dict[str, str]:
    """Return response headers as a plain dict with lowercase keys.

    Accepts a mapping, anything with an ``items()`` method (``httpx.Headers``)
    or an iterable of key/value pairs.
    """
    if headers is None:
        return {}
    pairs = headers.items() if hasattr(headers, "items") else headers
    # Browser fetch API normalizes header keys to lowercase.
    # We ensure this consistency here for the Python dict.
    return {str(k).lower(): str(v) for k, v in pairs}


class Response:
    """The normalized result of a successful call.

    Attributes:
        status: Integer Code of responded HTTP Status, e.g. 200 or 204.
        url: Final URL location of Response, after any transport redirects.
        headers: Dictionary of Response Headers with lowercase keys.
        data: Deserialized body; its type depends on the content type.
    """

    def __init__(
        self,
        status: int,
        url: str,
        headers: dict[str, str],
        data: Any = None,
    ) -> None:
        self.status = status
        self.url = url
        self.headers = headers
        self.data = data

    @property
    def ok(self) -> bool:
        """Returns True if :attr:`status` is in the 200-299 range, False if not."""
        try:
            return 200 <= self.status < 300
        except (ValueError, TypeError):
            return False

    def __repr__(self) -> str:
        return f"<Response [{self.status}] {self.url}>"
