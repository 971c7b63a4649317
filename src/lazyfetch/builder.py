"""Request builder: turns a resolved endpoint into a transport-ready descriptor."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .endpoint import Endpoint
from .schemas import Body, FetchInit, RequestOptions


class Redirect(str, Enum):
    """Redirect policy handed to the transport."""

    FOLLOW = "follow"
    MANUAL = "manual"
    ERROR = "error"


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything a transport needs to perform one call.

    Attributes:
        method: Uppercase HTTP method.
        url: Target URL.
        headers: Read-only mapping with lowercase header names.
        body: Serialized payload, if any.
        signal: Cancellation event forwarded to the transport.
        redirect: Redirect policy. Values outside :class:`Redirect` are kept
            as given and left for the transport to reject.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: Body | None = None
    signal: asyncio.Event | None = None
    redirect: Redirect | str = Redirect.FOLLOW

    def to_fetch_init(self) -> FetchInit:
        """Return the options dict passed as the second fetch argument."""
        redirect = self.redirect
        if isinstance(redirect, Redirect):
            redirect = redirect.value
        return {
            "method": self.method,
            "headers": dict(self.headers),
            "body": self.body,
            "redirect": redirect,
            "signal": self.signal,
        }


def serialize_body(body: Any) -> Body | None:
    """JSON-encode plain mappings and lists; pass everything else through."""
    if isinstance(body, (dict, list)):
        return json.dumps(body)
    return body


def parse_redirect(value: Any) -> Redirect | str:
    """Map a known policy string onto :class:`Redirect`; keep anything else."""
    try:
        return Redirect(value)
    except ValueError:
        return value


def build(endpoint: Endpoint, options: RequestOptions | None = None) -> RequestDescriptor:
    """Assemble the descriptor for a single call.

    Args:
        endpoint: Method, URL, headers and body from the resolver.
        options: The ``request`` sub-options. Only ``redirect`` and ``signal``
            are read here; the mapping is not modified.

    Returns:
        A new immutable RequestDescriptor.
    """
    options = options or {}
    headers = {name.lower(): str(value) for name, value in endpoint.headers.items()}

    return RequestDescriptor(
        method=endpoint.method.upper(),
        url=endpoint.url,
        headers=MappingProxyType(headers),
        body=serialize_body(endpoint.body),
        signal=options.get("signal"),
        redirect=parse_redirect(options.get("redirect", Redirect.FOLLOW)),
    )
