"""Type definitions for lazyfetch."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypedDict

if TYPE_CHECKING:
    import logging

    from .endpoint import Endpoint
    from .response import Response

# JSON Type Definition
JSONValue = str | int | float | bool | None | dict[str, "JSONValue"] | list["JSONValue"]
JSONDict = dict[str, JSONValue]
JSONList = list[JSONValue]

# Other common types
QueryParams = dict[str, str | int | float | bool]
Headers = dict[str, str]
Body = str | bytes


class FetchInit(TypedDict, total=False):
    """Options passed to a fetch implementation.

    This maps to the RequestInit object in the Fetch API.
    """

    method: str
    headers: Headers
    body: Body | None
    redirect: str
    signal: asyncio.Event | None


class FetchResponse(Protocol):
    """The response-like object a fetch implementation resolves to.

    Only ``status``, ``url`` and ``headers`` are required up front; body
    readers are looked up when the content type calls for them.
    """

    status: int
    url: str
    headers: Mapping[str, str] | Iterable[tuple[str, str]]

    def json(self) -> Awaitable[Any]: ...

    def text(self) -> Awaitable[str]: ...

    def read(self) -> Awaitable[bytes]: ...


class Fetch(Protocol):
    """A fetch implementation: ``await fetch(url, init)``."""

    def __call__(self, url: str, init: FetchInit) -> Awaitable[FetchResponse]: ...


Send = Callable[["Endpoint"], Awaitable["Response"]]
Hook = Callable[[Send, "Endpoint"], Awaitable["Response"]]


class RequestOptions(TypedDict, total=False):
    """Options understood by the request core (the ``request`` sub-options).

    Keys not listed here are ignored by the core.
    """

    fetch: Fetch | None
    redirect: str
    signal: asyncio.Event | None
    hook: Hook
    log: logging.Logger
    parse_success_response_body: bool
