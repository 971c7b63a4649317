"""Transport adapter.

Resolves which fetch implementation performs a call and invokes it. The
ambient default lives in a context variable so it is looked up at call time
and can be swapped per task or per test without touching global state.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import httpx

from .builder import Redirect, RequestDescriptor
from .errors import redact_url
from .exceptions import AbortError, FetchNotSetError, LazyfetchError
from .schemas import Fetch, FetchInit, FetchResponse, RequestOptions

logger = logging.getLogger(__name__)

REDIRECT_MODES = frozenset(mode.value for mode in Redirect)


class HttpxFetchResponse:
    """Fetch-style view of an ``httpx.Response``."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.status = response.status_code
        self.status_text = response.reason_phrase
        self.url = str(response.url)
        self.headers = response.headers
        self.redirected = bool(response.history)

    async def json(self) -> Any:
        return self._response.json()

    async def text(self) -> str:
        return self._response.text

    async def read(self) -> bytes:
        return self._response.content


class HttpxFetch:
    """Default fetch implementation backed by ``httpx.AsyncClient``.

    A new client is opened for every call, so concurrent calls share no
    connection state.

    Attributes:
        timeout: Passed to the client. None disables timeouts; bound latency
            with the ``signal`` option instead.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the fetch implementation.

        Args:
            transport: Optional httpx transport (for testing/DI).
            timeout: Client timeout in seconds, or None.
        """
        self._transport = transport
        self.timeout = timeout

    async def __call__(self, url: str, init: FetchInit) -> HttpxFetchResponse:
        signal = init.get("signal")
        redirect = init.get("redirect", "follow")
        if redirect not in REDIRECT_MODES:
            raise LazyfetchError(f"invalid redirect mode: {redirect!r}")
        if signal is not None and signal.is_set():
            raise AbortError()

        async with httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=redirect == "follow",
            timeout=self.timeout,
        ) as client:
            send = client.request(
                init.get("method", "GET"),
                url,
                headers=init.get("headers"),
                content=init.get("body"),
            )
            if signal is None:
                response = await send
            else:
                response = await race_signal(send, signal)

        if redirect == "error" and response.is_redirect:
            raise LazyfetchError(f"unexpected redirect to {response.headers.get('location')}")

        return HttpxFetchResponse(response)


async def race_signal(call: Any, signal: asyncio.Event) -> Any:
    """Await ``call`` unless ``signal`` is set first.

    Raises:
        AbortError: If the signal fires before the call completes.
    """
    task = asyncio.ensure_future(call)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
    if task in done:
        return task.result()
    raise AbortError()


default_fetch: ContextVar[Fetch | None] = ContextVar("default_fetch", default=HttpxFetch())


@contextmanager
def use_fetch(fetch: Fetch | None) -> Iterator[None]:
    """Replace the ambient default fetch for the enclosed block.

    Pass None to model an environment without any transport.
    """
    token = default_fetch.set(fetch)
    try:
        yield
    finally:
        default_fetch.reset(token)


def resolve_fetch(options: RequestOptions | None = None) -> Fetch:
    """Return the fetch implementation for a call.

    An explicit ``options["fetch"]`` wins over the ambient default.

    Raises:
        FetchNotSetError: If neither is available.
    """
    fetch = (options or {}).get("fetch") or default_fetch.get()
    if fetch is None:
        raise FetchNotSetError()
    return fetch


async def dispatch(
    descriptor: RequestDescriptor, fetch: Fetch, log: logging.Logger | None = None
) -> FetchResponse:
    """Send the descriptor through the fetch implementation, once.

    Exceptions raised by the transport propagate unchanged.
    """
    log = log or logger
    url = redact_url(descriptor.url)
    log.debug("Dispatching %s %s", descriptor.method, url)
    start = time.perf_counter()
    try:
        return await fetch(descriptor.url, descriptor.to_fetch_init())
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        log.debug("%s %s settled in %.1f ms", descriptor.method, url, elapsed_ms)
