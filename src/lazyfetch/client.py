"""Main client module for lazyfetch."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, Callable

from . import errors
from .builder import build
from .classifier import classify
from .endpoint import Endpoint, resolve
from .exceptions import FetchNotSetError
from .response import Response
from .schemas import Fetch, Headers, RequestOptions
from .transport import dispatch, resolve_fetch


# Type alias for endpoint resolvers
Resolver = Callable[[str, dict[str, Any], str | None], Endpoint]


async def execute(endpoint: Endpoint, fetch: Fetch, options: RequestOptions) -> Response:
    """Perform one call for a resolved endpoint.

    Args:
        endpoint: Method, URL, headers and body to send.
        fetch: The fetch implementation to use.
        options: The ``request`` sub-options.

    Returns:
        The normalized response.

    Raises:
        RequestError: On any transport failure or non-2xx response.
        FetchNotSetError: When the transport itself finds no fetch to delegate to.
    """
    descriptor = build(endpoint, options)
    try:
        raw = await dispatch(descriptor, fetch, options.get("log"))
    except FetchNotSetError:
        raise
    except Exception as e:
        # Transports raise whatever their stack raises (httpx, OSError, ...).
        raise errors.from_exception(e, descriptor) from e
    return await classify(raw, descriptor, options)


class Client:
    """Executes declarative endpoint descriptions as HTTP calls.

    Every call resolves to a :class:`Response` or raises a
    :class:`~lazyfetch.exceptions.RequestError`, whichever fetch
    implementation performed it.

    Attributes:
        base_url: The base URL for relative routes.
        headers: Default headers sent with every call.
    """

    def __init__(
        self,
        base_url: str | None = None,
        headers: Headers | None = None,
        request: RequestOptions | None = None,
        resolver: Resolver = resolve,
    ) -> None:
        """Initialize the Client.

        Args:
            base_url: The base URL to prefix to relative URLs.
            headers: Default request headers.
            request: Default ``request`` sub-options (fetch, redirect, hook...).
            resolver: Turns a route and its options into an Endpoint.
        """
        self.base_url = base_url.rstrip("/") if base_url else None
        self.headers: Headers = {k.lower(): v for k, v in (headers or {}).items()}
        self._request: RequestOptions = dict(request or {})
        self._resolver = resolver

    def defaults(
        self,
        base_url: str | None = None,
        headers: Headers | None = None,
        request: RequestOptions | None = None,
    ) -> Client:
        """Return a new client with these defaults merged over the current ones.

        This client is left unchanged.
        """
        merged_headers = dict(self.headers)
        merged_headers.update({k.lower(): v for k, v in (headers or {}).items()})
        merged_request = {**self._request, **(request or {})}
        return Client(
            base_url=base_url or self.base_url,
            headers=merged_headers,
            request=merged_request,
            resolver=self._resolver,
        )

    def endpoint(self, route: str, **options: Any) -> Endpoint:
        """Resolve a route with this client's defaults, without sending it."""
        options.pop("request", None)
        options["headers"] = {**self.headers, **(options.get("headers") or {})}
        return self._resolver(route, options, self.base_url)

    def request(self, route: str, **options: Any) -> Awaitable[Response]:
        """Send a request.

        The transport is resolved before anything else, so a missing fetch
        implementation is reported right here rather than when awaiting.

        Args:
            route: ``"METHOD url"`` or a bare URL, e.g. ``"GET /orgs/{org}"``.
            **options: URL and body parameters, ``headers``, ``data``,
                ``base_url`` and the ``request`` sub-options.

        Returns:
            An awaitable resolving to the Response.

        Raises:
            FetchNotSetError: If no fetch implementation is available.
        """
        request_options: RequestOptions = {
            **self._request,
            **(options.get("request") or {}),
        }
        fetch = resolve_fetch(request_options)
        endpoint = self.endpoint(route, **options)

        async def send(target: Endpoint) -> Response:
            return await execute(target, fetch, request_options)

        hook = request_options.get("hook")
        if hook is not None:
            return hook(send, endpoint)
        return send(endpoint)

    def get(self, url: str, **kwargs: Any) -> Awaitable[Response]:
        """Send a GET request; extra parameters become the query string."""
        return self.request(f"GET {url}", **kwargs)

    def head(self, url: str, **kwargs: Any) -> Awaitable[Response]:
        """Send a HEAD request."""
        return self.request(f"HEAD {url}", **kwargs)

    def post(self, url: str, **kwargs: Any) -> Awaitable[Response]:
        """Send a POST request; extra parameters become the JSON body."""
        return self.request(f"POST {url}", **kwargs)

    def put(self, url: str, **kwargs: Any) -> Awaitable[Response]:
        return self.request(f"PUT {url}", **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Awaitable[Response]:
        return self.request(f"PATCH {url}", **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Awaitable[Response]:
        return self.request(f"DELETE {url}", **kwargs)
