"""Default endpoint resolver.

Turns a route such as ``"GET /repos/{owner}/{repo}"`` plus a parameter bag
into a concrete method, URL, headers and body. The request core only consumes
the resulting :class:`Endpoint`; any other resolver producing one can be used
in its place.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import quote, urlencode, urljoin

from .schemas import Headers

VERSION = "1.0.0"

DEFAULT_HEADERS: Headers = {
    "accept": "application/json",
    "user-agent": f"lazyfetch/{VERSION}",
}

# Option keys that configure the call and are never sent as parameters.
RESERVED_KEYS = frozenset(("headers", "base_url", "request", "method", "url", "data"))

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


@dataclass(frozen=True)
class Endpoint:
    """A resolved endpoint, ready to be turned into a request descriptor.

    Attributes:
        method: HTTP method.
        url: Absolute URL, or relative when no base URL was configured.
        headers: Request headers.
        body: Request payload, serialized or not.
    """

    method: str
    url: str
    headers: Headers = field(default_factory=dict)
    body: Any = None

    def with_headers(self, **headers: str) -> Endpoint:
        """Return a copy of this endpoint with extra headers merged in."""
        merged = dict(self.headers)
        merged.update({k.lower(): v for k, v in headers.items()})
        return replace(self, headers=merged)


def parse_route(route: str) -> tuple[str, str]:
    """Split ``"METHOD url"`` into its parts; a bare URL defaults to GET."""
    parts = route.strip().split(" ", 1)
    if len(parts) == 2:
        return parts[0].upper(), parts[1].strip()
    return "GET", parts[0]


def join_url(base_url: str | None, url: str) -> str:
    """Resolve a partial URL against the base URL.

    Args:
        base_url: The base URL, or None.
        url: The path or full URL.

    Returns:
        Absolute URL string when possible, the input untouched otherwise.
    """
    if url.startswith(("http://", "https://")):
        return url

    if base_url:
        return urljoin(base_url.rstrip("/") + "/", url.lstrip("/"))

    return url


def resolve(
    route: str, options: dict[str, Any], base_url: str | None = None
) -> Endpoint:
    """Resolve a route and its options into an :class:`Endpoint`.

    Args:
        route: ``"METHOD url"`` or a bare URL.
        options: Parameters plus the reserved keys (``headers``, ``data``...).
        base_url: Prefix for relative URLs. ``options["base_url"]`` wins.

    Returns:
        The resolved endpoint.
    """
    method, url = parse_route(route)
    method = options.get("method", method).upper()
    url = options.get("url", url)

    params = {k: v for k, v in options.items() if k not in RESERVED_KEYS}

    def fill(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        return quote(str(params.pop(name)), safe="")

    url = _PLACEHOLDER.sub(fill, url)
    url = join_url(options.get("base_url", base_url), url)

    headers = dict(DEFAULT_HEADERS)
    headers.update({k.lower(): str(v) for k, v in (options.get("headers") or {}).items()})

    body: Any = None
    if "data" in options:
        body = options["data"]
    elif params and method not in ("GET", "HEAD"):
        body = params
        params = {}

    if params and method in ("GET", "HEAD"):
        query_string = urlencode(params, doseq=True)
        joiner = "&" if "?" in url else "?"
        url = f"{url}{joiner}{query_string}"

    if isinstance(body, (dict, list)) and "content-type" not in headers:
        headers["content-type"] = "application/json; charset=utf-8"

    return Endpoint(method=method, url=url, headers=headers, body=body)
