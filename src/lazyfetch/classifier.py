"""Response classifier.

Reads the raw transport response, decodes its body according to the
``content-type`` header and decides whether the call succeeded.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable
from typing import Any, Callable

from . import errors
from .builder import RequestDescriptor
from .response import Response, fold_headers
from .schemas import FetchResponse, RequestOptions

logger = logging.getLogger(__name__)

MimeParams = dict[str, str]
Predicate = Callable[[str, MimeParams], bool]
Decoder = Callable[[FetchResponse], Awaitable[Any]]

JSON_TYPES = frozenset(("application/json", "application/scim+json"))

_DEPRECATION_LINK = re.compile(r'<([^<>]+)>; rel="deprecation"')


def parse_content_type(value: str | None) -> tuple[str, MimeParams]:
    """Split a content-type header into its mimetype and parameters.

    Returns:
        ``("", {})`` when the header is absent.
    """
    if not value:
        return "", {}
    mimetype, *raw_params = value.split(";")
    params: MimeParams = {}
    for raw in raw_params:
        key, sep, val = raw.partition("=")
        if sep:
            params[key.strip().lower()] = val.strip().strip('"')
    return mimetype.strip().lower(), params


def is_json(mimetype: str, params: MimeParams) -> bool:
    return mimetype in JSON_TYPES or mimetype.endswith("+json")


def is_text(mimetype: str, params: MimeParams) -> bool:
    return mimetype.startswith("text/") or params.get("charset", "").lower() == "utf-8"


async def read_json(raw: FetchResponse) -> Any:
    return await raw.json()


async def read_text(raw: FetchResponse) -> str:
    return await raw.text()


async def read_binary(raw: FetchResponse) -> bytes:
    return await raw.read()


# Ordered (predicate, decoder) table; the first match wins.
DECODERS: list[tuple[Predicate, Decoder]] = [
    (is_json, read_json),
    (is_text, read_text),
]


def register_decoder(predicate: Predicate, decoder: Decoder) -> None:
    """Add a decoder ahead of the built-in ones."""
    DECODERS.insert(0, (predicate, decoder))


def select_decoder(content_type: str | None) -> tuple[str, Decoder]:
    """Pick the decoder for a content type. Unknown types read raw bytes."""
    mimetype, params = parse_content_type(content_type)
    for predicate, decoder in DECODERS:
        if predicate(mimetype, params):
            return mimetype, decoder
    return mimetype, read_binary


async def decode_body(
    raw: FetchResponse, headers: dict[str, str], descriptor: RequestDescriptor
) -> Any:
    """Decode the body, turning parser failures into a RequestError.

    Raises:
        RequestError: If the body does not match its declared content type.
    """
    mimetype, decoder = select_decoder(headers.get("content-type"))
    try:
        return await decoder(raw)
    except Exception as e:
        # Parsers raise many unrelated types (JSONDecodeError, UnicodeDecodeError...)
        response = Response(raw.status, raw.url, headers)
        raise errors.from_response(
            response,
            descriptor,
            message=f"Failed to parse response body as {mimetype or 'binary'}: {e}",
        ) from e


def warn_deprecation(
    headers: dict[str, str], descriptor: RequestDescriptor, log: logging.Logger
) -> None:
    """Log the deprecation notice announced by the response headers."""
    matches = _DEPRECATION_LINK.findall(headers.get("link", ""))
    notice = (
        f'"{descriptor.method} {descriptor.url}" is deprecated. '
        f"It is scheduled to be removed on {headers.get('sunset')}"
    )
    if matches:
        notice = f"{notice}. See {matches[-1]}"
    log.warning(notice)


async def classify(
    raw: FetchResponse,
    descriptor: RequestDescriptor,
    options: RequestOptions | None = None,
) -> Response:
    """Turn a raw transport response into a Response, or raise.

    Args:
        raw: Whatever the fetch implementation resolved to.
        descriptor: The request that produced it.
        options: The ``request`` sub-options (``log``,
            ``parse_success_response_body``).

    Returns:
        The normalized response for 2xx statuses (and for HEAD below 400).

    Raises:
        RequestError: For every other status and for undecodable bodies.
    """
    options = options or {}
    log = options.get("log") or logger

    status = int(raw.status)
    headers = fold_headers(raw.headers)
    status_text = getattr(raw, "status_text", "") or ""
    response = Response(status, raw.url, headers)

    if "deprecation" in headers:
        warn_deprecation(headers, descriptor, log)

    if status in (204, 205):
        return response

    if descriptor.method == "HEAD":
        if status < 400:
            return response
        raise errors.from_response(response, descriptor, status_text)

    if 200 <= status < 300 and not options.get("parse_success_response_body", True):
        response.data = raw
        return response

    response.data = await decode_body(raw, headers, descriptor)

    if status == 304:
        raise errors.from_response(response, descriptor, message="Not modified")

    if not 200 <= status < 300:
        raise errors.from_response(response, descriptor, status_text)

    return response
