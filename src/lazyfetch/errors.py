"""Error normalizer.

Every failure of a call ends up here and leaves as a :class:`RequestError`:
transport exceptions raised before any response arrived, and responses whose
status is outside the 2xx range.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from .builder import RequestDescriptor
from .exceptions import RequestError
from .response import Response

logger = logging.getLogger(__name__)

# Status reported when the request never produced an HTTP response.
TRANSPORT_FAILURE_STATUS = 500

_AUTH_CREDENTIALS = re.compile(r"(?<! ) .*$")
_SECRET_PARAMS = re.compile(r"\b(client_secret|access_token)=[^&#]+")
_COMPACT = (",", ":")


def _cause_of(error: Any) -> Any:
    """Return the nested cause of an error-like value, if any.

    An explicit ``cause`` attribute wins over Python's ``__cause__`` chain.
    """
    cause = getattr(error, "cause", None)
    if cause is not None:
        return cause
    return getattr(error, "__cause__", None)


def _own_message(error: Any) -> str:
    if isinstance(error, str):
        return error
    message = getattr(error, "message", None)
    if isinstance(message, str):
        return message
    return str(error)


def cause_message(error: Any) -> str:
    """Return the most informative message of an error's cause chain.

    A string cause is the message itself; an error-like cause contributes its
    ``message`` (or ``str()``). The deepest non-empty message wins, so generic
    wrappers such as ``"fetch failed"`` give way to the underlying reason.

    Args:
        error: An exception, an error-like object or a string.

    Returns:
        The message, or ``"Unknown Error"`` when the chain carries none.
    """
    message = ""
    seen: set[int] = set()
    current = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = _own_message(current)
        if text:
            message = text
        if isinstance(current, str):
            break
        current = _cause_of(current)
    return message or "Unknown Error"


def to_error_message(data: Any, fallback: str = "") -> str:
    """Derive an error message from a decoded error body.

    Args:
        data: The decoded response body.
        fallback: Used when the body carries nothing readable (status text).

    Returns:
        The message.
    """
    if isinstance(data, str) and data:
        return data
    if isinstance(data, dict):
        if "message" not in data:
            return f"Unknown error: {json.dumps(data, separators=_COMPACT)}"
        message = str(data["message"])
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            details = ", ".join(json.dumps(e, separators=_COMPACT) for e in errors)
            message = f"{message}: {details}"
        if "documentation_url" in data:
            message = f"{message} - {data['documentation_url']}"
        return message
    if isinstance(data, list) and data:
        return f"Unknown error: {json.dumps(data, separators=_COMPACT)}"
    return fallback or "Unknown error"


def redact_url(url: str) -> str:
    """Mask the ``client_secret`` and ``access_token`` query values."""
    return _SECRET_PARAMS.sub(r"\1=[REDACTED]", url)


def redact(descriptor: RequestDescriptor) -> RequestDescriptor:
    """Return a copy of the descriptor safe to attach to an error.

    The ``authorization`` header keeps only its scheme and the
    ``client_secret`` / ``access_token`` query values are masked.
    """
    headers = dict(descriptor.headers)
    if "authorization" in headers:
        headers["authorization"] = _AUTH_CREDENTIALS.sub(
            " [REDACTED]", headers["authorization"]
        )
    return replace(
        descriptor, url=redact_url(descriptor.url), headers=MappingProxyType(headers)
    )


def from_response(
    response: Response,
    descriptor: RequestDescriptor,
    status_text: str = "",
    message: str | None = None,
) -> RequestError:
    """Build the error for a response whose status is outside [200, 300).

    Args:
        response: The normalized response, with its decoded body as ``data``.
        descriptor: The request that was sent.
        status_text: Reason phrase reported by the transport.
        message: Fixed message; derived from the body when omitted.

    Returns:
        The error to raise.
    """
    if message is None:
        message = to_error_message(response.data, status_text)
    return RequestError(message, response.status, redact(descriptor), response)


def from_exception(error: BaseException, descriptor: RequestDescriptor) -> RequestError:
    """Build the error for a transport failure that produced no response.

    Args:
        error: Whatever the transport raised.
        descriptor: The request that was attempted.

    Returns:
        The error to raise; chain it to ``error`` with ``raise ... from``.
    """
    message = cause_message(error)
    request = redact(descriptor)
    logger.debug(
        "%s %s failed before a response arrived: %s", request.method, request.url, message
    )
    return RequestError(message, TRANSPORT_FAILURE_STATUS, request)
