"""Custom exceptions for lazyfetch module."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .builder import RequestDescriptor
    from .response import Response

FETCH_NOT_SET_MESSAGE = (
    "fetch is not set. Please pass a fetch implementation as "
    'Client(request={"fetch": fetch}). '
    "Learn more at https://github.com/octokit/octokit.js/#fetch-missing"
)


class LazyfetchError(Exception):
    """Base exception class for all lazyfetch exceptions.

    All custom exceptions in this library should inherit from this class.
    This allows users to catch all library-specific errors with a single except block.
    """


class FetchNotSetError(LazyfetchError):
    """Raised when no transport function can be resolved for a call.

    This is a configuration problem, not a request failure: it is raised
    before anything is sent and carries no HTTP status.
    """

    status = None

    def __init__(self, message: str = FETCH_NOT_SET_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class RequestError(LazyfetchError):
    """The single error shape surfaced for a failed request.

    Raised both when the transport fails before any response arrives
    (status 500) and when a response arrives with a non-2xx status.

    Attributes:
        status: HTTP status of the response, or 500 for transport failures.
        message: Human-readable description of the failure.
        request: The (redacted) descriptor that was attempted.
        response: The normalized response, if one was received.
    """

    def __init__(
        self,
        message: str,
        status: int,
        request: RequestDescriptor,
        response: Response | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.request = request
        self.response = response

    def __repr__(self) -> str:
        return f"RequestError(status={self.status!r}, message={self.message!r})"


class AbortError(LazyfetchError):
    """Raised by the shipped transports when the call's signal is set."""

    def __init__(self, message: str = "This operation was aborted") -> None:
        super().__init__(message)


class BrowserInitError(LazyfetchError):
    """Raised when the browser behind BrowserFetch fails to start.

    Common causes include:
    - Missing browser executable
    - Port conflicts
    - Invalid profile directory permissions
    """


class BrowserFetchError(LazyfetchError):
    """Raised when the in-browser fetch call rejects.

    Attributes:
        cause: The error string reported by the browser, e.g.
            ``"TypeError: Failed to fetch"``.
    """

    def __init__(self, message: str, cause: str | None = None) -> None:
        super().__init__(message)
        self.cause = cause
