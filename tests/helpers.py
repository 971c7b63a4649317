"""Stub transports shared by the test modules."""

import json
from typing import Any


class StubResponse:
    """A minimal fetch response; body readers are built from ``body``."""

    def __init__(
        self,
        status: int = 200,
        headers: dict[str, str] | None = None,
        body: Any = b"",
        url: str = "https://api.example.com/",
        status_text: str = "",
        data: Any = None,
    ):
        self.status = status
        self.headers = headers or {}
        self.url = url
        self.status_text = status_text
        self._body = body
        self._data = data

    async def read(self) -> bytes:
        if isinstance(self._body, bytes):
            return self._body
        return str(self._body).encode("utf-8")

    async def text(self) -> str:
        return (await self.read()).decode("utf-8")

    async def json(self) -> Any:
        if self._data is not None:
            return self._data
        if isinstance(self._body, (bytes, str)):
            return json.loads(self._body)
        return self._body


class RecordingFetch:
    """Fetch stub that records its calls and returns (or raises) a fixed outcome."""

    def __init__(self, outcome: Any):
        self.outcome = outcome
        self.calls: list[tuple[str, dict]] = []

    async def __call__(self, url: str, init: dict) -> Any:
        self.calls.append((url, init))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


def json_response(data: Any, status: int = 200, **kwargs: Any) -> StubResponse:
    return StubResponse(
        status=status,
        headers={"Content-Type": "application/json; charset=utf-8"},
        body=json.dumps(data).encode("utf-8"),
        **kwargs,
    )
