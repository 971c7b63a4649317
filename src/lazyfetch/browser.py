"""Fetch implementation that runs inside a Chromium page.

The request is executed by the page's own Fetch API through DrissionPage, so
it carries the browser profile's cookies and session state (Browser
Piggybacking).
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urlparse

from DrissionPage import ChromiumOptions, ChromiumPage

from .classifier import parse_content_type
from .exceptions import AbortError, BrowserFetchError, BrowserInitError
from .schemas import FetchInit
from .transport import race_signal

logger = logging.getLogger(__name__)

# Type alias for page factory
PageFactory = Callable[[ChromiumOptions], ChromiumPage]

REQUIRED_KEYS = frozenset(("status", "statusText", "url", "headers", "body"))

_FETCH_SCRIPT = """
    (async () => {{
        const controller = new AbortController();
        const timeoutMs = {timeout_ms};
        const timeoutId = timeoutMs > 0 ? setTimeout(() => controller.abort(), timeoutMs) : null;
        try {{
            const opts = {options};
            opts.signal = controller.signal;

            const res = await fetch({url}, opts);
            const buf = new Uint8Array(await res.arrayBuffer());
            if (timeoutId !== null) clearTimeout(timeoutId);

            let bin = "";
            for (let i = 0; i < buf.length; i += 0x8000) {{
                bin += String.fromCharCode.apply(null, buf.subarray(i, i + 0x8000));
            }}
            const headers = {{}};
            res.headers.forEach((v, k) => headers[k] = v);

            return {{
                status: res.status,
                statusText: res.statusText,
                url: res.url,
                headers: headers,
                body: btoa(bin),
                redirected: res.redirected
            }};
        }} catch (e) {{
            return {{ error: e.toString(), name: e.name || "" }};
        }}
    }})()
"""


class BrowserFetchResponse:
    """Fetch-style response built from the values returned by the page."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.status: int = data["status"]
        self.status_text: str = data.get("statusText", "")
        self.url: str = data.get("url", "")
        self.headers: dict[str, str] = dict(data.get("headers") or {})
        self.redirected: bool = bool(data.get("redirected", False))
        self._content = base64.b64decode(data.get("body") or "")

    async def read(self) -> bytes:
        return self._content

    async def text(self) -> str:
        _, params = parse_content_type(self.headers.get("content-type"))
        return self._content.decode(params.get("charset", "utf-8"))

    async def json(self) -> Any:
        return json.loads(await self.text())


class BrowserFetch:
    """Fetch implementation powered by a Chromium browser backend.

    Attributes:
        profile_dir: Path to the browser profile directory.
        headless: Whether the browser runs in headless mode.
        timeout: In-page abort timeout in seconds, or None for no timeout.
    """

    def __init__(
        self,
        profile_dir: str | Path = "./browser_data",
        headless: bool = True,
        auto_navigate_for_cors: bool = False,
        timeout: float | None = None,
        page_factory: PageFactory | None = None,
    ) -> None:
        """Initialize the browser fetch.

        The browser itself is started on first use.

        Args:
            profile_dir: Directory path for the user data profile.
            headless: Run browser in headless mode.
            auto_navigate_for_cors: Auto navigate to target origin to fix CORS.
            timeout: Abort the in-page fetch after this many seconds.
            page_factory: Optional callable to create browser pages (for testing/DI).
        """
        self.profile_dir = Path(profile_dir)
        self.headless = headless
        self.auto_navigate_for_cors = auto_navigate_for_cors
        self.timeout = timeout
        self._page_factory = page_factory
        self._page: ChromiumPage | None = None
        # DrissionPage pages are not safe to drive from several threads at once.
        self._lock = threading.Lock()

    @property
    def page(self) -> ChromiumPage:
        """Return the active page, starting the browser if needed.

        Raises:
            BrowserInitError: If the browser fails to start.
        """
        if self._page is None:
            self._page = self._init_browser()
        return self._page

    def _init_browser(self) -> ChromiumPage:
        try:
            options = ChromiumOptions()
            options.set_user_data_path(str(self.profile_dir))
            options.headless(self.headless)

            if self._page_factory:
                return self._page_factory(options)
            return ChromiumPage(options)
        except Exception as e:
            # Catching generic Exception because DrissionPage can raise various errors
            raise BrowserInitError(f"Failed to initialize browser: {e}") from e

    def _ensure_cors_context(self, url: str) -> None:
        """Navigate the page to the target origin so cookies and CORS apply."""
        if not self.auto_navigate_for_cors:
            return

        target = urlparse(url)
        current = urlparse(self.page.url or "")
        if not target.netloc or target.netloc == current.netloc:
            return

        logger.debug("Navigating to %s://%s for CORS context", target.scheme, target.netloc)
        self.page.get(f"{target.scheme or 'https'}://{target.netloc}")

    def _exec_fetch(self, url: str, init: FetchInit) -> BrowserFetchResponse:
        body = init.get("body")
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        options = {
            "method": init.get("method", "GET"),
            "headers": init.get("headers") or {},
            "redirect": init.get("redirect", "follow"),
        }
        if body is not None:
            options["body"] = body

        timeout_ms = int(self.timeout * 1000) if self.timeout else 0
        # Serialize arguments to pass safely to JS
        js_script = _FETCH_SCRIPT.format(
            url=json.dumps(url), options=json.dumps(options), timeout_ms=timeout_ms
        )

        with self._lock:
            self._ensure_cors_context(url)
            # Use run_cdp to specifically leverage 'awaitPromise=True'.
            cdp_res = self.page.run_cdp(
                "Runtime.evaluate",
                expression=js_script,
                awaitPromise=True,
                returnByValue=True,
                includeCommandLineAPI=False,
            )

        if "exceptionDetails" in cdp_res:
            raise BrowserFetchError("JS execution error", cause=str(cdp_res["exceptionDetails"]))

        result_value = cdp_res.get("result", {}).get("value")
        if not isinstance(result_value, dict):
            raise BrowserFetchError(f"Unexpected JS result type: {type(result_value)}")

        if "error" in result_value:
            if result_value.get("name") == "AbortError":
                raise AbortError(f"Request timed out after {self.timeout} seconds")
            raise BrowserFetchError("fetch failed", cause=result_value["error"])

        if not REQUIRED_KEYS.issubset(result_value.keys()):
            raise BrowserFetchError(
                f"Invalid fetch response structure. Keys found: {list(result_value.keys())}"
            )

        return BrowserFetchResponse(result_value)

    async def __call__(self, url: str, init: FetchInit) -> BrowserFetchResponse:
        signal = init.get("signal")
        if signal is not None and signal.is_set():
            raise AbortError()

        call = asyncio.to_thread(self._exec_fetch, url, init)
        if signal is None:
            return await call
        return await race_signal(call, signal)

    def close(self) -> None:
        """Close the browser instance."""
        if self._page:
            self._page.quit()
            self._page = None
