"""Example of sending requests through a logged-in browser profile.

The BrowserFetch transport runs each call inside Chromium, so cookies from a
previous manual login in the same profile apply. A request hook adds an API
token on top, the way an authentication strategy would.
"""

import asyncio
import logging
import sys

from rich.logging import RichHandler

# Make sure we can import lazyfetch from src if running from repo root
sys.path.append("src")

from lazyfetch import Client, RequestError
from lazyfetch.browser import BrowserFetch

# Configure logging with RichHandler
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="%H:%M:%S",
    handlers=[RichHandler(rich_tracebacks=True, markup=True)],
)
logger = logging.getLogger("auth_example")


async def token_hook(send, endpoint):
    """Attach a token header before the call is built."""
    return await send(endpoint.with_headers(authorization="token example-token"))


async def main() -> None:
    """Run the authenticated fetch example."""
    base_url = "https://the-internet.herokuapp.com"

    # We use a persistent profile so the login state is saved for future runs
    # auto_navigate_for_cors=True ensures we are on the right domain before fetching
    browser = BrowserFetch(
        profile_dir="./browser_data/auth_example_profile",
        headless=True,
        auto_navigate_for_cors=True,
        timeout=30,
    )
    client = Client(base_url=base_url, request={"fetch": browser, "hook": token_hook})

    try:
        # The /secure endpoint redirects to /login if not authenticated
        response = await client.get("/secure")
        if "Secure Area" in str(response.data):
            logger.info("Already authenticated! Access granted.")
        else:
            logger.info("Access denied. Ended up at: %s", response.url)
    except RequestError as e:
        logger.error("Request failed with HTTP %s: %s", e.status, e.message)
    finally:
        browser.close()


if __name__ == "__main__":
    asyncio.run(main())
