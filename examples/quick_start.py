"""Quick start example for lazyfetch.

This script demonstrates the basic usage of the Client class: GET/POST
requests through the default httpx transport and the normalized errors.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure src is in python path for local testing
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lazyfetch import Client, RequestError, setup_logging

logger = logging.getLogger("lazyfetch.quick_start")


async def main() -> None:
    """Run the demonstration."""
    # Enable the rich logger, including per-call dispatch timings
    setup_logging(level=logging.INFO, trace_dispatch=True)

    client = Client(base_url="https://httpbin.org")

    # 1. Simple GET Request
    logger.info("1. Testing GET /get...")
    response = await client.get("/get", show_env=1)
    logger.info(f"Status: {response.status}")
    if isinstance(response.data, dict):
        logger.info(f"   Origin: {response.data.get('origin')}")

    # 2. POST Request with JSON
    logger.info("2. Testing POST /post...")
    response = await client.post("/post", mission="lazy", philosophy="virtue")
    logger.debug(f"   Full Response: {json.dumps(response.data, indent=2)}")

    # 3. HTTP failure: a 418 arrives as a RequestError with the real status
    logger.info("3. Testing GET /status/418...")
    try:
        await client.get("/status/418")
    except RequestError as e:
        logger.info(f"HTTP {e.status}: {e.message}")

    # 4. Transport failure: nothing listens on port 8, so no response arrives
    logger.info("4. Testing an unreachable host...")
    try:
        await client.get("https://127.0.0.1:8/")
    except RequestError as e:
        logger.info(f"HTTP {e.status}: {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
