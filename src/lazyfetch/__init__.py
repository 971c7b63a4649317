import logging

from .browser import BrowserFetch
from .builder import Redirect, RequestDescriptor
from .client import Client
from .endpoint import VERSION, Endpoint
from .exceptions import (
    AbortError,
    FetchNotSetError,
    LazyfetchError,
    RequestError,
)
from .logger import setup_logging
from .response import Response
from .transport import HttpxFetch, default_fetch, use_fetch

__version__ = VERSION

# Add NullHandler to prevent logging warnings if no handler is configured by the user.
logging.getLogger(__name__).addHandler(logging.NullHandler())

request = Client().request

__all__ = [
    "AbortError",
    "BrowserFetch",
    "Client",
    "Endpoint",
    "FetchNotSetError",
    "HttpxFetch",
    "LazyfetchError",
    "Redirect",
    "RequestDescriptor",
    "RequestError",
    "Response",
    "default_fetch",
    "request",
    "setup_logging",
    "use_fetch",
]
