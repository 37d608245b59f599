# Resolvers answering check queries against a live browser or HTTP response

from .playwright_browser import PlaywrightBrowserDriver, to_selector
from .responses import PlaywrightAPIResponse, ResponseSnapshot

__all__ = [
    "PlaywrightBrowserDriver",
    "PlaywrightAPIResponse",
    "ResponseSnapshot",
    "to_selector",
]
