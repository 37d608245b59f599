"""
HTTP response resolvers.

``ResponseSnapshot`` holds a response that has already been read, which is
what the response checks operate on. ``PlaywrightAPIResponse`` adapts a
``playwright.sync_api.APIResponse`` from ``page.request`` or
``playwright.request.new_context()``.
"""

import json
from typing import Any, Optional

from playwright.sync_api import APIResponse

from checks.drivers import ServiceResponse


_UNREAD = object()


class ResponseSnapshot(ServiceResponse):
    """
    An HTTP response captured as plain values.

    The message is the raw body text. The body is the same text parsed as
    JSON on first access, or None when it is not JSON.

    Args:
        code: Status code
        message: Raw body text
        body: Already-parsed JSON, skipping the parse of ``message``
    """

    def __init__(self, code: int, message: Optional[str] = None, body: Any = _UNREAD):
        self.code = code
        self.message = message
        self._body = body

    @classmethod
    def from_json(cls, code: int, body: Any) -> "ResponseSnapshot":
        return cls(code, json.dumps(body), body)

    def get_code(self) -> int:
        return self.code

    def get_body(self) -> Any:
        if self._body is _UNREAD:
            self._body = None
            if self.message:
                try:
                    self._body = json.loads(self.message)
                except ValueError:
                    pass
        return self._body

    def get_message(self) -> Optional[str]:
        return self.message

    def __repr__(self) -> str:
        return f"ResponseSnapshot(code={self.code})"


class PlaywrightAPIResponse(ResponseSnapshot):
    # Reads the Playwright response once; later checks use the snapshot

    def __init__(self, response: APIResponse):
        text = response.text()
        try:
            body = response.json()
        except ValueError:
            body = None
        super().__init__(response.status, text, body)
        self.url = response.url
