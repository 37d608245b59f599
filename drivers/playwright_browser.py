"""
Playwright resolver.

Answers element and page queries against a ``playwright.sync_api.Page``.
Queries never wait on their own beyond ``timeout_ms``; waiting belongs to
the condition poller. Playwright errors surface as DriverError so the
poller treats them as transient.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from playwright.sync_api import Dialog, Error as PlaywrightError, Locator as PlaywrightLocator, Page

from checks.drivers import BrowserDriver
from checks.targets import ElementTarget, Locator
from exceptions import DriverError, create_error_context


logger = logging.getLogger(__name__)


DEFAULT_QUERY_TIMEOUT_MS = 1000

_INPUT_TAGS = ("input", "textarea", "select")

_JS_TAG = "e => e.tagName.toLowerCase()"
_JS_CHECKED = "e => !!e.checked"
_JS_ATTRIBUTES = "e => Object.fromEntries(Array.from(e.attributes, a => [a.name, a.value]))"
_JS_CSS = "(e, prop) => window.getComputedStyle(e).getPropertyValue(prop)"
_JS_OPTION_TEXTS = "e => Array.from(e.options, o => o.text)"
_JS_OPTION_VALUES = "e => Array.from(e.options, o => o.value)"
_JS_SELECTED_TEXT = "e => e.selectedIndex >= 0 ? e.options[e.selectedIndex].text : null"
_JS_SELECTED_VALUE = "e => e.selectedIndex >= 0 ? e.options[e.selectedIndex].value : null"
_JS_ROW_COUNT = "e => e.rows.length"
_JS_COLUMN_COUNT = "e => e.rows.length ? e.rows[0].cells.length : 0"
_JS_CELL = """(e, [row, col]) => {
    const r = e.rows[row - 1];
    if (!r) return null;
    const c = r.cells[col - 1];
    return c ? c.innerText : null;
}"""


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def to_selector(target: ElementTarget) -> str:
    """Translate a locator type and string into a Playwright selector."""
    selectors: Dict[Locator, Callable[[str], str]] = {
        Locator.ID: lambda v: f"id={v}",
        Locator.NAME: lambda v: f"css=[name={_quote(v)}]",
        Locator.CLASSNAME: lambda v: f"css=[class~={_quote(v)}]",
        Locator.CSS: lambda v: f"css={v}",
        Locator.XPATH: lambda v: f"xpath={v}",
        Locator.LINKTEXT: lambda v: f"a:text-is({_quote(v)})",
        Locator.PARTIALLINKTEXT: lambda v: f"a:has-text({_quote(v)})",
        Locator.TAGNAME: lambda v: f"css={v}",
    }
    return selectors[target.locator](target.value)


class PlaywrightBrowserDriver(BrowserDriver):
    """
    BrowserDriver backed by a Playwright page.

    JavaScript dialogs are captured when they open and stay open until the
    test calls ``accept_dialog`` or ``dismiss_dialog``, so checks can read
    them in the meantime.

    Args:
        page: An open Playwright page
        timeout_ms: Upper bound for a single query
    """

    def __init__(self, page: Page, timeout_ms: int = DEFAULT_QUERY_TIMEOUT_MS):
        self.page = page
        self.timeout_ms = timeout_ms
        self._dialog: Optional[Dialog] = None
        page.on("dialog", self._on_dialog)

    def _on_dialog(self, dialog: Dialog) -> None:
        logger.debug(f"Captured {dialog.type} dialog: {dialog.message}")
        self._dialog = dialog

    def accept_dialog(self, prompt_text: Optional[str] = None) -> None:
        if self._dialog is not None:
            dialog, self._dialog = self._dialog, None
            if prompt_text is None:
                dialog.accept()
            else:
                dialog.accept(prompt_text)

    def dismiss_dialog(self) -> None:
        if self._dialog is not None:
            dialog, self._dialog = self._dialog, None
            dialog.dismiss()

    # Plumbing

    def _query(self, operation: str, target: Any, query: Callable[[], Any]) -> Any:
        try:
            return query()
        except PlaywrightError as e:
            raise DriverError(
                f"Playwright query '{operation}' failed: {e}",
                target=str(target) if target is not None else None,
                error_context=create_error_context(
                    component="Playwright Driver",
                    operation=operation,
                    target=str(target) if target is not None else None
                ),
                cause=e
            ) from e

    def _locate(self, target: ElementTarget) -> PlaywrightLocator:
        return self.page.locator(to_selector(target)).nth(target.match)

    def _evaluate(self, operation: str, target: ElementTarget, script: str, arg: Any = None) -> Any:
        return self._query(
            operation, target,
            lambda: self._locate(target).evaluate(script, arg, timeout=self.timeout_ms)
        )

    def _tag(self, target: ElementTarget) -> str:
        return self._evaluate("tag", target, _JS_TAG)

    # Element state

    def is_present(self, target: ElementTarget) -> bool:
        return self._query(
            "is_present", target,
            lambda: self.page.locator(to_selector(target)).count() > target.match
        )

    def is_displayed(self, target: ElementTarget) -> bool:
        return self._query("is_displayed", target, lambda: self._locate(target).is_visible())

    def is_enabled(self, target: ElementTarget) -> bool:
        return self._query(
            "is_enabled", target, lambda: self._locate(target).is_enabled(timeout=self.timeout_ms)
        )

    def is_input(self, target: ElementTarget) -> bool:
        return self._tag(target) in _INPUT_TAGS

    def is_select(self, target: ElementTarget) -> bool:
        return self._tag(target) == "select"

    def is_table(self, target: ElementTarget) -> bool:
        return self._tag(target) == "table"

    def is_checked(self, target: ElementTarget) -> bool:
        return bool(self._evaluate("is_checked", target, _JS_CHECKED))

    # Element values

    def get_text(self, target: ElementTarget) -> str:
        return self._query("get_text", target, lambda: self._locate(target).inner_text(timeout=self.timeout_ms))

    def get_value(self, target: ElementTarget) -> str:
        return self._query(
            "get_value", target, lambda: self._locate(target).input_value(timeout=self.timeout_ms)
        )

    def get_attribute(self, target: ElementTarget, name: str) -> Optional[str]:
        return self._query(
            "get_attribute", target,
            lambda: self._locate(target).get_attribute(name, timeout=self.timeout_ms)
        )

    def get_all_attributes(self, target: ElementTarget) -> Dict[str, str]:
        return self._evaluate("get_all_attributes", target, _JS_ATTRIBUTES) or {}

    def get_css_value(self, target: ElementTarget, prop: str) -> Optional[str]:
        # Computed styles report unknown properties as an empty string
        return self._evaluate("get_css_value", target, _JS_CSS, prop) or None

    def get_select_options(self, target: ElementTarget) -> List[str]:
        return self._evaluate("get_select_options", target, _JS_OPTION_TEXTS) or []

    def get_select_values(self, target: ElementTarget) -> List[str]:
        return self._evaluate("get_select_values", target, _JS_OPTION_VALUES) or []

    def get_selected_option(self, target: ElementTarget) -> Optional[str]:
        return self._evaluate("get_selected_option", target, _JS_SELECTED_TEXT)

    def get_selected_value(self, target: ElementTarget) -> Optional[str]:
        return self._evaluate("get_selected_value", target, _JS_SELECTED_VALUE)

    def get_table_cell(self, target: ElementTarget, row: int, col: int) -> Optional[str]:
        return self._evaluate("get_table_cell", target, _JS_CELL, [row, col])

    def get_row_count(self, target: ElementTarget) -> int:
        return self._evaluate("get_row_count", target, _JS_ROW_COUNT)

    def get_column_count(self, target: ElementTarget) -> int:
        return self._evaluate("get_column_count", target, _JS_COLUMN_COUNT)

    # Page

    def get_url(self) -> str:
        return self.page.url

    def get_title(self) -> str:
        return self._query("get_title", None, self.page.title)

    def is_text_present(self, text: str) -> bool:
        return text in self._query("is_text_present", None, self.page.content)

    def is_text_visible(self, text: str) -> bool:
        body = self._query(
            "is_text_visible", None,
            lambda: self.page.locator("body").inner_text(timeout=self.timeout_ms)
        )
        return text in body

    def _dialog_of(self, kind: str) -> Optional[Dialog]:
        if self._dialog is not None and self._dialog.type == kind:
            return self._dialog
        return None

    def is_alert_present(self) -> bool:
        return self._dialog_of("alert") is not None

    def is_confirmation_present(self) -> bool:
        return self._dialog_of("confirm") is not None

    def is_prompt_present(self) -> bool:
        return self._dialog_of("prompt") is not None

    def get_alert_text(self) -> Optional[str]:
        dialog = self._dialog_of("alert")
        return dialog.message if dialog else None

    def get_confirmation_text(self) -> Optional[str]:
        dialog = self._dialog_of("confirm")
        return dialog.message if dialog else None

    def get_prompt_text(self) -> Optional[str]:
        dialog = self._dialog_of("prompt")
        return dialog.message if dialog else None

    def get_cookie(self, name: str) -> Optional[str]:
        cookies = self._query("get_cookie", name, lambda: self.page.context.cookies(self.page.url))
        for cookie in cookies:
            if cookie.get("name") == name:
                return cookie.get("value")
        return None

    def take_screenshot(self) -> Optional[bytes]:
        return self._query("take_screenshot", None, lambda: self.page.screenshot(type="png"))
