"""
Capability interfaces consumed by the check engine.

The engine never talks to a browser or HTTP client directly. Each resolver
kind (a Playwright page, a recorded HTTP response, a test fake) implements
the small set of queries below once, and every check is written against
these queries only.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .targets import ElementTarget


class ElementDriver(ABC):
    """Element-level queries. All methods take the target being checked."""

    # State

    @abstractmethod
    def is_present(self, target: ElementTarget) -> bool:
        """True when the element exists in the DOM."""

    @abstractmethod
    def is_displayed(self, target: ElementTarget) -> bool:
        """True when the element is rendered visibly."""

    @abstractmethod
    def is_enabled(self, target: ElementTarget) -> bool:
        """True when the element accepts interaction."""

    @abstractmethod
    def is_input(self, target: ElementTarget) -> bool:
        """True for input, textarea and select elements."""

    @abstractmethod
    def is_select(self, target: ElementTarget) -> bool:
        """True for select elements."""

    @abstractmethod
    def is_table(self, target: ElementTarget) -> bool:
        """True for table elements."""

    @abstractmethod
    def is_checked(self, target: ElementTarget) -> bool:
        """True for a checked checkbox or radio button."""

    # Values

    @abstractmethod
    def get_text(self, target: ElementTarget) -> str:
        """Visible text of the element."""

    @abstractmethod
    def get_value(self, target: ElementTarget) -> str:
        """Current value of an input element."""

    @abstractmethod
    def get_attribute(self, target: ElementTarget, name: str) -> Optional[str]:
        """Attribute value, or None when the attribute is absent."""

    @abstractmethod
    def get_all_attributes(self, target: ElementTarget) -> Dict[str, str]:
        """All attributes of the element by name."""

    @abstractmethod
    def get_css_value(self, target: ElementTarget, prop: str) -> Optional[str]:
        """Computed CSS property value."""

    @abstractmethod
    def get_select_options(self, target: ElementTarget) -> List[str]:
        """Option labels of a select, in document order."""

    @abstractmethod
    def get_select_values(self, target: ElementTarget) -> List[str]:
        """Option values of a select, in document order."""

    @abstractmethod
    def get_selected_option(self, target: ElementTarget) -> Optional[str]:
        """Label of the currently selected option."""

    @abstractmethod
    def get_selected_value(self, target: ElementTarget) -> Optional[str]:
        """Value of the currently selected option."""

    @abstractmethod
    def get_table_cell(self, target: ElementTarget, row: int, col: int) -> Optional[str]:
        """
        Text of a table cell.

        Args:
            target: Table element
            row: 1-based row number
            col: 1-based column number

        Returns:
            The cell text, or None when the cell does not exist
        """

    @abstractmethod
    def get_row_count(self, target: ElementTarget) -> int:
        """Number of rows in a table element."""

    @abstractmethod
    def get_column_count(self, target: ElementTarget) -> int:
        """Number of columns in a table element."""


class PageDriver(ABC):
    """Page-level queries: location, text, dialogs and cookies."""

    @abstractmethod
    def get_url(self) -> str:
        """Current page URL."""

    @abstractmethod
    def get_title(self) -> str:
        """Current page title."""

    @abstractmethod
    def is_text_present(self, text: str) -> bool:
        """True when the text appears anywhere in the page source."""

    @abstractmethod
    def is_text_visible(self, text: str) -> bool:
        """True when the text is rendered visibly on the page."""

    @abstractmethod
    def is_alert_present(self) -> bool:
        pass

    @abstractmethod
    def is_confirmation_present(self) -> bool:
        pass

    @abstractmethod
    def is_prompt_present(self) -> bool:
        pass

    @abstractmethod
    def get_alert_text(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_confirmation_text(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_prompt_text(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_cookie(self, name: str) -> Optional[str]:
        """Cookie value, or None when no cookie has that name."""

    def take_screenshot(self) -> Optional[bytes]:
        """PNG bytes of the current page; resolvers without screenshots return None."""
        return None


class BrowserDriver(ElementDriver, PageDriver):
    """A resolver that answers both element and page queries."""


class ServiceResponse(ABC):
    """Queries against one HTTP response."""

    @abstractmethod
    def get_code(self) -> int:
        """HTTP status code."""

    @abstractmethod
    def get_body(self) -> Any:
        """Parsed JSON body (dict or list), or None when the body is not JSON."""

    @abstractmethod
    def get_message(self) -> Optional[str]:
        """Raw body text."""
