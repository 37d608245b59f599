import logging
import os
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest
from dotenv import load_dotenv

from checks import (
    BrowserDriver,
    CheckSession,
    ElementTarget,
    Locator,
    MemoryReportSink,
)
from core.config import WaitSettings, load_config
from core.poller import ConditionPoller
from exceptions import (
    ConfigurationError,
    configure_error_logging,
    create_error_context,
    log_error_with_context,
)

# Load environment variables from .env file
load_dotenv()

# Configure structured error logging with security features
configure_error_logging(level="INFO", format_type="json", enable_security=True)


# --- Fakes for running checks without a browser ---


class FakeClock:
    # Monotonic clock that only moves when something sleeps on it

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


Value = Union[Any, Callable[[], Any]]


class FakeElement:
    # One element on the fake page; any value may be a callable evaluated on each read

    def __init__(
        self,
        tag: str = "div",
        text: Value = "",
        value: Value = "",
        attributes: Optional[Dict[str, str]] = None,
        css: Optional[Dict[str, str]] = None,
        options: Optional[Sequence[Tuple[str, str]]] = None,
        selected: Optional[int] = None,
        rows: Optional[List[List[str]]] = None,
        appears_at: float = 0.0,
        displayed_at: Optional[float] = 0.0,
        enabled: Value = True,
        checked: Value = False
    ):
        self.tag = tag
        self.text = text
        self.value = value
        self.attributes = dict(attributes or {})
        self.css = dict(css or {})
        self.options = list(options or [])
        self.selected = selected
        self.rows = rows
        self.appears_at = appears_at
        self.displayed_at = displayed_at
        self.enabled = enabled
        self.checked = checked


def _read(value: Value) -> Any:
    return value() if callable(value) else value


class FakeBrowser(BrowserDriver):
    # BrowserDriver over in-memory elements, counting every query it answers

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.elements: Dict[ElementTarget, FakeElement] = {}
        self.calls: Dict[str, int] = {}
        self.url = "https://example.test/"
        self.title = "Example"
        self.source = ""
        self.visible_text = ""
        self.dialog: Optional[Tuple[str, str]] = None
        self.cookies: Dict[str, str] = {}
        self.screenshot: Optional[bytes] = b"\x89PNG fake"

    def add(self, target: ElementTarget, element: FakeElement) -> FakeElement:
        self.elements[target] = element
        return element

    def count(self, name: str) -> int:
        return self.calls.get(name, 0)

    def _track(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    def _element(self, target: ElementTarget) -> FakeElement:
        element = self.elements.get(target)
        if element is None or self.clock() < element.appears_at:
            raise LookupError(f"No element {target}")
        return element

    # Element state

    def is_present(self, target):
        self._track("is_present")
        element = self.elements.get(target)
        return element is not None and self.clock() >= element.appears_at

    def is_displayed(self, target):
        self._track("is_displayed")
        if not self.is_present(target):
            return False
        displayed_at = self.elements[target].displayed_at
        return displayed_at is not None and self.clock() >= displayed_at

    def is_enabled(self, target):
        self._track("is_enabled")
        return bool(_read(self._element(target).enabled))

    def is_input(self, target):
        return self._element(target).tag in ("input", "textarea", "select")

    def is_select(self, target):
        return self._element(target).tag == "select"

    def is_table(self, target):
        return self._element(target).tag == "table"

    def is_checked(self, target):
        return bool(_read(self._element(target).checked))

    # Element values

    def get_text(self, target):
        self._track("get_text")
        return _read(self._element(target).text)

    def get_value(self, target):
        return _read(self._element(target).value)

    def get_attribute(self, target, name):
        return self._element(target).attributes.get(name)

    def get_all_attributes(self, target):
        return dict(self._element(target).attributes)

    def get_css_value(self, target, prop):
        return self._element(target).css.get(prop)

    def get_select_options(self, target):
        return [text for text, _ in self._element(target).options]

    def get_select_values(self, target):
        return [value for _, value in self._element(target).options]

    def get_selected_option(self, target):
        element = self._element(target)
        return None if element.selected is None else element.options[element.selected][0]

    def get_selected_value(self, target):
        element = self._element(target)
        return None if element.selected is None else element.options[element.selected][1]

    def get_table_cell(self, target, row, col):
        self._track("get_table_cell")
        rows = self._element(target).rows or []
        if row > len(rows) or col > len(rows[row - 1]):
            return None
        return rows[row - 1][col - 1]

    def get_row_count(self, target):
        return len(self._element(target).rows or [])

    def get_column_count(self, target):
        rows = self._element(target).rows or []
        return len(rows[0]) if rows else 0

    # Page

    def get_url(self):
        return self.url

    def get_title(self):
        return self.title

    def is_text_present(self, text):
        return text in self.source

    def is_text_visible(self, text):
        return text in self.visible_text

    def _dialog_text(self, kind):
        if self.dialog is not None and self.dialog[0] == kind:
            return self.dialog[1]
        return None

    def is_alert_present(self):
        return self._dialog_text("alert") is not None

    def is_confirmation_present(self):
        return self._dialog_text("confirm") is not None

    def is_prompt_present(self):
        return self._dialog_text("prompt") is not None

    def get_alert_text(self):
        return self._dialog_text("alert")

    def get_confirmation_text(self):
        return self._dialog_text("confirm")

    def get_prompt_text(self):
        return self._dialog_text("prompt")

    def get_cookie(self, name):
        return self.cookies.get(name)

    def take_screenshot(self):
        return self.screenshot


# --- Fixtures ---


@pytest.fixture(scope="session", autouse=True)
def environment_reporter(request: pytest.FixtureRequest):
    # Fixture to write environment details to a properties file for reporting
    # This runs once per session and is automatically used
    allure_dir = request.config.getoption("--alluredir", default=None)
    if not allure_dir or not isinstance(allure_dir, str):
        return

    properties_file = os.path.join(allure_dir, "environment.properties")

    try:
        os.makedirs(allure_dir, exist_ok=True)
    except PermissionError:
        logging.error(f"Permission denied to create report directory: {allure_dir}")
        return

    try:
        playwright_version = version("playwright")
    except PackageNotFoundError:
        playwright_version = "N/A"

    try:
        config = load_config()
    except ConfigurationError as e:
        correlation_id = log_error_with_context(e, e.error_context, level="error")
        raise pytest.UsageError(
            f"\n\nConfiguration Error [correlation_id: {correlation_id}]:\n{e.get_actionable_message()}\n\n"
            "Please check your environment configuration and try again.\n"
        )

    env_props = {
        "operating_system": f"{platform.system()} {platform.release()}",
        "python_version": sys.version.split(" ")[0],
        "playwright_version": playwright_version,
        "default_wait": config.wait.effective_wait,
        "poll_interval": config.wait.effective_poll_interval,
    }

    try:
        with open(properties_file, "w") as f:
            for key, value in env_props.items():
                f.write(f"{key}={value}\n")
    except IOError as e:
        log_error_with_context(
            e,
            create_error_context(component="Environment Reporter", operation="write_properties"),
            level="error"
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def browser(clock: FakeClock) -> FakeBrowser:
    return FakeBrowser(clock)


@pytest.fixture
def poller(clock: FakeClock) -> ConditionPoller:
    return ConditionPoller(0.5, clock=clock, sleep=clock.sleep)


@pytest.fixture
def session(browser: FakeBrowser, poller: ConditionPoller, request: pytest.FixtureRequest) -> CheckSession:
    return CheckSession(
        browser,
        settings=WaitSettings(default_wait=5.0, poll_interval=0.5),
        poller=poller,
        test_name=request.node.name
    )


# --- Base Test Class for Check Tests ---


class BaseCheckTest:
    # Base class for check tests to reduce boilerplate
    # Every test method gets a fresh fake clock, browser and session

    DEFAULT_WAIT = 5.0

    def setup_method(self):
        self.clock = FakeClock()
        self.browser = FakeBrowser(self.clock)
        self.sink = MemoryReportSink()
        self.session = CheckSession(
            self.browser,
            settings=WaitSettings(default_wait=self.DEFAULT_WAIT, poll_interval=0.5),
            poller=ConditionPoller(0.5, clock=self.clock, sleep=self.clock.sleep),
            sinks=[self.sink]
        )

    def teardown_method(self):
        self.session = None
        self.browser = None
        self.clock = None

    def add_element(self, locator_value: str, /, locator: Locator = Locator.ID, match: int = 0,
                    **attributes) -> ElementTarget:
        target = ElementTarget(locator, locator_value, match)
        self.browser.add(target, FakeElement(**attributes))
        return target

    @property
    def results(self):
        return self.session.results

    @property
    def last(self):
        return self.session.results[-1]
