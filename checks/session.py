"""
Per-test check session.

A session owns one error aggregator, one recorder and the root wait
settings of a test. Page, element and response checks created from it all
record into the same report, and ``finish`` turns the failure count into
the test verdict.
"""

import logging
import os
import time
from typing import Callable, List, Optional, Union

from core.config import CheckwrightConfig, WaitSettings
from core.poller import ConditionPoller
from exceptions import (
    CheckDefinitionError,
    VerdictError,
    create_error_context,
    log_verdict,
)

from .aggregator import ErrorAggregator
from .drivers import BrowserDriver, ServiceResponse
from .element import ElementChecks
from .engine import CheckEngine
from .page import PageChecks
from .recorder import ResultRecorder
from .response import ResponseChecks
from .sinks import AllureReportSink, JsonLinesReportSink, ReportSink
from .targets import ElementTarget, Locator


logger = logging.getLogger(__name__)


class CheckSession:
    """
    Entry point for writing checks in one test.

    Args:
        driver: Browser resolver; required for page and element checks
        settings: Root wait settings; defaults apply when omitted
        poller: Condition poller; a real-time poller is created when omitted
        sinks: Report sinks besides the in-memory one
        test_name: Name used in logs and in the verdict

    Example:
        session = CheckSession(driver, test_name="test_login")
        session.element(Locator.ID, "user").check_equals.value("admin")
        session.app.check.text_present("Welcome")
        session.finish()
    """

    def __init__(
        self,
        driver: Optional[BrowserDriver] = None,
        settings: Optional[WaitSettings] = None,
        poller: Optional[ConditionPoller] = None,
        sinks: Optional[List[ReportSink]] = None,
        test_name: Optional[str] = None
    ):
        self.driver = driver
        self.test_name = test_name
        self.settings = settings or WaitSettings()
        self.poller = poller or ConditionPoller(self.settings.effective_poll_interval)
        self.aggregator = ErrorAggregator()
        self.recorder = ResultRecorder(
            self.aggregator,
            sinks=sinks,
            screenshot_provider=driver.take_screenshot if driver is not None else None,
            test_name=test_name
        )
        self.engine = CheckEngine(self.recorder, self.poller, self.settings)
        self._page: Optional[PageChecks] = None

    @classmethod
    def from_config(
        cls,
        config: CheckwrightConfig,
        driver: Optional[BrowserDriver] = None,
        test_name: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ) -> "CheckSession":
        """
        Build a session reporting to Allure, and to a JSON-lines file when
        ``config.report_dir`` is set.
        """
        sinks: List[ReportSink] = [AllureReportSink()]
        if config.report_dir:
            sinks.append(JsonLinesReportSink(os.path.join(config.report_dir, "checks.jsonl"), test_name))
        poller = ConditionPoller(config.wait.effective_poll_interval, clock=clock, sleep=sleep)
        return cls(driver, settings=config.wait.child(), poller=poller, sinks=sinks, test_name=test_name)

    def _require_driver(self, operation: str) -> BrowserDriver:
        if self.driver is None:
            raise CheckDefinitionError(
                f"{operation} needs a browser driver, but the session was created without one",
                argument="driver",
                error_context=create_error_context(component="Check Session", operation=operation)
            )
        return self.driver

    @property
    def page(self) -> PageChecks:
        """Page-level checks, created once per session."""
        if self._page is None:
            self._page = PageChecks(self.engine, self._require_driver("page"))
        return self._page

    # Application-level checks read as ``session.app.check.text_present(...)``
    app = page

    def element(self, target: Union[ElementTarget, Locator], value: Optional[str] = None,
                match: int = 0) -> ElementChecks:
        """
        Checks for one element. Wait settings inherit from the page.

        Accepts either a ready ElementTarget or a locator type, string and match.
        """
        if not isinstance(target, ElementTarget):
            target = ElementTarget(target, value, match)
        return ElementChecks(self.page.engine, self._require_driver("element"), target)

    def response(self, response: ServiceResponse) -> ResponseChecks:
        return ResponseChecks(self.engine, response)

    @property
    def results(self):
        return self.recorder.results

    @property
    def error_count(self) -> int:
        return self.aggregator.get_error_count()

    def finish(self, expected_errors: int = 0) -> None:
        """
        Close the report and decide the test verdict.

        Args:
            expected_errors: Number of intentional failures the test records

        Raises:
            VerdictError: If the failure count differs from expected_errors
        """
        actual = self.aggregator.get_error_count()
        try:
            log_verdict(self.test_name, actual, expected_errors, checks=len(self.recorder.results))
        finally:
            self.recorder.close()
        logger.debug(f"Session {self.test_name or '(unnamed)'} closed with {actual} failed check(s)")

        if actual != expected_errors:
            raise VerdictError(
                actual,
                expected_errors,
                test_name=self.test_name,
                error_context=create_error_context(component="Check Session", operation="finish")
            )
