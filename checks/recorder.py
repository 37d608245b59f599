"""
Result recording.

Every check records one expectation followed by exactly one outcome. The
recorder never decides PASS or FAIL; it narrates waiting time, sanitises
text, counts failures and fans each finished result out to report sinks.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from core.poller import validate_seconds
from core.security import sanitize_for_report
from exceptions import RecordingSequenceError, create_error_context

from .aggregator import ErrorAggregator
from .results import CheckResult, CheckStatus, narrate_action, narrate_actual
from .sinks import MemoryReportSink, ReportSink


logger = logging.getLogger(__name__)


class ResultRecorder:
    """
    Expected/actual recording protocol for one test.

    Args:
        aggregator: Error counter incremented once per FAIL
        sinks: Extra report sinks; an in-memory sink is always present
        screenshot_provider: Callable returning PNG bytes, consulted on FAIL
        test_name: Name used in log lines
    """

    def __init__(
        self,
        aggregator: ErrorAggregator,
        sinks: Optional[List[ReportSink]] = None,
        screenshot_provider: Optional[Callable[[], Optional[bytes]]] = None,
        test_name: Optional[str] = None
    ):
        self.aggregator = aggregator
        self.memory = MemoryReportSink()
        self.sinks: List[ReportSink] = [self.memory] + list(sinks or [])
        self.screenshot_provider = screenshot_provider
        self.test_name = test_name
        self._pending: Optional[Dict[str, Any]] = None

    @property
    def results(self) -> List[CheckResult]:
        return self.memory.results

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def record_expected(self, description: str, wait_for: float = 0.0) -> None:
        """
        Open a check by recording what is expected.

        Args:
            description: Expectation text
            wait_for: Budget in seconds the check may wait

        Raises:
            RecordingSequenceError: If the previous check was never closed
        """
        if self._pending is not None:
            raise RecordingSequenceError(
                "record_expected called while the previous check has no outcome",
                error_context=create_error_context(
                    component="Result Recorder",
                    operation="record_expected",
                    previous=self._pending["expected"]
                )
            )
        wait_for = validate_seconds(wait_for, "wait_for")
        self._pending = {"expected": description, "wait_for": wait_for}

    def record_actual(self, description: str, status: CheckStatus, elapsed: float = 0.0) -> CheckResult:
        """
        Close the open check with its outcome.

        Args:
            description: Outcome text without waiting narration
            status: PASS or FAIL as decided by the caller
            elapsed: Seconds spent waiting

        Returns:
            The recorded CheckResult

        Raises:
            RecordingSequenceError: If no check is open
            ReportWriteError: If a report sink cannot be written
        """
        if self._pending is None:
            raise RecordingSequenceError(
                "record_actual called without a preceding record_expected",
                error_context=create_error_context(component="Result Recorder", operation="record_actual")
            )
        if not isinstance(status, CheckStatus):
            raise RecordingSequenceError(
                f"status must be a CheckStatus, got {status!r}",
                error_context=create_error_context(component="Result Recorder", operation="record_actual")
            )
        elapsed = validate_seconds(elapsed, "elapsed")

        pending, self._pending = self._pending, None
        expected = sanitize_for_report(pending["expected"])

        screenshot = None
        if status == CheckStatus.FAIL:
            self.aggregator.add_error()
            screenshot = self._capture_screenshot()

        result = CheckResult(
            number=len(self.memory.results) + 1,
            expected=expected,
            actual=sanitize_for_report(narrate_actual(description, elapsed)),
            status=status,
            elapsed=elapsed,
            wait_for=pending["wait_for"],
            action=narrate_action(expected, pending["wait_for"]),
            screenshot=screenshot
        )

        if result.passed:
            logger.info(f"{self._prefix()}PASS: {result.expected} | {result.actual}")
        else:
            logger.warning(f"{self._prefix()}FAIL: {result.expected} | {result.actual}")

        for sink in self.sinks:
            sink.emit(result)
        return result

    def record(self, expected: str, actual: str, status: CheckStatus,
               wait_for: float = 0.0, elapsed: float = 0.0) -> CheckResult:
        # Both halves in one call, for checks with nothing in between
        self.record_expected(expected, wait_for)
        return self.record_actual(actual, status, elapsed)

    def discard_pending(self) -> None:
        # An authoring error aborted the open check; nothing is recorded for it
        self._pending = None

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()

    def _prefix(self) -> str:
        return f"[{self.test_name}] " if self.test_name else ""

    def _capture_screenshot(self) -> Optional[bytes]:
        if self.screenshot_provider is None:
            return None
        try:
            return self.screenshot_provider()
        except Exception as e:
            logger.warning(f"Failed to take screenshot for failed check: {e}")
            return None
