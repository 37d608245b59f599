"""
Report sinks.

A sink receives each finished CheckResult exactly once, in check order.
Sinks that write outside the process raise ReportWriteError when they
cannot; the error propagates to the test instead of being swallowed.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import List, Optional

import allure

from exceptions import ReportWriteError, create_error_context

from .results import CheckResult


class ReportSink(ABC):
    """Destination for recorded check results."""

    @abstractmethod
    def emit(self, result: CheckResult) -> None:
        """Write one result."""

    def close(self) -> None:
        """Release any resources held by the sink."""


class MemoryReportSink(ReportSink):
    """Keeps results in process; every recorder owns one."""

    def __init__(self):
        self.results: List[CheckResult] = []

    def emit(self, result: CheckResult) -> None:
        self.results.append(result)

    @property
    def failures(self) -> List[CheckResult]:
        return [result for result in self.results if not result.passed]


class AllureReportSink(ReportSink):
    """
    One Allure step per check.

    The step title carries the status and expectation; expected and actual
    text are attached as HTML, and the failure screenshot as PNG.
    """

    def emit(self, result: CheckResult) -> None:
        status = "PASS" if result.passed else "FAIL"
        title = f"[{status}] Check {result.number}: {result.expected}"

        with allure.step(title):
            if result.action:
                allure.attach(
                    result.action,
                    name="Action",
                    attachment_type=allure.attachment_type.TEXT,
                )
            allure.attach(
                result.expected,
                name="Expected",
                attachment_type=allure.attachment_type.HTML,
            )
            allure.attach(
                result.actual,
                name="Actual",
                attachment_type=allure.attachment_type.HTML,
            )
            if result.screenshot:
                allure.attach(
                    result.screenshot,
                    name=result.screenshot_name,
                    attachment_type=allure.attachment_type.PNG,
                )


class JsonLinesReportSink(ReportSink):
    """
    Appends one JSON object per check to a file.

    Args:
        path: Target file; parent directories are created on first write
        test_name: Stored on every line so several tests can share a file
    """

    def __init__(self, path: str, test_name: Optional[str] = None):
        self.path = path
        self.test_name = test_name

    def emit(self, result: CheckResult) -> None:
        entry = result.to_dict()
        entry["test_name"] = self.test_name
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError as e:
            raise ReportWriteError(
                f"Could not write check {result.number} to {self.path}: {e}",
                path=self.path,
                error_context=create_error_context(
                    component="Report",
                    operation="emit",
                    check_number=result.number
                ),
                cause=e
            ) from e
