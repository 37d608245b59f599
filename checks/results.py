import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .formatting import format_seconds, lower_first


class CheckStatus(Enum):
    """Terminal status of one check."""
    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class CheckResult:
    """
    One recorded check. Never mutated after recording.

    Attributes:
        number: 1-based position of the check within its test
        expected: Expectation text, may contain light HTML markup
        actual: Outcome text with waiting narration already applied
        status: PASS or FAIL
        elapsed: Seconds spent waiting, never more than wait_for
        wait_for: Budget the check was allowed to wait
        action: "Waiting up to ..." text when a budget was given, else empty
        screenshot: PNG bytes captured on failure, when available
    """
    number: int
    expected: str
    actual: str
    status: CheckStatus
    elapsed: float = 0.0
    wait_for: float = 0.0
    action: str = ""
    screenshot: Optional[bytes] = field(default=None, repr=False, compare=False)
    timestamp: float = field(default_factory=time.time, compare=False)

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    @property
    def screenshot_name(self) -> Optional[str]:
        return f"check-{self.number}.png" if self.screenshot else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for JSON reports."""
        return {
            "number": self.number,
            "action": self.action,
            "expected": self.expected,
            "actual": self.actual,
            "status": self.status.value,
            "elapsed": self.elapsed,
            "wait_for": self.wait_for,
            "screenshot": self.screenshot_name,
            "timestamp": self.timestamp,
        }


def narrate_action(expected: str, wait_for: float) -> str:
    if wait_for > 0:
        return f"Waiting up to {format_seconds(wait_for)} seconds, {lower_first(expected)}"
    return ""


def narrate_actual(description: str, elapsed: float) -> str:
    if elapsed > 0:
        return f"After waiting for {format_seconds(elapsed)} seconds, {lower_first(description)}"
    return description

