import json
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorClassification(Enum):
    # How the engine reacts to an error
    TRANSIENT = "transient"          # Driver hiccup mid-poll, treated as "not yet"
    DEFINITION = "definition"        # The test itself is malformed, always raised
    CONFIGURATION = "configuration"  # Bad environment or .env values
    REPORTING = "reporting"          # Report stream could not be written
    VERDICT = "verdict"              # Final error count differs from the expectation
    TERMINAL = "terminal"            # Anything else, should fail fast


_NO_CORRELATION = "unknown"


@dataclass
class ErrorContext:
    """Where an error happened, carried into the structured error log."""
    correlation_id: str
    timestamp: float = field(default_factory=time.time)
    component: str = ""
    operation: str = ""
    target: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None
    recovery_suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, indent=2)


class CheckwrightError(Exception):
    """
    Base of every framework error.

    Carries a classification deciding whether a poll may swallow it, an
    ErrorContext for the structured log, and recovery suggestions that are
    appended to the message shown by pytest.
    """

    def __init__(
        self,
        message: str,
        error_context: Optional[ErrorContext] = None,
        classification: ErrorClassification = ErrorClassification.TERMINAL,
        cause: Optional[Exception] = None,
        recovery_suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.classification = classification
        self.cause = cause
        self.recovery_suggestions = list(recovery_suggestions or [])
        self.error_context = error_context or ErrorContext(correlation_id=_NO_CORRELATION)
        self.error_context.recovery_suggestions.extend(self.recovery_suggestions)

    def is_retryable(self) -> bool:
        # Only transient driver errors may be re-evaluated by the poller
        return self.classification == ErrorClassification.TRANSIENT

    def get_actionable_message(self) -> str:
        parts = [self.message]
        if self.recovery_suggestions:
            parts.append("Recovery suggestions:\n" + "\n".join(f"  - {hint}" for hint in self.recovery_suggestions))

        trailer = []
        if self.error_context.target:
            trailer.append(f"Target: {self.error_context.target}")
        if self.error_context.correlation_id != _NO_CORRELATION:
            trailer.append(f"Correlation ID: {self.error_context.correlation_id}")
        if trailer:
            parts.append("\n".join(trailer))

        return "\n\n".join(parts)

    def __str__(self) -> str:
        return self.get_actionable_message()


class CheckDefinitionError(CheckwrightError):
    # Raised when a check is malformed - a test-authoring bug, never a FAIL result

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        recovery_suggestions: Optional[List[str]] = None
    ):
        self.argument = argument

        suggestions = list(recovery_suggestions or [])
        if argument:
            suggestions.insert(0, f"Review the value passed for '{argument}'")

        if error_context:
            error_context.component = error_context.component or "Check Definition"
            if argument:
                error_context.metadata["argument"] = argument

        super().__init__(
            message=message,
            error_context=error_context,
            classification=ErrorClassification.DEFINITION,
            cause=cause,
            recovery_suggestions=suggestions
        )


class InvalidTargetError(CheckDefinitionError):
    # Bad locator type, empty locator, negative match index, malformed JSON path

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.target = target
        if error_context and target:
            error_context.target = target

        super().__init__(
            message=f"Invalid target: {message}",
            argument="target",
            error_context=error_context,
            cause=cause,
            recovery_suggestions=[
                "Use one of the Locator enum members as the locator type",
                "Check the locator string is not empty and the match index is not negative"
            ]
        )


class InvalidPatternError(CheckDefinitionError):
    # The expected pattern of a 'matches' check does not compile

    def __init__(
        self,
        pattern: str,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.pattern = pattern

        super().__init__(
            message=f"Invalid pattern '{pattern}': {cause}",
            argument="pattern",
            error_context=error_context,
            cause=cause,
            recovery_suggestions=["Escape regular expression metacharacters meant literally"]
        )


class InvalidWaitError(CheckDefinitionError):
    # Negative or non-numeric wait budget / poll interval

    def __init__(
        self,
        message: str,
        seconds: Any = None,
        error_context: Optional[ErrorContext] = None
    ):
        self.seconds = seconds

        super().__init__(
            message=f"Invalid wait: {message}",
            argument="seconds",
            error_context=error_context,
            recovery_suggestions=["Wait budgets and poll intervals are seconds and must not be negative"]
        )


class RecordingSequenceError(CheckDefinitionError):
    # record_expected/record_actual called out of order

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(
            message=f"Recording out of sequence: {message}",
            error_context=error_context,
            recovery_suggestions=["Every check records one expectation followed by exactly one outcome"]
        )


class ConfigurationError(CheckwrightError):
    # A CHECKWRIGHT_* value in the environment or .env file is unusable

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
        expected_format: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.config_key = config_key
        self.config_file = config_file
        self.expected_format = expected_format

        hints = []
        if expected_format:
            hints.append(f"Expected format: {expected_format}")
        if config_key:
            hints.append(f"Fix or unset {config_key} in the environment or .env file")
        if config_file:
            hints.append(f"Values were read from {config_file}")
        hints.append("Unset every CHECKWRIGHT_* variable to fall back to the defaults")

        if error_context:
            error_context.component = "Configuration"
            error_context.metadata.update(
                {name: value for name, value in (("config_key", config_key), ("config_file", config_file)) if value}
            )

        super().__init__(
            message=f"Configuration Error: {message}",
            error_context=error_context,
            classification=ErrorClassification.CONFIGURATION,
            cause=cause,
            recovery_suggestions=hints
        )


class ReportWriteError(CheckwrightError):
    # The report stream could not be written - propagated to the caller

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.path = path

        recovery_suggestions = ["Check the report directory exists and is writable"]
        if path:
            recovery_suggestions.insert(0, f"Report path: {path}")

        if error_context:
            error_context.component = "Report"
            if path:
                error_context.metadata["path"] = path

        super().__init__(
            message=f"Report Error: {message}",
            error_context=error_context,
            classification=ErrorClassification.REPORTING,
            cause=cause,
            recovery_suggestions=recovery_suggestions
        )


class DriverError(CheckwrightError):
    # A resolver call failed outside of a polling loop

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.target = target

        recovery_suggestions = [
            "Check the browser session is still open",
            "Check the page finished loading before running checks",
        ]

        if error_context:
            error_context.component = "Driver"
            if target:
                error_context.target = target

        super().__init__(
            message=f"Driver Error: {message}",
            error_context=error_context,
            classification=ErrorClassification.TRANSIENT,
            cause=cause,
            recovery_suggestions=recovery_suggestions
        )


class VerdictError(CheckwrightError, AssertionError):
    # Raised at the end of a test when the failure count differs from the expectation

    def __init__(
        self,
        actual_errors: int,
        expected_errors: int,
        test_name: Optional[str] = None,
        error_context: Optional[ErrorContext] = None
    ):
        self.actual_errors = actual_errors
        self.expected_errors = expected_errors
        self.test_name = test_name

        recovery_suggestions = ["Review the FAIL entries recorded in the report for this test"]
        if expected_errors:
            recovery_suggestions.append(
                f"This test declares {expected_errors} intentional failure(s)"
            )

        if error_context:
            error_context.component = "Verdict"
            error_context.metadata.update({
                "actual_errors": actual_errors,
                "expected_errors": expected_errors,
                "test_name": test_name
            })

        name = f" '{test_name}'" if test_name else ""
        super().__init__(
            message=(
                f"Test{name} recorded {actual_errors} failed check(s), "
                f"expected {expected_errors}"
            ),
            error_context=error_context,
            classification=ErrorClassification.VERDICT,
            recovery_suggestions=recovery_suggestions
        )
