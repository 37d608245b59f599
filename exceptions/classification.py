import sys
import traceback
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from .base import (
    CheckwrightError,
    CheckDefinitionError,
    ConfigurationError,
    DriverError,
    ErrorClassification,
    ErrorContext,
)


class RecoveryStrategy(Enum):
    # How the engine reacts to an error of a given classification
    RETRY_UNTIL_DEADLINE = "retry_until_deadline"
    FAIL_FAST = "fail_fast"
    REPORT_AND_CONTINUE = "report_and_continue"


# Classifications that must never be swallowed by a polling loop
_FATAL_DURING_POLL = (
    ErrorClassification.DEFINITION,
    ErrorClassification.CONFIGURATION,
    ErrorClassification.REPORTING,
    ErrorClassification.VERDICT,
)

_STRATEGIES = {
    ErrorClassification.TRANSIENT: RecoveryStrategy.RETRY_UNTIL_DEADLINE,
    ErrorClassification.VERDICT: RecoveryStrategy.REPORT_AND_CONTINUE,
}

# Substrings of messages or type names raised by browser drivers and HTTP clients
_DRIVER_MARKERS = (
    "stale", "detached", "not attached", "no such element", "element",
    "timeout", "target closed", "target page", "navigation", "frame",
    "connection", "disconnected",
)

_CONFIG_TYPE_MARKERS = ("configerror", "environmenterror")
_CONFIG_MESSAGE_MARKERS = ("config", "environment variable", ".env")


def create_error_context(
    correlation_id: Optional[str] = None,
    component: str = "",
    operation: str = "",
    target: Optional[str] = None,
    **metadata
) -> ErrorContext:
    """
    Build an ErrorContext, capturing the traceback when called from an
    ``except`` block.
    """
    stack_trace = traceback.format_exc() if sys.exc_info()[0] is not None else None
    return ErrorContext(
        correlation_id=correlation_id or uuid.uuid4().hex[:8],
        component=component,
        operation=operation,
        target=target,
        metadata=metadata,
        stack_trace=stack_trace,
    )


def _looks_like_driver_error(exception: BaseException) -> bool:
    exception_type = type(exception)
    if (exception_type.__module__ or "").startswith("playwright"):
        return True

    haystacks = (str(exception).lower(), exception_type.__name__.lower())
    return any(marker in haystack for marker in _DRIVER_MARKERS for haystack in haystacks)


def _looks_like_configuration_error(exception: BaseException) -> bool:
    type_name = type(exception).__name__.lower()
    message = str(exception).lower()
    return (any(marker in type_name for marker in _CONFIG_TYPE_MARKERS)
            or any(marker in message for marker in _CONFIG_MESSAGE_MARKERS))


def classify_error(
    exception: BaseException,
    context: Optional[Dict[str, Any]] = None
) -> ErrorClassification:
    # Framework errors carry their own classification; others are guessed from type and message
    if isinstance(exception, CheckwrightError):
        return exception.classification
    if _looks_like_driver_error(exception):
        return ErrorClassification.TRANSIENT
    if _looks_like_configuration_error(exception):
        return ErrorClassification.CONFIGURATION
    return ErrorClassification.TERMINAL


def is_retryable_error(
    exception: BaseException,
    context: Optional[Dict[str, Any]] = None
) -> bool:
    # Whether a polling loop may treat this error as "condition not yet true"
    # Decided by type only: foreign errors are always retried, whatever their message says
    if not isinstance(exception, Exception):
        return False
    if isinstance(exception, CheckwrightError):
        return exception.classification not in _FATAL_DURING_POLL
    return True


def is_definition_error(exception: BaseException) -> bool:
    # Authoring errors are re-raised untouched wherever they surface
    return isinstance(exception, CheckDefinitionError)


def get_recovery_strategy(
    exception: BaseException,
    context: Optional[Dict[str, Any]] = None
) -> RecoveryStrategy:
    return _STRATEGIES.get(classify_error(exception, context), RecoveryStrategy.FAIL_FAST)


def convert_to_framework_exception(
    exception: BaseException,
    context: Optional[ErrorContext] = None,
    component: str = "Unknown",
    operation: str = "Unknown"
) -> CheckwrightError:
    """Wrap a foreign exception in the framework exception matching its classification."""
    if isinstance(exception, CheckwrightError):
        return exception

    context = context or create_error_context(component=component, operation=operation)
    classification = classify_error(exception)

    if classification == ErrorClassification.TRANSIENT:
        return DriverError(str(exception), error_context=context, cause=exception)
    if classification == ErrorClassification.CONFIGURATION:
        return ConfigurationError(str(exception), error_context=context, cause=exception)
    return CheckwrightError(str(exception), error_context=context, classification=classification, cause=exception)
