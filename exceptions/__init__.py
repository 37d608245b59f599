# Checkwright Exception Hierarchy
# Separates test-authoring errors (raised) from application behaviour (recorded as FAIL)

from .base import (
    CheckwrightError,
    CheckDefinitionError,
    InvalidTargetError,
    InvalidPatternError,
    InvalidWaitError,
    RecordingSequenceError,
    ConfigurationError,
    ReportWriteError,
    DriverError,
    VerdictError,
    ErrorClassification,
    ErrorContext,
)

from .classification import (
    classify_error,
    is_retryable_error,
    is_definition_error,
    get_recovery_strategy,
    convert_to_framework_exception,
    create_error_context,
    RecoveryStrategy,
)

from .logging import (
    StructuredErrorLogger,
    log_error_with_context,
    log_poll_timeout,
    log_verdict,
    get_error_correlation_id,
    configure_error_logging,
)

__all__ = [
    # Base exceptions
    "CheckwrightError",
    "CheckDefinitionError",
    "InvalidTargetError",
    "InvalidPatternError",
    "InvalidWaitError",
    "RecordingSequenceError",
    "ConfigurationError",
    "ReportWriteError",
    "DriverError",
    "VerdictError",

    # Error classification
    "ErrorClassification",
    "ErrorContext",
    "classify_error",
    "is_retryable_error",
    "is_definition_error",
    "get_recovery_strategy",
    "convert_to_framework_exception",
    "create_error_context",
    "RecoveryStrategy",

    # Structured logging
    "StructuredErrorLogger",
    "log_error_with_context",
    "log_poll_timeout",
    "log_verdict",
    "get_error_correlation_id",
    "configure_error_logging",
]
