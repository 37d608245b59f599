import json
import logging
import time
import uuid
from typing import Any, Dict, Optional

from core.security import SecureLogHandler, mask_sensitive_data

from .base import CheckwrightError, ErrorContext
from .classification import convert_to_framework_exception, create_error_context, get_recovery_strategy


ERROR_LOGGER_NAME = "checkwright.errors"

_PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_error_correlation_id() -> str:
    # Short random ID tying a log line to a report entry or verdict
    return uuid.uuid4().hex[:8]


class StructuredErrorLogger:
    """
    Writes framework events as one JSON document per log record.

    Every event shares the same envelope (timestamp, level, correlation ID,
    event type) so that failed fetches, exhausted waits and verdicts of one
    run can be filtered out of the same stream.
    """

    def __init__(self, logger_name: str = ERROR_LOGGER_NAME):
        self.logger = logging.getLogger(logger_name)

        if not self.logger.handlers:
            fallback = logging.StreamHandler()
            fallback.setFormatter(JSONFormatter())
            self.logger.addHandler(fallback)
            self.logger.setLevel(logging.INFO)

    def _emit(self, level: str, event_type: str, payload: Dict[str, Any],
              correlation_id: Optional[str] = None) -> str:
        correlation_id = correlation_id or get_error_correlation_id()
        document = {
            "timestamp": time.time(),
            "level": level.upper(),
            "correlation_id": correlation_id,
            "event_type": event_type,
        }
        document.update(payload)

        write = getattr(self.logger, level.lower(), self.logger.error)
        write(json.dumps(mask_sensitive_data(document), default=str, indent=2))
        return correlation_id

    def log_error(
        self,
        exception: BaseException,
        context: Optional[ErrorContext] = None,
        level: str = "error",
        additional_fields: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Log an exception with its classification and context.

        Returns:
            The correlation ID written with the event
        """
        if context is None:
            context = create_error_context()
        if context.correlation_id in ("", "unknown"):
            context.correlation_id = get_error_correlation_id()

        if isinstance(exception, CheckwrightError):
            framework_error = exception
        else:
            framework_error = convert_to_framework_exception(exception, context)

        details = {
            "type": type(exception).__name__,
            "message": str(exception),
            "classification": framework_error.classification.value,
            "is_retryable": framework_error.is_retryable(),
            "recovery_strategy": get_recovery_strategy(exception).value,
            "recovery_suggestions": framework_error.recovery_suggestions,
        }
        cause = exception.__cause__
        if cause is not None:
            details["cause"] = {"type": type(cause).__name__, "message": str(cause)}

        payload: Dict[str, Any] = {"error": details, "context": context.to_dict()}
        payload.update(additional_fields or {})
        return self._emit(level, "error", payload, context.correlation_id)

    def log_poll_timeout(self, condition: str, budget: float, attempts: int,
                         details: Optional[Dict[str, Any]] = None) -> str:
        # A wait that used its whole budget while the resolver kept failing
        return self._emit("info", "poll_timeout", {
            "poll": {
                "condition": condition,
                "budget_seconds": budget,
                "attempts": attempts,
                "details": details or {},
            }
        })

    def log_verdict(self, test_name: Optional[str], actual_errors: int, expected_errors: int,
                    details: Optional[Dict[str, Any]] = None) -> str:
        passed = actual_errors == expected_errors
        return self._emit("info" if passed else "warning", "verdict", {
            "verdict": {
                "test_name": test_name,
                "actual_errors": actual_errors,
                "expected_errors": expected_errors,
                "passed": passed,
                "details": details or {},
            }
        })


class JSONFormatter(logging.Formatter):
    """Pass structured events through, wrap anything else in a JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        try:
            document = json.loads(message)
        except (json.JSONDecodeError, TypeError):
            document = None

        if isinstance(document, dict):
            return json.dumps(document, default=str)

        line = {
            "timestamp": record.created,
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


_structured_logger = StructuredErrorLogger(ERROR_LOGGER_NAME)


def log_error_with_context(
    exception: BaseException,
    context: Optional[ErrorContext] = None,
    level: str = "error",
    **additional_fields
) -> str:
    return _structured_logger.log_error(exception, context, level, additional_fields)


def log_poll_timeout(condition: str, budget: float, attempts: int, **details) -> str:
    return _structured_logger.log_poll_timeout(condition, budget, attempts, details)


def log_verdict(test_name: Optional[str], actual_errors: int, expected_errors: int, **details) -> str:
    return _structured_logger.log_verdict(test_name, actual_errors, expected_errors, details)


def _make_handler(handler: logging.Handler, format_type: str, enable_security: bool) -> logging.Handler:
    if format_type.lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    return SecureLogHandler(handler) if enable_security else handler


def configure_error_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None,
    enable_security: bool = True
) -> logging.Logger:
    """
    Route the framework event logger to stderr and optionally a file.

    Args:
        level: Minimum level name, e.g. "INFO"
        format_type: "json" for one JSON document per line, anything else for plain text
        log_file: Extra file to append events to
        enable_security: Mask credentials in every record before it is written
    """
    logger = logging.getLogger(ERROR_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    logger.addHandler(_make_handler(logging.StreamHandler(), format_type, enable_security))
    if log_file:
        logger.addHandler(_make_handler(logging.FileHandler(log_file), format_type, enable_security))

    return logger
