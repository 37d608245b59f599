"""
Configuration for checkwright.

Wait settings are explicit objects threaded through each scope (session,
page, element) instead of process-wide statics. A child scope inherits its
parent's values until it overrides them with ``change_default_wait``.

Environment variables (read from the process environment, then a ``.env``
file found by python-dotenv):

    CHECKWRIGHT_DEFAULT_WAIT     default wait budget in seconds (5.0)
    CHECKWRIGHT_POLL_INTERVAL    poll interval in seconds (0.5)
    CHECKWRIGHT_REPORT_DIR       directory for JSON-lines check reports (unset)
    CHECKWRIGHT_LOG_LEVEL        framework log level (INFO)
"""

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values, find_dotenv

from exceptions import ConfigurationError, create_error_context

from .poller import DEFAULT_POLL_INTERVAL, validate_seconds


logger = logging.getLogger(__name__)

DEFAULT_WAIT = 5.0

ENV_DEFAULT_WAIT = "CHECKWRIGHT_DEFAULT_WAIT"
ENV_POLL_INTERVAL = "CHECKWRIGHT_POLL_INTERVAL"
ENV_REPORT_DIR = "CHECKWRIGHT_REPORT_DIR"
ENV_LOG_LEVEL = "CHECKWRIGHT_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class WaitSettings:
    """
    Scoped default wait and poll interval.

    Attributes:
        default_wait: Budget in seconds used when a check passes no explicit wait,
            or None to inherit from the parent scope
        poll_interval: Seconds between predicate evaluations, or None to inherit
        parent: Enclosing scope, e.g. the session settings for a page
    """
    default_wait: Optional[float] = None
    poll_interval: Optional[float] = None
    parent: Optional["WaitSettings"] = field(default=None, repr=False)

    def __post_init__(self):
        if self.default_wait is not None:
            self.default_wait = validate_seconds(self.default_wait, "default_wait")
        if self.poll_interval is not None:
            self.poll_interval = validate_seconds(self.poll_interval, "poll_interval")

    @property
    def effective_wait(self) -> float:
        """Default wait of this scope, falling back through parents."""
        if self.default_wait is not None:
            return self.default_wait
        if self.parent is not None:
            return self.parent.effective_wait
        return DEFAULT_WAIT

    @property
    def effective_poll_interval(self) -> float:
        """Poll interval of this scope, falling back through parents."""
        if self.poll_interval is not None:
            return self.poll_interval
        if self.parent is not None:
            return self.parent.effective_poll_interval
        return DEFAULT_POLL_INTERVAL

    def change_default_wait(self, seconds: float) -> None:
        """Override the default wait for this scope and its children only."""
        self.default_wait = validate_seconds(seconds, "seconds")
        logger.debug(f"Default wait changed to {self.default_wait}s")

    def resolve(self, wait_for: Optional[float]) -> float:
        """Explicit wait wins; None means this scope's default."""
        if wait_for is None:
            return self.effective_wait
        return validate_seconds(wait_for, "wait_for")

    def child(self) -> "WaitSettings":
        """New scope that inherits from this one until overridden."""
        return WaitSettings(parent=self)


@dataclass
class CheckwrightConfig:
    # Everything read from the environment at session start
    wait: WaitSettings
    report_dir: Optional[str] = None
    log_level: str = "INFO"


def _read_seconds(values: Mapping[str, Optional[str]], key: str, default: float) -> float:
    raw = values.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        seconds = float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{key} must be a number of seconds, got '{raw}'",
            config_key=key,
            expected_format="non-negative number, e.g. 5 or 0.5",
            error_context=create_error_context(component="Configuration", operation="load_config"),
            cause=e
        )
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        raise ConfigurationError(
            f"{key} must be a non-negative number of seconds, got '{raw}'",
            config_key=key,
            expected_format="non-negative number, e.g. 5 or 0.5",
            error_context=create_error_context(component="Configuration", operation="load_config")
        )
    return seconds


def load_config(
    dotenv_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> CheckwrightConfig:
    """
    Build the session configuration from a .env file and the environment.

    Process environment values take precedence over the .env file. The
    environment is never modified.

    Args:
        dotenv_path: Explicit .env file; searched for from the working directory when omitted
        environ: Mapping used instead of os.environ

    Returns:
        CheckwrightConfig with root WaitSettings

    Raises:
        ConfigurationError: If a value cannot be parsed
    """
    if dotenv_path is None:
        dotenv_path = find_dotenv(usecwd=True)

    values: Dict[str, Optional[str]] = {}
    if dotenv_path:
        values.update(dotenv_values(dotenv_path))
    values.update(os.environ if environ is None else environ)

    wait = WaitSettings(
        default_wait=_read_seconds(values, ENV_DEFAULT_WAIT, DEFAULT_WAIT),
        poll_interval=_read_seconds(values, ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)
    )

    log_level = (values.get(ENV_LOG_LEVEL) or "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError(
            f"{ENV_LOG_LEVEL} must be one of {', '.join(_LOG_LEVELS)}, got '{log_level}'",
            config_key=ENV_LOG_LEVEL,
            config_file=dotenv_path or None,
            error_context=create_error_context(component="Configuration", operation="load_config")
        )

    report_dir = (values.get(ENV_REPORT_DIR) or "").strip() or None

    return CheckwrightConfig(wait=wait, report_dir=report_dir, log_level=log_level)
