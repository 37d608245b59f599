"""
Keeps secrets out of everything a check run writes.

Expected/actual texts often quote what the application showed: login forms,
cookies, API bodies echoing tokens. Every string headed for a report or a
log goes through ``mask_sensitive_data`` first.
"""

import copy
import logging
import re
from typing import Any, Pattern, Tuple


# Stops at quotes, separators and the start of report markup
_VALUE = r'["\']?\s*[:=]\s*["\']?[^"\';\s<&]+'

SECRET_PATTERNS: Tuple[Pattern, ...] = tuple(re.compile(pattern, re.IGNORECASE) for pattern in (
    r'sk-[a-zA-Z0-9]{40,}',
    r'gsk_[a-zA-Z0-9]{40,}',
    r'AIza[a-zA-Z0-9]{35}',
    r'eyJ[\w-]+\.[\w-]+\.[\w-]+',
    r'bearer\s+[a-zA-Z0-9\-._~+/]+=*',
    r'(?:password|passwd|pwd)' + _VALUE,
    r'(?:api_key|apikey|token|secret)' + _VALUE,
    r'authorization' + _VALUE,
    r'(?<=://)[^/\s:@]+:[^/\s@]+(?=@)',
))

# Mapping keys (JSON bodies, cookie names, log fields) whose string values are always masked.
# Plain "key" is left out so names such as config_key stay readable.
SENSITIVE_KEYS = (
    'api_key', 'apikey', 'access_key', 'private_key',
    'token', 'password', 'passwd', 'secret', 'auth', 'credential', 'session',
)


def is_sensitive_key(name: Any) -> bool:
    lowered = str(name).lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def mask_credential(value: str, mask_char: str = "*", reveal_chars: int = 4) -> str:
    """
    Mask a credential, keeping a few characters at each end for recognition.

    Values too short to reveal anything safely become a fixed-width mask.
    """
    if not value or len(value) <= reveal_chars * 2:
        return mask_char * 8

    hidden = max(8, len(value) - reveal_chars * 2)
    return f"{value[:reveal_chars]}{mask_char * hidden}{value[-reveal_chars:]}"


def _mask_text(text: str) -> str:
    for pattern in SECRET_PATTERNS:
        text = pattern.sub(lambda match: mask_credential(match.group(0)), text)
    return text


def mask_sensitive_data(data: Any, deep_copy: bool = True) -> Any:
    """
    Recursively mask secrets in strings, lists and mappings.

    Args:
        data: Value to mask
        deep_copy: Build new containers instead of masking mappings in place

    Returns:
        The masked value; non-text scalars are returned unchanged
    """
    if isinstance(data, str):
        return _mask_text(data)

    if isinstance(data, list):
        return [mask_sensitive_data(item, deep_copy) for item in data]

    if isinstance(data, dict):
        masked = {} if deep_copy else data
        for key, value in data.items():
            if isinstance(value, str) and is_sensitive_key(key):
                masked[key] = mask_credential(value)
            else:
                masked[key] = mask_sensitive_data(value, deep_copy)
        return masked

    return data


class SecureLogHandler(logging.Handler):
    """Masks each record and hands a copy to the wrapped handler."""

    def __init__(self, base_handler: logging.Handler):
        super().__init__(base_handler.level)
        self.base_handler = base_handler
        self.setFormatter(base_handler.formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Other handlers still receive the unmasked original
            masked = copy.copy(record)
            if isinstance(masked.msg, str):
                masked.msg = mask_sensitive_data(masked.msg)
            if isinstance(masked.args, tuple):
                masked.args = tuple(mask_sensitive_data(list(masked.args)))
            elif isinstance(masked.args, dict):
                masked.args = mask_sensitive_data(masked.args)
            self.base_handler.emit(masked)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self.base_handler.close()
        super().close()


def sanitize_for_report(data: Any) -> str:
    """Text safe to put in a check report."""
    if isinstance(data, str):
        return mask_sensitive_data(data)
    if isinstance(data, (dict, list)):
        return str(mask_sensitive_data(data))
    return str(data)


def mask_cookie_value(name: str, value: str) -> str:
    """Mask a cookie value when the cookie name marks it as a credential."""
    if value and is_sensitive_key(name):
        return mask_credential(value)
    return value
