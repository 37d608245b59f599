"""
Comparison policies.

Each check kind names one policy from the table below. Policies are pure
functions of (actual, expected) returning True for PASS; they never record
anything and never raise for a mismatch. A missing actual value (None) never
passes a positive policy.
"""

import re
from enum import Enum
from typing import Any, Callable, Dict, Pattern, Union

from exceptions import InvalidPatternError, create_error_context


class Comparison(Enum):
    """Comparison kinds used by checks."""
    EQUALS = "equals"
    CONTAINS = "contains"
    MATCHES = "matches"
    COUNT = "count"
    STRUCTURAL = "structural"
    MEMBERSHIP = "membership"
    EXCLUDES = "excludes"


def compile_pattern(pattern: Union[str, Pattern]) -> Pattern:
    """
    Compile an expected pattern for a 'matches' check.

    Args:
        pattern: Regular expression source or an already compiled pattern

    Returns:
        Compiled pattern

    Raises:
        InvalidPatternError: If the pattern is not a string or does not compile
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    if not isinstance(pattern, str):
        raise InvalidPatternError(
            repr(pattern),
            error_context=create_error_context(component="Check Evaluator", operation="compile_pattern"),
            cause=TypeError(f"expected a string pattern, got {type(pattern).__name__}")
        )
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(
            pattern,
            error_context=create_error_context(component="Check Evaluator", operation="compile_pattern"),
            cause=e
        )


def json_equal(actual: Any, expected: Any) -> bool:
    """
    Deep JSON equality.

    Objects compare by key set and values, arrays element-wise in order.
    Booleans never equal numbers even though Python treats True == 1.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if isinstance(actual, dict) or isinstance(expected, dict):
        if not (isinstance(actual, dict) and isinstance(expected, dict)):
            return False
        if actual.keys() != expected.keys():
            return False
        return all(json_equal(actual[key], expected[key]) for key in actual)
    if isinstance(actual, (list, tuple)) or isinstance(expected, (list, tuple)):
        if not (isinstance(actual, (list, tuple)) and isinstance(expected, (list, tuple))):
            return False
        if len(actual) != len(expected):
            return False
        return all(json_equal(a, e) for a, e in zip(actual, expected))
    return actual == expected


def _equals(actual: Any, expected: Any) -> bool:
    return actual is not None and actual == expected


def _contains(actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    return expected in actual


def _matches(actual: Any, expected: Union[str, Pattern]) -> bool:
    if actual is None:
        return False
    return compile_pattern(expected).fullmatch(str(actual)) is not None


def _count(actual: Any, expected: int) -> bool:
    if isinstance(actual, bool) or not isinstance(actual, int):
        return False
    return actual == expected


def _membership(actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    return any(json_equal(item, expected) for item in actual)


def _excludes(actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    return expected not in actual


POLICIES: Dict[Comparison, Callable[[Any, Any], bool]] = {
    Comparison.EQUALS: _equals,
    Comparison.CONTAINS: _contains,
    Comparison.MATCHES: _matches,
    Comparison.COUNT: _count,
    Comparison.STRUCTURAL: json_equal,
    Comparison.MEMBERSHIP: _membership,
    Comparison.EXCLUDES: _excludes,
}


def compare(kind: Comparison, actual: Any, expected: Any) -> bool:
    """Apply the policy for ``kind``; True means PASS."""
    return POLICIES[kind](actual, expected)
