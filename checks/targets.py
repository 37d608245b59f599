"""
Target descriptors.

A target names what a check operates against: an element (locator type,
locator string and match index), a table cell inside an element, a JSON
key path inside a response body, or a response facet. Descriptors are
immutable and validated on construction; a malformed descriptor is a
test-authoring bug and raises InvalidTargetError instead of producing a
FAIL result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

from exceptions import InvalidTargetError, create_error_context

from .formatting import italic


class Locator(Enum):
    """Supported element locator strategies."""
    ID = "id"
    NAME = "name"
    CLASSNAME = "class name"
    CSS = "css selector"
    XPATH = "xpath"
    LINKTEXT = "link text"
    PARTIALLINKTEXT = "partial link text"
    TAGNAME = "tag name"


class ResponseFacet(Enum):
    """Named parts of an HTTP response."""
    CODE = "code"
    BODY = "body"
    MESSAGE = "message"


JsonKey = Union[str, int]
JsonPath = Sequence[JsonKey]


def _ordinal(number: int) -> str:
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


@dataclass(frozen=True)
class ElementTarget:
    """
    Element descriptor.

    Attributes:
        locator: How to find the element
        value: Locator string, e.g. "#login" for Locator.CSS
        match: Zero-based index among all matching elements
    """
    locator: Locator
    value: str
    match: int = 0

    def __post_init__(self):
        if not isinstance(self.locator, Locator):
            raise InvalidTargetError(
                f"locator type must be a Locator, got {self.locator!r}",
                target=repr(self.locator),
                error_context=create_error_context(component="Target Resolver", operation="describe")
            )
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidTargetError(
                "locator string must be a non-empty string",
                target=f"{self.locator.value}={self.value!r}",
                error_context=create_error_context(component="Target Resolver", operation="describe")
            )
        if isinstance(self.match, bool) or not isinstance(self.match, int) or self.match < 0:
            raise InvalidTargetError(
                f"match index must be a non-negative integer, got {self.match!r}",
                target=f"{self.locator.value}={self.value}",
                error_context=create_error_context(component="Target Resolver", operation="describe")
            )

    def describe(self) -> str:
        """Human-readable name used at the start of report sentences."""
        start = "Element" if self.match == 0 else f"The {_ordinal(self.match + 1)} element"
        return f"{start} with {italic(self.locator.value)} of {italic(self.value)}"

    def __str__(self) -> str:
        suffix = f"[{self.match}]" if self.match else ""
        return f"{self.locator.value}={self.value}{suffix}"


@dataclass(frozen=True)
class TableCell:
    # 1-based coordinates of a cell inside a table element
    row: int
    col: int

    def __post_init__(self):
        for name, number in (("row", self.row), ("col", self.col)):
            if isinstance(number, bool) or not isinstance(number, int) or number < 1:
                raise InvalidTargetError(
                    f"table {name} numbers start at 1, got {number!r}",
                    target=f"{name}={number!r}",
                    error_context=create_error_context(component="Target Resolver", operation="table_cell")
                )

    def describe(self) -> str:
        return f"Cell at row {self.row} and column {self.col}"


def validate_json_path(keys: JsonPath) -> Tuple[JsonKey, ...]:
    """
    Check a JSON key path and freeze it.

    Args:
        keys: Ordered object keys (str) and array indices (int)

    Returns:
        The path as a tuple

    Raises:
        InvalidTargetError: If the path is not a sequence of str/int keys
    """
    if isinstance(keys, (str, bytes)) or not isinstance(keys, Sequence):
        raise InvalidTargetError(
            f"JSON path must be a list of keys, got {keys!r}",
            target=repr(keys),
            error_context=create_error_context(component="Target Resolver", operation="json_path")
        )
    for key in keys:
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise InvalidTargetError(
                f"JSON path keys must be strings or array indices, got {key!r}",
                target=repr(list(keys)),
                error_context=create_error_context(component="Target Resolver", operation="json_path")
            )
        if isinstance(key, int) and key < 0:
            raise InvalidTargetError(
                f"JSON array indices must not be negative, got {key}",
                target=repr(list(keys)),
                error_context=create_error_context(component="Target Resolver", operation="json_path")
            )
    return tuple(keys)
