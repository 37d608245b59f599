"""
HTTP response checks.

A response is a finished snapshot, so these checks never wait: every one
runs with a zero budget and records immediately.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from .drivers import ServiceResponse
from .engine import CheckEngine
from .formatting import bold, format_collection, format_json, format_path, italic
from .policies import Comparison, compare, compile_pattern, json_equal
from .targets import JsonKey, JsonPath, ResponseFacet, validate_json_path


_MISSING = object()


def resolve_path(body: Any, keys: Sequence[JsonKey]) -> Any:
    """
    Walk a JSON body along ``keys``.

    String keys index objects and integer keys index arrays. Returns the
    module-level missing marker when any step cannot be taken.
    """
    node = body
    for key in keys:
        if isinstance(key, str) and isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(key, int) and isinstance(node, list) and key < len(node):
            node = node[key]
        else:
            return _MISSING
    return node


def _size_note(size: int) -> str:
    if size == -1:
        return " which isn't an array"
    return f" which has a size of {italic(size)}"


class _ResponseCheck:

    def __init__(self, engine: CheckEngine, response: ServiceResponse):
        self.engine = engine
        self.response = response

    def _read(self, facet: ResponseFacet) -> Any:
        readers = {
            ResponseFacet.CODE: self.response.get_code,
            ResponseFacet.BODY: self.response.get_body,
            ResponseFacet.MESSAGE: self.response.get_message,
        }
        return readers[facet]()

    def _found(self) -> str:
        return "Found a response of " + format_json(self._read(ResponseFacet.BODY))

    def _run(self, expected: str, fetch, verdict, describe, sentinel: Any = None) -> Any:
        return self.engine.run(
            expected,
            fetch=fetch,
            verdict=verdict,
            describe=describe,
            wait_for=0,
            sentinel=sentinel,
            settle=False
        )


class ResponseEquals(_ResponseCheck):
    """Exact and structural equality of response facets."""

    def code(self, expected: int) -> int:
        return self._run(
            f"Expected to find a response code of {bold(expected)}",
            lambda: self._read(ResponseFacet.CODE),
            lambda actual: compare(Comparison.COUNT, actual, expected),
            lambda actual, passed: f"Found a response code of {bold(actual)}",
            sentinel=-1
        )

    def message(self, expected: str) -> Optional[str]:
        return self._run(
            f"Expected to find a response of {italic(expected)}",
            lambda: self._read(ResponseFacet.MESSAGE),
            lambda actual: compare(Comparison.EQUALS, actual, expected),
            lambda actual, passed: f"Found a response of {italic(actual)}"
        )

    def object_data(self, expected: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def fetch():
            body = self._read(ResponseFacet.BODY)
            return body if isinstance(body, dict) else None

        return self._run(
            "Expected to find a response of " + format_json(expected),
            fetch,
            lambda actual: actual is not None and compare(Comparison.STRUCTURAL, actual, expected),
            lambda actual, passed: self._found()
        )

    def array_data(self, expected: List[Any]) -> Optional[List[Any]]:
        def fetch():
            body = self._read(ResponseFacet.BODY)
            return body if isinstance(body, list) else None

        return self._run(
            "Expected to find a response of " + format_json(expected),
            fetch,
            lambda actual: actual is not None and compare(Comparison.STRUCTURAL, actual, expected),
            lambda actual, passed: self._found()
        )

    def nested_value(self, keys: JsonPath, expected: Any) -> Any:
        path = validate_json_path(keys)

        def describe(actual, passed):
            if actual is _MISSING:
                return f"Found no value at {format_path(path)}"
            return "Found " + format_json(actual)

        actual = self._run(
            f"Expected to find a response of {format_path(path)} with value of " + format_json(expected),
            lambda: resolve_path(self._read(ResponseFacet.BODY), path),
            lambda actual: actual is not _MISSING and compare(Comparison.STRUCTURAL, actual, expected),
            describe
        )
        return None if actual is _MISSING else actual

    def array_size(self, expected: int) -> int:
        def fetch():
            body = self._read(ResponseFacet.BODY)
            return len(body) if isinstance(body, list) else -1

        return self._run(
            f"Expected to find a response to be an array with size of {italic(expected)}",
            fetch,
            lambda actual: compare(Comparison.COUNT, actual, expected),
            lambda actual, passed: self._found() + _size_note(actual),
            sentinel=-1
        )

    def nested_array_size(self, keys: JsonPath, expected: int) -> int:
        path = validate_json_path(keys)
        found = {}

        def fetch():
            node = resolve_path(self._read(ResponseFacet.BODY), path)
            found["node"] = None if node is _MISSING else node
            return len(node) if isinstance(node, list) else -1

        return self._run(
            f"Expected to find a response of {format_path(path)} to be an array with size of {italic(expected)}",
            fetch,
            lambda actual: compare(Comparison.COUNT, actual, expected),
            lambda actual, passed: "Found " + format_json(found.get("node")) + _size_note(actual),
            sentinel=-1
        )


class ResponseContains(_ResponseCheck):
    """Membership checks against the response body and message."""

    def key_values(self, expected: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def verdict(actual):
            if not isinstance(actual, dict):
                return False
            return all(key in actual and json_equal(actual[key], value) for key, value in expected.items())

        return self._run(
            "Expected to find a response containing " + format_json(expected),
            lambda: self._read(ResponseFacet.BODY),
            verdict,
            lambda actual, passed: self._found()
        )

    def keys(self, expected: Sequence[str]) -> Optional[Dict[str, Any]]:
        expected = list(expected)

        def describe(actual, passed):
            if not isinstance(actual, dict):
                return self._found()
            return f"Found a response with keys {format_collection(actual.keys())}"

        return self._run(
            f"Expected to find a response with keys {format_collection(expected)}",
            lambda: self._read(ResponseFacet.BODY),
            lambda actual: isinstance(actual, dict) and all(key in actual for key in expected),
            describe
        )

    def array_member(self, expected: Any) -> Optional[List[Any]]:
        return self._run(
            "Expected to find a response array containing " + format_json(expected),
            lambda: self._read(ResponseFacet.BODY),
            lambda actual: isinstance(actual, list) and compare(Comparison.MEMBERSHIP, actual, expected),
            lambda actual, passed: self._found()
        )

    def message(self, expected: str) -> Optional[str]:
        return self._run(
            f"Expected to find a response containing {italic(expected)}",
            lambda: self._read(ResponseFacet.MESSAGE),
            lambda actual: compare(Comparison.CONTAINS, actual, expected),
            lambda actual, passed: f"Found a response of {italic(actual)}"
        )


class ResponseMatches(_ResponseCheck):
    """Full-match regular expression checks."""

    def message(self, pattern: str) -> Optional[str]:
        compiled = compile_pattern(pattern)
        return self._run(
            f"Expected to find a response matching {italic(pattern)}",
            lambda: self._read(ResponseFacet.MESSAGE),
            lambda actual: compare(Comparison.MATCHES, actual, compiled),
            lambda actual, passed: f"Found a response of {italic(actual)}"
        )

    def nested_value(self, keys: JsonPath, pattern: str) -> Any:
        path = validate_json_path(keys)
        compiled = compile_pattern(pattern)

        def verdict(actual):
            if actual is _MISSING or actual is None:
                return False
            text = actual if isinstance(actual, str) else json.dumps(actual)
            return compare(Comparison.MATCHES, text, compiled)

        def describe(actual, passed):
            if actual is _MISSING:
                return f"Found no value at {format_path(path)}"
            return "Found " + format_json(actual)

        actual = self._run(
            f"Expected to find a response of {format_path(path)} with value matching {italic(pattern)}",
            lambda: resolve_path(self._read(ResponseFacet.BODY), path),
            verdict,
            describe
        )
        return None if actual is _MISSING else actual


class ResponseChecks:
    """
    Check families for one HTTP response.

    Args:
        engine: Engine of the session scope
        response: The response under test
    """

    def __init__(self, engine: CheckEngine, response: ServiceResponse):
        self.response = response
        self.check_equals = ResponseEquals(engine, response)
        self.check_contains = ResponseContains(engine, response)
        self.check_matches = ResponseMatches(engine, response)
