"""
Element checks.

``ElementChecks`` bundles the check families for one element target:

    element.check_equals.text("Hello")
    element.check_contains.select_value("b")
    element.check_matches.value(r"\\d{5}", wait_for=2)
    element.check_excludes.clazz("disabled")
    element.wait_for.displayed()

Each element carries its own wait settings inheriting from the page, so
``change_default_wait`` on one element never affects another.
"""

from typing import Any, Callable, List, Optional, Sequence

from .drivers import ElementDriver
from .engine import CheckEngine, Gate
from .formatting import bold, format_collection, lower_first
from .policies import Comparison, compare, compile_pattern
from .targets import ElementTarget, TableCell


class _ElementCheck:
    # Shared gates and helpers for one element target

    def __init__(self, engine: CheckEngine, driver: ElementDriver, target: ElementTarget):
        self.engine = engine
        self.driver = driver
        self.target = target
        self.name = target.describe()

    def _expect(self, phrase: str) -> str:
        return f"Expected {lower_first(self.name)} {phrase}"

    # Preconditions

    def _present(self) -> Gate:
        return Gate(
            "present",
            lambda: self.driver.is_present(self.target),
            f"{self.name} is not present on the page"
        )

    def _input(self) -> Gate:
        return Gate(
            "input",
            lambda: self.driver.is_input(self.target),
            f"{self.name} is not an input on the page"
        )

    def _select(self) -> Gate:
        return Gate(
            "select",
            lambda: self.driver.is_select(self.target),
            f"{self.name} is not a select on the page"
        )

    def _table(self) -> Gate:
        return Gate(
            "table",
            lambda: self.driver.is_table(self.target),
            f"{self.name} is not a table on the page"
        )

    def _cell(self, cell: TableCell) -> Gate:
        return Gate(
            "cell",
            lambda: self.driver.get_table_cell(self.target, cell.row, cell.col) is not None,
            f"{cell.describe()} was not found within {lower_first(self.name)}"
        )

    def _run(
        self,
        expected: str,
        fetch: Callable[[], Any],
        policy: Comparison,
        value: Any,
        describe: Callable[[Any, bool], str],
        gates: Sequence[Gate],
        wait_for: Optional[float],
        sentinel: Any
    ) -> Any:
        return self.engine.run(
            expected,
            fetch=fetch,
            verdict=lambda actual: compare(policy, actual, value),
            describe=describe,
            gates=gates,
            wait_for=wait_for,
            sentinel=sentinel
        )

    def _class(self) -> Optional[str]:
        return self.driver.get_attribute(self.target, "class")

    def _attribute_names(self) -> List[str]:
        return sorted((self.driver.get_all_attributes(self.target) or {}).keys())


class ElementEquals(_ElementCheck):
    """Exact, case-sensitive equality checks."""

    def text(self, expected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"having text of {bold(expected)}"),
            lambda: self.driver.get_text(self.target),
            Comparison.EQUALS, expected,
            lambda actual, passed: f"{self.name} has the text of {bold(actual)}",
            [self._present()], wait_for, ""
        )

    def value(self, expected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"having a value of {bold(expected)}"),
            lambda: self.driver.get_value(self.target),
            Comparison.EQUALS, expected,
            lambda actual, passed: f"{self.name} has the value of {bold(actual)}",
            [self._present(), self._input()], wait_for, ""
        )

    def attribute(self, name: str, expected: str, wait_for: Optional[float] = None) -> Optional[str]:
        def describe(actual, passed):
            if actual is None:
                return f"{self.name} does not have the attribute {bold(name)}"
            return f"{self.name} has the attribute {bold(name)} with a value of {bold(actual)}"

        return self._run(
            self._expect(f"having attribute {bold(name)} with a value of {bold(expected)}"),
            lambda: self.driver.get_attribute(self.target, name),
            Comparison.EQUALS, expected,
            describe,
            [self._present()], wait_for, None
        )

    def css_value(self, prop: str, expected: str, wait_for: Optional[float] = None) -> Optional[str]:
        def describe(actual, passed):
            if actual is None:
                return f"{self.name} does not have a css property {bold(prop)}"
            return f"{self.name} has a css property {bold(prop)} with a value of {bold(actual)}"

        return self._run(
            self._expect(f"having a css property {bold(prop)} with a value of {bold(expected)}"),
            lambda: self.driver.get_css_value(self.target, prop),
            Comparison.EQUALS, expected,
            describe,
            [self._present()], wait_for, None
        )

    def clazz(self, expected: str, wait_for: Optional[float] = None) -> Optional[str]:
        def describe(actual, passed):
            if actual is None:
                return f"{self.name} does not have a class attribute"
            return f"{self.name} has a class value of {bold(actual)}"

        return self._run(
            self._expect(f"with class {bold(expected)}"),
            self._class,
            Comparison.EQUALS, expected,
            describe,
            [self._present()], wait_for, None
        )

    def selected_option(self, expected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"having a selected option of {bold(expected)}"),
            lambda: self.driver.get_selected_option(self.target),
            Comparison.EQUALS, expected,
            lambda actual, passed: f"{self.name} has the selected option of {bold(actual)}",
            [self._present(), self._select()], wait_for, ""
        )

    def selected_value(self, expected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"having a selected value of {bold(expected)}"),
            lambda: self.driver.get_selected_value(self.target),
            Comparison.EQUALS, expected,
            lambda actual, passed: f"{self.name} has the selected value of {bold(actual)}",
            [self._present(), self._select()], wait_for, ""
        )

    def select_options(self, expected: Sequence[str], wait_for: Optional[float] = None) -> List[str]:
        expected = list(expected)
        return self._run(
            self._expect(f"with select options of {format_collection(expected)}"),
            lambda: list(self.driver.get_select_options(self.target)),
            Comparison.EQUALS, expected,
            lambda actual, passed: f"{self.name} has select options of {format_collection(actual)}",
            [self._present(), self._select()], wait_for, []
        )

    def select_values(self, expected: Sequence[str], wait_for: Optional[float] = None) -> List[str]:
        expected = list(expected)
        return self._run(
            self._expect(f"with select values of {format_collection(expected)}"),
            lambda: list(self.driver.get_select_values(self.target)),
            Comparison.EQUALS, expected,
            lambda actual, passed: f"{self.name} has select values of {format_collection(actual)}",
            [self._present(), self._select()], wait_for, []
        )

    def text_at(self, row: int, col: int, expected: str, wait_for: Optional[float] = None) -> str:
        cell = TableCell(row, col)
        return self._run(
            f"Expected to find {lower_first(cell.describe())} within {lower_first(self.name)} "
            f"having text of {bold(expected)}",
            lambda: self.driver.get_table_cell(self.target, cell.row, cell.col),
            Comparison.EQUALS, expected,
            lambda actual, passed: (
                f"{cell.describe()} within {lower_first(self.name)} has the text of {bold(actual)}"
            ),
            [self._present(), self._table(), self._cell(cell)], wait_for, ""
        )


class ElementContains(_ElementCheck):
    """Substring, membership and count checks."""

    def clazz(self, expected: str, wait_for: Optional[float] = None) -> Optional[str]:
        def describe(actual, passed):
            if actual is None:
                return f"{self.name} does not have a class attribute"
            if passed:
                return f"{self.name} has a class value of {bold(actual)}, which contains {bold(expected)}"
            return f"{self.name} has a class value of {bold(actual)}"

        return self._run(
            self._expect(f"containing class {bold(expected)}"),
            self._class,
            Comparison.CONTAINS, expected,
            describe,
            [self._present()], wait_for, None
        )

    def attribute(self, name: str, wait_for: Optional[float] = None) -> List[str]:
        def describe(actual, passed):
            if passed:
                return f"{self.name} contains the attribute of {bold(name)}"
            return (
                f"{self.name} does not contain the attribute of {bold(name)}, "
                f"only the attributes {format_collection(actual)}"
            )

        return self._run(
            self._expect(f"with attribute {bold(name)}"),
            self._attribute_names,
            Comparison.MEMBERSHIP, name,
            describe,
            [self._present()], wait_for, []
        )

    def text(self, expected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"containing text {bold(expected)}"),
            lambda: self.driver.get_text(self.target),
            Comparison.CONTAINS, expected,
            lambda actual, passed: f"{self.name} has the text of {bold(actual)}",
            [self._present()], wait_for, ""
        )

    def value(self, expected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"containing value {bold(expected)}"),
            lambda: self.driver.get_value(self.target),
            Comparison.CONTAINS, expected,
            lambda actual, passed: f"{self.name} has the value of {bold(actual)}",
            [self._present(), self._input()], wait_for, ""
        )

    def select_option(self, option: str, wait_for: Optional[float] = None) -> List[str]:
        def describe(actual, passed):
            if passed:
                return f"{self.name} is present and contains the option {bold(option)}"
            return (
                f"{self.name} is present but does not contain the option {bold(option)}, "
                f"only the options {format_collection(actual)}"
            )

        return self._run(
            self._expect(f"with the option {bold(option)} available to be selected"),
            lambda: list(self.driver.get_select_options(self.target)),
            Comparison.MEMBERSHIP, option,
            describe,
            [self._present(), self._select()], wait_for, []
        )

    def select_value(self, value: str, wait_for: Optional[float] = None) -> List[str]:
        def describe(actual, passed):
            if passed:
                return f"{self.name} contains the value of {bold(value)}"
            return (
                f"{self.name} does not contain the value of {bold(value)}, "
                f"only the values {format_collection(actual)}"
            )

        return self._run(
            self._expect(f"having a select value of {bold(value)} available to be selected"),
            lambda: list(self.driver.get_select_values(self.target)),
            Comparison.MEMBERSHIP, value,
            describe,
            [self._present(), self._select()], wait_for, []
        )

    def select_options(self, count: int, wait_for: Optional[float] = None) -> int:
        return self._run(
            self._expect(f"with number of select options equal to {bold(count)}"),
            lambda: len(self.driver.get_select_options(self.target)),
            Comparison.COUNT, count,
            lambda actual, passed: f"{self.name} has {bold(actual)} select options",
            [self._present(), self._select()], wait_for, -1
        )

    def columns(self, count: int, wait_for: Optional[float] = None) -> int:
        def describe(actual, passed):
            if passed:
                return f"{self.name} has {bold(actual)} columns"
            return (
                f"{self.name} does not have the number of columns {bold(count)}. "
                f"Instead, {actual} columns were found"
            )

        return self._run(
            self._expect(f"with the number of table columns equal to {bold(count)}"),
            lambda: self.driver.get_column_count(self.target),
            Comparison.COUNT, count,
            describe,
            [self._present(), self._table()], wait_for, -1
        )

    def rows(self, count: int, wait_for: Optional[float] = None) -> int:
        def describe(actual, passed):
            if passed:
                return f"{self.name} has {bold(actual)} rows"
            return (
                f"{self.name} does not have the number of rows {bold(count)}. "
                f"Instead, {actual} rows were found"
            )

        return self._run(
            self._expect(f"with the number of table rows equal to {bold(count)}"),
            lambda: self.driver.get_row_count(self.target),
            Comparison.COUNT, count,
            describe,
            [self._present(), self._table()], wait_for, -1
        )


class ElementMatches(_ElementCheck):
    """Full-match regular expression checks."""

    def text(self, pattern: str, wait_for: Optional[float] = None) -> str:
        compiled = compile_pattern(pattern)
        return self._run(
            self._expect(f"having text matching pattern {bold(compiled.pattern)}"),
            lambda: self.driver.get_text(self.target),
            Comparison.MATCHES, compiled,
            lambda actual, passed: f"{self.name} has the text of {bold(actual)}",
            [self._present()], wait_for, ""
        )

    def text_at(self, row: int, col: int, pattern: str, wait_for: Optional[float] = None) -> str:
        cell = TableCell(row, col)
        compiled = compile_pattern(pattern)
        return self._run(
            f"Expected to find {lower_first(cell.describe())} within {lower_first(self.name)} "
            f"having text matching pattern {bold(compiled.pattern)}",
            lambda: self.driver.get_table_cell(self.target, cell.row, cell.col),
            Comparison.MATCHES, compiled,
            lambda actual, passed: (
                f"{cell.describe()} within {lower_first(self.name)} has the text of {bold(actual)}"
            ),
            [self._present(), self._table(), self._cell(cell)], wait_for, ""
        )

    def value(self, pattern: str, wait_for: Optional[float] = None) -> str:
        compiled = compile_pattern(pattern)
        return self._run(
            self._expect(f"having a value matching pattern {bold(compiled.pattern)}"),
            lambda: self.driver.get_value(self.target),
            Comparison.MATCHES, compiled,
            lambda actual, passed: f"{self.name} has the value of {bold(actual)}",
            [self._present(), self._input()], wait_for, ""
        )

    def selected_option(self, pattern: str, wait_for: Optional[float] = None) -> str:
        compiled = compile_pattern(pattern)
        return self._run(
            self._expect(f"having a selected option matching pattern {bold(compiled.pattern)}"),
            lambda: self.driver.get_selected_option(self.target),
            Comparison.MATCHES, compiled,
            lambda actual, passed: f"{self.name} has the selected option of {bold(actual)}",
            [self._present(), self._select()], wait_for, ""
        )

    def selected_value(self, pattern: str, wait_for: Optional[float] = None) -> str:
        compiled = compile_pattern(pattern)
        return self._run(
            self._expect(f"having a selected value matching pattern {bold(compiled.pattern)}"),
            lambda: self.driver.get_selected_value(self.target),
            Comparison.MATCHES, compiled,
            lambda actual, passed: f"{self.name} has the selected value of {bold(actual)}",
            [self._present(), self._select()], wait_for, ""
        )


class ElementExcludes(_ElementCheck):
    """Negated containment checks; a missing element fails them like any other check."""

    def clazz(self, unexpected: str, wait_for: Optional[float] = None) -> Optional[str]:
        return self._run(
            self._expect(f"not containing class {bold(unexpected)}"),
            lambda: self._class() or "",
            Comparison.EXCLUDES, unexpected,
            lambda actual, passed: f"{self.name} has a class value of {bold(actual)}",
            [self._present()], wait_for, None
        )

    def attribute(self, name: str, wait_for: Optional[float] = None) -> List[str]:
        def describe(actual, passed):
            if passed:
                return f"{self.name} does not contain the attribute of {bold(name)}"
            return f"{self.name} contains the attribute of {bold(name)}"

        return self._run(
            self._expect(f"without attribute {bold(name)}"),
            self._attribute_names,
            Comparison.EXCLUDES, name,
            describe,
            [self._present()], wait_for, []
        )

    def text(self, unexpected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"not containing text {bold(unexpected)}"),
            lambda: self.driver.get_text(self.target),
            Comparison.EXCLUDES, unexpected,
            lambda actual, passed: f"{self.name} has the text of {bold(actual)}",
            [self._present()], wait_for, ""
        )

    def value(self, unexpected: str, wait_for: Optional[float] = None) -> str:
        return self._run(
            self._expect(f"not containing value {bold(unexpected)}"),
            lambda: self.driver.get_value(self.target),
            Comparison.EXCLUDES, unexpected,
            lambda actual, passed: f"{self.name} has the value of {bold(actual)}",
            [self._present(), self._input()], wait_for, ""
        )

    def select_option(self, option: str, wait_for: Optional[float] = None) -> List[str]:
        def describe(actual, passed):
            if passed:
                return f"{self.name} does not contain the option {bold(option)}"
            return f"{self.name} contains the option {bold(option)}"

        return self._run(
            self._expect(f"without the option {bold(option)} available to be selected"),
            lambda: list(self.driver.get_select_options(self.target)),
            Comparison.EXCLUDES, option,
            describe,
            [self._present(), self._select()], wait_for, []
        )

    def select_value(self, value: str, wait_for: Optional[float] = None) -> List[str]:
        def describe(actual, passed):
            if passed:
                return f"{self.name} does not contain the value of {bold(value)}"
            return f"{self.name} contains the value of {bold(value)}"

        return self._run(
            self._expect(f"without a select value of {bold(value)} available to be selected"),
            lambda: list(self.driver.get_select_values(self.target)),
            Comparison.EXCLUDES, value,
            describe,
            [self._present(), self._select()], wait_for, []
        )


class ElementWaitFor(_ElementCheck):
    """
    Waits for an element state and records whether it was reached.

    States other than present/not present first wait for the element to be
    present, and only the remaining budget is spent on the state itself.
    Not displayed and not present also hold when the element is absent.
    """

    def change_default_wait(self, seconds: float) -> None:
        """Override the default wait for this element only."""
        self.engine.settings.change_default_wait(seconds)

    def _state(self, state: str, predicate: Callable[[], bool], wait_for: Optional[float],
               opposite: Optional[str] = None) -> bool:
        # Presence first, then the state on whatever budget is left
        failure = f"{self.name} is {opposite}" if opposite else f"{self.name} is not {state}"
        return self.engine.await_state(
            self._expect(f"to be {state}"),
            [self._present(), Gate(state, predicate, failure)],
            f"{self.name} is {state}",
            wait_for
        )

    def present(self, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            self._expect("to be present"),
            [self._present()],
            f"{self.name} is present on the page",
            wait_for
        )

    def not_present(self, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            self._expect("not to be present"),
            [Gate(
                "not present",
                lambda: not self.driver.is_present(self.target),
                f"{self.name} is present on the page"
            )],
            f"{self.name} is not present on the page",
            wait_for
        )

    def displayed(self, wait_for: Optional[float] = None) -> bool:
        return self._state("displayed", lambda: self.driver.is_displayed(self.target), wait_for)

    def not_displayed(self, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            self._expect("not to be displayed"),
            [Gate(
                "not displayed",
                lambda: not self.driver.is_present(self.target) or not self.driver.is_displayed(self.target),
                f"{self.name} is displayed"
            )],
            f"{self.name} is not displayed",
            wait_for
        )

    def enabled(self, wait_for: Optional[float] = None) -> bool:
        return self._state("enabled", lambda: self.driver.is_enabled(self.target), wait_for)

    def not_enabled(self, wait_for: Optional[float] = None) -> bool:
        return self._state("not enabled", lambda: not self.driver.is_enabled(self.target), wait_for, "enabled")

    def checked(self, wait_for: Optional[float] = None) -> bool:
        return self._state("checked", lambda: self.driver.is_checked(self.target), wait_for)

    def not_checked(self, wait_for: Optional[float] = None) -> bool:
        return self._state("not checked", lambda: not self.driver.is_checked(self.target), wait_for, "checked")

    def editable(self, wait_for: Optional[float] = None) -> bool:
        return self._state("editable", self._editable, wait_for)

    def not_editable(self, wait_for: Optional[float] = None) -> bool:
        return self._state("not editable", lambda: not self._editable(), wait_for, "editable")

    def _editable(self) -> bool:
        # An input that accepts typing
        return self.driver.is_input(self.target) and self.driver.is_enabled(self.target)


class ElementChecks:
    """
    All check families for one element.

    Args:
        engine: Engine of the enclosing page scope
        driver: Resolver answering element queries
        target: The element being checked
    """

    def __init__(self, engine: CheckEngine, driver: ElementDriver, target: ElementTarget):
        self.target = target
        self.settings = engine.settings.child()
        scoped = engine.scoped(self.settings)

        self.check_equals = ElementEquals(scoped, driver, target)
        self.check_contains = ElementContains(scoped, driver, target)
        self.check_matches = ElementMatches(scoped, driver, target)
        self.check_excludes = ElementExcludes(scoped, driver, target)
        self.wait_for = ElementWaitFor(scoped, driver, target)

    def change_default_wait(self, seconds: float) -> None:
        self.settings.change_default_wait(seconds)

    def __repr__(self) -> str:
        return f"ElementChecks({self.target})"
