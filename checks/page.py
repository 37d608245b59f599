"""
Page-level checks: location, title, page text, dialogs and cookies.

``PageChecks`` carries the page's own wait settings; elements created from
the same session inherit from them.
"""

from typing import Callable, List, Optional, Sequence

from core.security import mask_cookie_value
from exceptions import CheckDefinitionError, create_error_context

from .drivers import PageDriver
from .engine import CheckEngine, Gate
from .formatting import bold, format_collection
from .policies import Comparison, compare, compile_pattern


NO_ALERT = "No alert is present on the page"
NO_CONFIRMATION = "No confirmation is present on the page"
NO_PROMPT = "No prompt is present on the page"


def _require_texts(texts: Sequence[str], operation: str) -> List[str]:
    if not texts:
        raise CheckDefinitionError(
            f"{operation} needs at least one text to look for",
            argument="texts",
            error_context=create_error_context(component="Page Checks", operation=operation)
        )
    for text in texts:
        if not isinstance(text, str):
            raise CheckDefinitionError(
                f"{operation} texts must be strings, got {text!r}",
                argument="texts",
                error_context=create_error_context(component="Page Checks", operation=operation)
            )
    return list(texts)


class _PageCheck:

    def __init__(self, engine: CheckEngine, driver: PageDriver):
        self.engine = engine
        self.driver = driver

    def _alert(self) -> Gate:
        return Gate("alert", self.driver.is_alert_present, NO_ALERT)

    def _confirmation(self) -> Gate:
        return Gate("confirmation", self.driver.is_confirmation_present, NO_CONFIRMATION)

    def _prompt(self) -> Gate:
        return Gate("prompt", self.driver.is_prompt_present, NO_PROMPT)

    def _cookie(self, name: str) -> Gate:
        return Gate(
            "cookie",
            lambda: self.driver.get_cookie(name) is not None,
            f"No cookie with the name {bold(name)} is stored for the page"
        )

    def _cookie_outcome(self, name: str) -> Callable[[Optional[str], bool], str]:
        def describe(actual, passed):
            shown = bold(mask_cookie_value(name, actual))
            if passed:
                return f"A cookie with the name {bold(name)} and a value of {shown} is stored for the page"
            return f"A cookie with the name {bold(name)} is stored for the page, but the value of the cookie is {shown}"
        return describe


class _PageComparisons(_PageCheck):
    # url/title/alert/confirmation/prompt/cookie compared under one policy

    policy = Comparison.EQUALS
    verb = "of"

    def _value(self, expected):
        return expected

    def _shown(self, expected) -> str:
        return bold(expected)

    def url(self, expected: str, wait_for: Optional[float] = None) -> str:
        value = self._value(expected)
        return self.engine.run(
            f"Expected to be on page with the URL {self.verb} {self._shown(expected)}",
            fetch=self.driver.get_url,
            verdict=lambda actual: compare(self.policy, actual, value),
            describe=lambda actual, passed: f"The page URL reads {bold(actual)}",
            wait_for=wait_for,
            sentinel=""
        )

    def title(self, expected: str, wait_for: Optional[float] = None) -> str:
        value = self._value(expected)
        return self.engine.run(
            f"Expected to be on page with the title {self.verb} {self._shown(expected)}",
            fetch=self.driver.get_title,
            verdict=lambda actual: compare(self.policy, actual, value),
            describe=lambda actual, passed: f"The page title reads {bold(actual)}",
            wait_for=wait_for,
            sentinel=""
        )

    def alert(self, expected: str, wait_for: Optional[float] = None) -> str:
        value = self._value(expected)
        return self.engine.run(
            f"Expected to find an alert with the text {self.verb} {self._shown(expected)} on the page",
            fetch=self.driver.get_alert_text,
            verdict=lambda actual: compare(self.policy, actual, value),
            describe=lambda actual, passed: f"An alert with text {bold(actual)} is present on the page",
            gates=[self._alert()],
            wait_for=wait_for,
            sentinel=""
        )

    def confirmation(self, expected: str, wait_for: Optional[float] = None) -> str:
        value = self._value(expected)
        return self.engine.run(
            f"Expected to find a confirmation with the text {self.verb} {self._shown(expected)} on the page",
            fetch=self.driver.get_confirmation_text,
            verdict=lambda actual: compare(self.policy, actual, value),
            describe=lambda actual, passed: f"A confirmation with text {bold(actual)} is present on the page",
            gates=[self._confirmation()],
            wait_for=wait_for,
            sentinel=""
        )

    def prompt(self, expected: str, wait_for: Optional[float] = None) -> str:
        value = self._value(expected)
        return self.engine.run(
            f"Expected to find a prompt with the text {self.verb} {self._shown(expected)} on the page",
            fetch=self.driver.get_prompt_text,
            verdict=lambda actual: compare(self.policy, actual, value),
            describe=lambda actual, passed: f"A prompt with text {bold(actual)} is present on the page",
            gates=[self._prompt()],
            wait_for=wait_for,
            sentinel=""
        )

    def cookie(self, name: str, expected: str, wait_for: Optional[float] = None) -> str:
        value = self._value(expected)
        return self.engine.run(
            f"Expected to find a cookie with the name {bold(name)} and a value {self.verb} "
            f"{bold(mask_cookie_value(name, expected))} stored for the page",
            fetch=lambda: self.driver.get_cookie(name),
            verdict=lambda actual: compare(self.policy, actual, value),
            describe=self._cookie_outcome(name),
            gates=[self._cookie(name)],
            wait_for=wait_for,
            sentinel=""
        )


class PageEquals(_PageComparisons):
    """Exact equality of page properties."""


class PageMatches(_PageComparisons):
    """Full-match regular expression checks of page properties."""

    policy = Comparison.MATCHES
    verb = "matching pattern"

    def _value(self, expected):
        # Compiled before anything is recorded
        return compile_pattern(expected)


class PageAssertions(_PageCheck):
    """
    Presence checks for page text, dialogs and cookies.

    The text checks accept several texts. Every text gets its own result and
    the return value is the number of texts that failed. ``text_visible_or``
    records a single result that passes when any of the texts is visible.
    """

    def _each(self, texts: Sequence[str], operation: str, check: Callable[[str], bool]) -> int:
        misses = 0
        for text in _require_texts(texts, operation):
            if not check(text):
                misses += 1
        return misses

    def _text_state(self, text: str, expected: str, probe: Callable[[str], bool], want: bool,
                    found: str, missing: str, wait_for: Optional[float]) -> bool:
        return self.engine.run(
            expected,
            fetch=lambda: bool(probe(text)),
            verdict=lambda actual: actual is want,
            describe=lambda actual, passed: found if actual else missing,
            wait_for=wait_for,
            sentinel=not want
        ) is want

    def text_present(self, *texts: str, wait_for: Optional[float] = None) -> int:
        return self._each(texts, "text_present", lambda text: self._text_state(
            text,
            f"Expected to find text {bold(text)} present on the page",
            self.driver.is_text_present, True,
            f"The text {bold(text)} is present on the page",
            f"The text {bold(text)} is not present on the page",
            wait_for
        ))

    def text_not_present(self, *texts: str, wait_for: Optional[float] = None) -> int:
        return self._each(texts, "text_not_present", lambda text: self._text_state(
            text,
            f"Expected not to find text {bold(text)} present on the page",
            self.driver.is_text_present, False,
            f"The text {bold(text)} is present on the page",
            f"The text {bold(text)} is not present on the page",
            wait_for
        ))

    def text_visible(self, *texts: str, wait_for: Optional[float] = None) -> int:
        return self._each(texts, "text_visible", lambda text: self._text_state(
            text,
            f"Expected to find text {bold(text)} visible on the page",
            self.driver.is_text_visible, True,
            f"The text {bold(text)} is visible on the page",
            f"The text {bold(text)} is not visible on the page",
            wait_for
        ))

    def text_not_visible(self, *texts: str, wait_for: Optional[float] = None) -> int:
        return self._each(texts, "text_not_visible", lambda text: self._text_state(
            text,
            f"Expected not to find text {bold(text)} visible on the page",
            self.driver.is_text_visible, False,
            f"The text {bold(text)} is visible on the page",
            f"The text {bold(text)} is not visible on the page",
            wait_for
        ))

    def text_visible_or(self, *texts: str, wait_for: Optional[float] = None) -> bool:
        candidates = _require_texts(texts, "text_visible_or")

        def describe(visible, passed):
            if passed:
                return f"The text {bold(visible[0])} is visible on the page"
            return f"None of the texts {format_collection(candidates)} are visible on the page"

        visible = self.engine.run(
            "Expected to find text " + ", or ".join(bold(text) for text in candidates) + " visible on the page",
            fetch=lambda: [text for text in candidates if self.driver.is_text_visible(text)],
            verdict=lambda found: len(found) > 0,
            describe=describe,
            wait_for=wait_for,
            sentinel=[]
        )
        return len(visible) > 0

    def _dialog_present(self, kind: str, present: Callable[[], bool], read: Callable[[], Optional[str]],
                        missing: str, wait_for: Optional[float]) -> bool:
        text = self.engine.run(
            f"Expected to find {kind} on the page",
            fetch=lambda: read() if present() else None,
            verdict=lambda actual: actual is not None,
            describe=lambda actual, passed: (
                f"{kind[0].upper()}{kind[1:]} with text {bold(actual)} is present on the page"
                if passed else missing
            ),
            wait_for=wait_for
        )
        return text is not None

    def _dialog_absent(self, kind: str, present: Callable[[], bool], missing: str,
                       wait_for: Optional[float]) -> bool:
        return self.engine.run(
            f"Expected not to find {kind} on the page",
            fetch=lambda: bool(present()),
            verdict=lambda actual: actual is False,
            describe=lambda actual, passed: missing if passed else f"{kind[0].upper()}{kind[1:]} is present on the page",
            wait_for=wait_for,
            sentinel=True
        ) is False

    def alert_present(self, wait_for: Optional[float] = None) -> bool:
        return self._dialog_present("an alert", self.driver.is_alert_present,
                                    self.driver.get_alert_text, NO_ALERT, wait_for)

    def alert_not_present(self, wait_for: Optional[float] = None) -> bool:
        return self._dialog_absent("an alert", self.driver.is_alert_present, NO_ALERT, wait_for)

    def confirmation_present(self, wait_for: Optional[float] = None) -> bool:
        return self._dialog_present("a confirmation", self.driver.is_confirmation_present,
                                    self.driver.get_confirmation_text, NO_CONFIRMATION, wait_for)

    def confirmation_not_present(self, wait_for: Optional[float] = None) -> bool:
        return self._dialog_absent("a confirmation", self.driver.is_confirmation_present,
                                   NO_CONFIRMATION, wait_for)

    def prompt_present(self, wait_for: Optional[float] = None) -> bool:
        return self._dialog_present("a prompt", self.driver.is_prompt_present,
                                    self.driver.get_prompt_text, NO_PROMPT, wait_for)

    def prompt_not_present(self, wait_for: Optional[float] = None) -> bool:
        return self._dialog_absent("a prompt", self.driver.is_prompt_present, NO_PROMPT, wait_for)

    def cookie_exists(self, name: str, wait_for: Optional[float] = None) -> bool:
        value = self.engine.run(
            f"Expected to find a cookie with the name {bold(name)} stored for the page",
            fetch=lambda: self.driver.get_cookie(name),
            verdict=lambda actual: actual is not None,
            describe=lambda actual, passed: (
                f"A cookie with the name {bold(name)} and a value of "
                f"{bold(mask_cookie_value(name, actual))} is stored for the page"
                if passed else f"No cookie with the name {bold(name)} is stored for the page"
            ),
            wait_for=wait_for
        )
        return value is not None

    def cookie_not_exists(self, name: str, wait_for: Optional[float] = None) -> bool:
        value = self.engine.run(
            f"Expected to find no cookie with the name {bold(name)} stored for the page",
            fetch=lambda: self.driver.get_cookie(name),
            verdict=lambda actual: actual is None,
            describe=lambda actual, passed: (
                f"No cookie with the name {bold(name)} is stored for the page"
                if passed else f"A cookie with the name {bold(name)} is stored for the page"
            ),
            wait_for=wait_for,
            sentinel=""
        )
        return value is None


class PageWaitFor(_PageCheck):
    """Waits for page conditions and records whether they were reached."""

    def change_default_wait(self, seconds: float) -> None:
        """Override the default wait for page checks and elements created afterwards."""
        self.engine.settings.change_default_wait(seconds)

    def alert_present(self, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            "Expected an alert to be present on the page",
            [self._alert()],
            "An alert is present on the page",
            wait_for
        )

    def confirmation_present(self, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            "Expected a confirmation to be present on the page",
            [self._confirmation()],
            "A confirmation is present on the page",
            wait_for
        )

    def prompt_present(self, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            "Expected a prompt to be present on the page",
            [self._prompt()],
            "A prompt is present on the page",
            wait_for
        )

    def location(self, url: str, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            f"Expected to be on page with the URL of {bold(url)}",
            [Gate("location", lambda: self.driver.get_url() == url,
                  f"The page URL does not read {bold(url)}")],
            f"The page URL reads {bold(url)}",
            wait_for
        )

    def title(self, title: str, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            f"Expected to be on page with the title of {bold(title)}",
            [Gate("title", lambda: self.driver.get_title() == title,
                  f"The page title does not read {bold(title)}")],
            f"The page title reads {bold(title)}",
            wait_for
        )

    def text_present(self, text: str, wait_for: Optional[float] = None) -> bool:
        return self.engine.await_state(
            f"Expected to find text {bold(text)} present on the page",
            [Gate("text", lambda: self.driver.is_text_present(text),
                  f"The text {bold(text)} is not present on the page")],
            f"The text {bold(text)} is present on the page",
            wait_for
        )


class PageChecks:
    """
    All page-level check families.

    Args:
        engine: Engine of the session scope
        driver: Resolver answering page queries
    """

    def __init__(self, engine: CheckEngine, driver: PageDriver):
        self.settings = engine.settings.child()
        scoped = engine.scoped(self.settings)
        self.engine = scoped

        self.check_equals = PageEquals(scoped, driver)
        self.check_matches = PageMatches(scoped, driver)
        self.check = PageAssertions(scoped, driver)
        self.wait_for = PageWaitFor(scoped, driver)

    def change_default_wait(self, seconds: float) -> None:
        self.settings.change_default_wait(seconds)
