import allure
import pytest

from checks import CheckStatus, Locator
from conftest import BaseCheckTest
from exceptions import CheckDefinitionError, InvalidPatternError


@allure.feature("Page Checks")
class TestPageEquals(BaseCheckTest):

    @allure.story("Location")
    @allure.title("URL and title compare exactly")
    def test_url_and_title(self):
        self.browser.url = "https://example.test/login"
        self.browser.title = "Sign in"

        assert self.session.app.check_equals.url("https://example.test/login") == "https://example.test/login"
        assert self.session.app.check_equals.title("Sign In", wait_for=0) == "Sign in"

        assert self.results[0].expected == "Expected to be on page with the URL of <b>https://example.test/login</b>"
        assert self.results[0].actual == "The page URL reads <b>https://example.test/login</b>"
        assert [result.status for result in self.results] == [CheckStatus.PASS, CheckStatus.FAIL]

    @allure.story("Dialogs")
    @allure.title("Alert text is compared once the alert is present")
    def test_alert_text(self):
        self.browser.dialog = ("alert", "Saved!")

        assert self.session.app.check_equals.alert("Saved!") == "Saved!"
        assert self.last.actual == "An alert with text <b>Saved!</b> is present on the page"

    @allure.story("Dialogs")
    @allure.title("Without an alert the check fails on presence and returns an empty string")
    def test_alert_missing(self):
        actual = self.session.app.check_equals.alert("Saved!", wait_for=1)

        assert actual == ""
        assert self.last.status == CheckStatus.FAIL
        assert self.last.actual == "After waiting for 1.0 seconds, no alert is present on the page"

    @allure.story("Dialogs")
    @allure.title("A confirmation is not mistaken for a prompt")
    def test_dialog_kinds(self):
        self.browser.dialog = ("confirm", "Delete?")

        assert self.session.app.check_equals.confirmation("Delete?") == "Delete?"
        assert self.session.app.check_equals.prompt("Delete?", wait_for=0) == ""
        assert self.last.actual == "No prompt is present on the page"

    @allure.story("Cookies")
    @allure.title("A cookie with a different value fails showing the stored value")
    def test_cookie_value_mismatch(self):
        self.browser.cookies["theme"] = "dark"

        actual = self.session.app.check_equals.cookie("theme", "light", wait_for=0)

        assert actual == "dark"
        assert self.last.actual == (
            "A cookie with the name <b>theme</b> is stored for the page, "
            "but the value of the cookie is <b>dark</b>"
        )

    @allure.story("Cookies")
    @allure.title("Credential cookie values are masked in the report")
    def test_cookie_value_masked(self):
        self.browser.cookies["session_id"] = "abcd1234efgh5678"

        actual = self.session.app.check_equals.cookie("session_id", "abcd1234efgh5678")

        assert actual == "abcd1234efgh5678"
        assert self.last.status == CheckStatus.PASS
        assert "abcd1234efgh5678" not in self.last.actual
        assert "abcd1234efgh5678" not in self.last.expected

    @allure.story("Cookies")
    @allure.title("A missing cookie fails on presence")
    def test_cookie_missing(self):
        assert self.session.app.check_equals.cookie("theme", "dark", wait_for=0) == ""
        assert self.last.actual == "No cookie with the name <b>theme</b> is stored for the page"


@allure.feature("Page Checks")
class TestPageMatches(BaseCheckTest):

    @allure.story("Patterns")
    @allure.title("Page title and URL are matched as full patterns")
    def test_title_and_url(self):
        self.browser.title = "Order #1234"
        self.browser.url = "https://example.test/orders/1234"

        self.session.app.check_matches.title(r"Order #\d+")
        self.session.app.check_matches.url(r"https://example\.test/orders", wait_for=0)

        assert [result.status for result in self.results] == [CheckStatus.PASS, CheckStatus.FAIL]

    @allure.story("Patterns")
    @allure.title("An invalid pattern raises before anything is recorded")
    def test_invalid_pattern(self):
        with pytest.raises(InvalidPatternError):
            self.session.app.check_matches.title("[a-")
        assert self.results == []


@allure.feature("Page Checks")
class TestPageAssertions(BaseCheckTest):

    @allure.story("Text")
    @allure.title("Each text gets its own result and the misses are counted")
    def test_text_present_many(self):
        self.browser.source = "<html><body>Welcome, Ada</body></html>"

        misses = self.session.app.check.text_present("Welcome", "Ada", "Logout", wait_for=0)

        assert misses == 1
        assert len(self.results) == 3
        assert [result.status for result in self.results] == [
            CheckStatus.PASS, CheckStatus.PASS, CheckStatus.FAIL
        ]
        assert self.last.actual == "The text <b>Logout</b> is not present on the page"
        assert self.session.error_count == 1

    @allure.story("Text")
    @allure.title("Text not present passes for absent text")
    def test_text_not_present(self):
        self.browser.source = "<p>Ready</p>"

        misses = self.session.app.check.text_not_present("Error", "Ready", wait_for=0)

        assert misses == 1
        assert self.last.actual == "The text <b>Ready</b> is present on the page"

    @allure.story("Text")
    @allure.title("Visibility is judged on rendered text only")
    def test_text_visible(self):
        self.browser.source = "<p>Shown</p><p hidden>Secret</p>"
        self.browser.visible_text = "Shown"

        assert self.session.app.check.text_visible("Shown") == 0
        assert self.session.app.check.text_not_visible("Secret") == 0
        assert self.session.app.check.text_visible("Secret", wait_for=0) == 1

    @allure.story("Text")
    @allure.title("An OR check records one result that passes when any text is visible")
    def test_text_visible_or(self):
        self.browser.visible_text = "Goodbye"

        assert self.session.app.check.text_visible_or("Hello", "Goodbye") is True
        assert len(self.results) == 1
        assert self.last.actual == "The text <b>Goodbye</b> is visible on the page"

    @allure.story("Text")
    @allure.title("An OR check with no visible text fails once")
    def test_text_visible_or_none(self):
        assert self.session.app.check.text_visible_or("Hello", "Goodbye", wait_for=0) is False
        assert len(self.results) == 1
        assert self.last.actual == "None of the texts <b>Hello, Goodbye</b> are visible on the page"
        assert self.session.error_count == 1

    @allure.story("Text")
    @allure.title("Text checks need at least one text")
    def test_no_texts(self):
        with pytest.raises(CheckDefinitionError):
            self.session.app.check.text_present()
        with pytest.raises(CheckDefinitionError):
            self.session.app.check.text_visible_or()
        assert self.results == []

    @allure.story("Text")
    @allure.title("Text that appears during the wait passes with the time it took")
    def test_text_appears(self):
        original = self.browser.is_text_present
        self.browser.is_text_present = lambda text: self.clock() >= 1.0 and original(text)
        self.browser.source = "Done"

        assert self.session.app.check.text_present("Done") == 0
        assert self.last.elapsed == pytest.approx(1.0)

    @allure.story("Dialogs")
    @allure.title("Dialog presence checks pass or fail on the dialog kind")
    def test_dialogs(self):
        self.browser.dialog = ("prompt", "Your name?")
        check = self.session.app.check

        assert check.prompt_present() is True
        assert check.alert_not_present() is True
        assert check.prompt_not_present(wait_for=0) is False
        assert check.confirmation_present(wait_for=0) is False

        assert self.results[0].actual == "A prompt with text <b>Your name?</b> is present on the page"
        assert self.results[1].actual == "No alert is present on the page"
        assert self.results[3].actual == "No confirmation is present on the page"
        assert self.session.error_count == 2

    @allure.story("Cookies")
    @allure.title("Cookie existence checks")
    def test_cookies(self):
        self.browser.cookies["lang"] = "en"
        check = self.session.app.check

        assert check.cookie_exists("lang") is True
        assert check.cookie_not_exists("tracking") is True
        assert check.cookie_exists("tracking", wait_for=0) is False
        assert check.cookie_not_exists("lang", wait_for=0) is False

        assert self.results[0].actual == "A cookie with the name <b>lang</b> and a value of <b>en</b> is stored for the page"
        assert self.session.error_count == 2


@allure.feature("Page Checks")
class TestPageWaitFor(BaseCheckTest):

    @allure.story("Location")
    @allure.title("Waiting for a location that never arrives fails after the budget")
    def test_location_timeout(self):
        self.browser.url = "https://example.test/login"

        assert self.session.app.wait_for.location("https://example.test/home", wait_for=2) is False
        assert self.last.elapsed == pytest.approx(2.0)
        assert self.last.actual == (
            "After waiting for 2.0 seconds, the page URL does not read <b>https://example.test/home</b>"
        )

    @allure.story("Location")
    @allure.title("Title and text waits pass as soon as the page matches")
    def test_title_and_text(self):
        self.browser.title = "Home"
        self.browser.source = "Welcome"

        assert self.session.app.wait_for.title("Home") is True
        assert self.session.app.wait_for.text_present("Welcome") is True
        assert self.session.error_count == 0

    @allure.story("Dialogs")
    @allure.title("Dialog waits pass only for their own kind")
    def test_dialog_waits(self):
        self.browser.dialog = ("alert", "Hi")

        assert self.session.app.wait_for.alert_present() is True
        assert self.session.app.wait_for.confirmation_present(wait_for=0) is False
        assert self.session.app.wait_for.prompt_present(wait_for=0) is False
        assert self.session.error_count == 2

    @allure.story("Default wait")
    @allure.title("The page default wait is inherited by elements created afterwards")
    def test_page_default_wait_inherited(self):
        self.session.app.wait_for.change_default_wait(1)

        self.session.app.wait_for.alert_present()
        self.session.element(Locator.ID, "ghost").wait_for.present()

        assert self.results[0].elapsed == pytest.approx(1.0)
        assert self.results[1].elapsed == pytest.approx(1.0)
