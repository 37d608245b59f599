import allure
import pytest

from conftest import FakeClock
from core.poller import ConditionPoller, PollOutcome, PollStage, validate_seconds
from exceptions import DriverError, InvalidTargetError, InvalidWaitError


def make_poller(clock: FakeClock, interval: float = 0.5) -> ConditionPoller:
    return ConditionPoller(interval, clock=clock, sleep=clock.sleep)


def becomes_true_at(clock: FakeClock, moment: float):
    return lambda: clock() >= moment


@allure.feature("Condition Poller")
class TestAwaitCondition:

    @allure.story("Immediate success")
    @allure.title("A predicate that already holds is evaluated once without sleeping")
    def test_immediate_success(self):
        clock = FakeClock()
        outcome = make_poller(clock).await_condition(lambda: True, 5)

        assert outcome == PollOutcome(True, 0.0, None, 1)
        assert clock.sleeps == []

    @allure.story("Eventual success")
    @allure.title("Elapsed time is the time until the predicate held, not the budget")
    def test_eventual_success(self):
        clock = FakeClock()
        outcome = make_poller(clock).await_condition(becomes_true_at(clock, 2.0), 5)

        assert outcome.satisfied
        assert outcome.elapsed == pytest.approx(2.0)
        assert outcome.attempts == 5

    @allure.story("Timeout")
    @allure.title("A predicate that never holds times out with elapsed clamped to the budget")
    def test_timeout_clamped(self):
        clock = FakeClock()
        outcome = make_poller(clock).await_condition(lambda: False, 2)

        assert not outcome.satisfied
        assert outcome.timed_out
        assert outcome.elapsed == pytest.approx(2.0)
        assert outcome.failed_stage == "condition"
        assert clock.sleeps == [0.5, 0.5, 0.5, 0.5]

    @allure.story("Timeout")
    @allure.title("The last sleep is shortened so the deadline is never overshot")
    def test_last_sleep_shortened(self):
        clock = FakeClock()
        outcome = make_poller(clock).await_condition(lambda: False, 1.2)

        assert outcome.elapsed <= 1.2
        assert outcome.elapsed == pytest.approx(1.2)
        assert clock.sleeps[-1] == pytest.approx(0.2)

    @allure.story("Timeout")
    @allure.title("Elapsed never exceeds the budget even when the clock overshoots")
    def test_elapsed_clamp_with_slow_predicate(self):
        clock = FakeClock()

        def slow():
            clock.advance(0.7)
            return False

        outcome = make_poller(clock).await_condition(slow, 1.0)
        assert not outcome.satisfied
        assert outcome.elapsed == 1.0

    @allure.story("Zero budget")
    @allure.title("A zero budget evaluates the predicate exactly once")
    def test_zero_budget(self):
        clock = FakeClock()
        calls = []

        def predicate():
            calls.append(1)
            return False

        outcome = make_poller(clock).await_condition(predicate, 0)
        assert not outcome.satisfied
        assert outcome.elapsed == 0.0
        assert len(calls) == 1
        assert clock.sleeps == []

    @allure.story("Transient errors")
    @allure.title("Transient errors count as not yet satisfied")
    def test_transient_errors_retried(self):
        clock = FakeClock()
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise DriverError("stale element")
            return True

        outcome = make_poller(clock).await_condition(flaky, 5)
        assert outcome.satisfied
        assert outcome.attempts == 3
        assert outcome.elapsed == pytest.approx(1.0)

    @allure.story("Transient errors")
    @allure.title("A predicate that keeps failing with transient errors times out")
    def test_transient_errors_time_out(self):
        clock = FakeClock()

        def broken():
            raise DriverError("detached")

        outcome = make_poller(clock).await_condition(broken, 1)
        assert not outcome.satisfied
        assert outcome.elapsed == pytest.approx(1.0)

    @allure.story("Transient errors")
    @allure.title("Foreign errors are retried even when their message mentions configuration")
    def test_foreign_error_with_config_message_retried(self):
        clock = FakeClock()
        attempts = []

        def loading():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("config not loaded yet")
            return True

        outcome = make_poller(clock).await_condition(loading, 5)
        assert outcome.satisfied
        assert outcome.attempts == 2
        assert outcome.elapsed == pytest.approx(0.5)

    @allure.story("Definition errors")
    @allure.title("Test-authoring errors propagate out of the poll loop")
    def test_definition_error_propagates(self):
        clock = FakeClock()

        def malformed():
            raise InvalidTargetError("bad locator")

        with pytest.raises(InvalidTargetError):
            make_poller(clock).await_condition(malformed, 5)
        assert clock.sleeps == []

    @allure.story("Per-call interval")
    @allure.title("A per-call poll interval overrides the poller default")
    def test_poll_interval_override(self):
        clock = FakeClock()
        make_poller(clock).await_condition(lambda: False, 1, poll_interval=0.25)
        assert clock.sleeps == [0.25, 0.25, 0.25, 0.25]


@allure.feature("Condition Poller")
class TestAwaitChain:

    @allure.story("Remaining budget")
    @allure.title("A later stage gets what the earlier stage left of the budget")
    def test_remaining_budget_passed_on(self):
        clock = FakeClock()
        stage_two_started = []

        def displayed():
            stage_two_started.append(clock())
            return clock() >= 3.0

        outcome = make_poller(clock).await_chain(
            [PollStage("present", becomes_true_at(clock, 2.0)), PollStage("displayed", displayed)], 5
        )

        assert outcome.satisfied
        assert stage_two_started[0] == pytest.approx(2.0)
        assert outcome.elapsed == pytest.approx(3.0)

    @allure.story("Short circuit")
    @allure.title("A stage that times out stops the chain without evaluating later stages")
    def test_first_stage_timeout_short_circuits(self):
        clock = FakeClock()
        later = []

        outcome = make_poller(clock).await_chain(
            [PollStage("present", lambda: False), PollStage("displayed", lambda: later.append(1) or True)], 5
        )

        assert not outcome.satisfied
        assert outcome.failed_stage == "present"
        assert outcome.elapsed == 5
        assert later == []

    @allure.story("Short circuit")
    @allure.title("A stage with no budget left fails without being evaluated")
    def test_exhausted_budget_skips_stage(self):
        clock = FakeClock()
        later = []

        def slow_present():
            clock.advance(3.0)
            return True

        outcome = make_poller(clock).await_chain(
            [PollStage("present", slow_present), PollStage("displayed", lambda: later.append(1) or True)], 2
        )

        assert not outcome.satisfied
        assert outcome.failed_stage == "displayed"
        assert outcome.elapsed == 2
        assert later == []

    @allure.story("Zero budget")
    @allure.title("A zero-budget chain evaluates every stage once")
    def test_zero_budget_chain(self):
        clock = FakeClock()
        outcome = make_poller(clock).await_chain(
            [PollStage("present", lambda: True), PollStage("enabled", lambda: True)], 0
        )
        assert outcome == PollOutcome(True, 0.0, None, 2)

    @allure.story("Empty chain")
    @allure.title("A chain without stages is satisfied immediately")
    def test_empty_chain(self):
        outcome = make_poller(FakeClock()).await_chain([], 5)
        assert outcome.satisfied
        assert outcome.elapsed == 0.0


@allure.feature("Condition Poller")
class TestWaitValidation:

    @allure.story("Invalid waits")
    @allure.title("Negative, NaN and non-numeric waits are rejected")
    @pytest.mark.parametrize("seconds", [-1, float("nan"), "5", None, True])
    def test_invalid_seconds(self, seconds):
        with pytest.raises(InvalidWaitError):
            validate_seconds(seconds)

    @allure.story("Invalid waits")
    @allure.title("A negative budget is rejected before polling")
    def test_negative_budget(self):
        clock = FakeClock()
        with pytest.raises(InvalidWaitError):
            make_poller(clock).await_condition(lambda: True, -0.1)

    @allure.story("Valid waits")
    @allure.title("Integer waits are accepted as floats")
    def test_int_seconds(self):
        assert validate_seconds(3) == 3.0
        assert isinstance(validate_seconds(0), float)
