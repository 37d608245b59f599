"""
Check engine.

Every named check runs through the same flow:

1. Resolve the wait budget and record the expectation, so it is reported
   even when a precondition short-circuits the check.
2. Wait for the preconditions (gates) as one chain on a shared budget. A
   gate that never holds records FAIL naming the gate and returns the
   check's sentinel without fetching anything.
3. With budget left over, wait for the comparison itself to hold.
4. Fetch the actual value once, compare, record PASS or FAIL.
5. Return the raw actual value so tests can chain on it.

Mismatches never raise. Authoring errors (bad targets, patterns, waits)
raise before or during the check and leave nothing recorded for it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from core.config import WaitSettings
from core.poller import ConditionPoller, PollStage
from exceptions import create_error_context, is_definition_error, log_error_with_context

from .recorder import ResultRecorder
from .results import CheckStatus


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gate:
    """
    A precondition of a check.

    Attributes:
        name: Stage name, unique within one check
        predicate: Re-evaluated by the poller until it holds
        failure: Outcome text recorded when the gate never holds
    """
    name: str
    predicate: Callable[[], bool]
    failure: str


def _status(passed: bool) -> CheckStatus:
    return CheckStatus.PASS if passed else CheckStatus.FAIL


class CheckEngine:
    """
    Shared gate/fetch/compare/record flow.

    Args:
        recorder: Recorder of the owning test
        poller: Poller used for every wait
        settings: Wait settings of the scope (session, page or element)
    """

    def __init__(self, recorder: ResultRecorder, poller: ConditionPoller, settings: WaitSettings):
        self.recorder = recorder
        self.poller = poller
        self.settings = settings

    def scoped(self, settings: WaitSettings) -> "CheckEngine":
        """Same recorder and poller under different wait settings."""
        return CheckEngine(self.recorder, self.poller, settings)

    def run(
        self,
        expected: str,
        fetch: Callable[[], Any],
        verdict: Callable[[Any], bool],
        describe: Callable[[Any, bool], str],
        gates: Sequence[Gate] = (),
        wait_for: Optional[float] = None,
        sentinel: Any = None,
        settle: bool = True
    ) -> Any:
        """
        Run one value check.

        Args:
            expected: Expectation text
            fetch: Reads the actual value from the resolver
            verdict: Comparison policy applied to the actual value
            describe: Builds the outcome text from (actual, passed)
            gates: Preconditions waited for in order
            wait_for: Seconds to wait; None uses the scope default, 0 never waits
            sentinel: Returned when a precondition fails or the value cannot be read
            settle: Keep polling the comparison with the budget left after the gates

        Returns:
            The actual value, or the sentinel
        """
        budget = self.settings.resolve(wait_for)
        interval = self.settings.effective_poll_interval
        self.recorder.record_expected(expected, budget)

        try:
            outcome = self.poller.await_chain(
                [PollStage(gate.name, gate.predicate) for gate in gates], budget, interval
            )
            if not outcome.satisfied:
                failure = next(gate.failure for gate in gates if gate.name == outcome.failed_stage)
                self.recorder.record_actual(failure, CheckStatus.FAIL, outcome.elapsed)
                return sentinel

            elapsed = outcome.elapsed
            if settle and budget > elapsed:
                settled = self.poller.await_condition(
                    lambda: verdict(fetch()), budget - elapsed, interval, "expected value"
                )
                elapsed = min(budget, elapsed + settled.elapsed)

            try:
                actual = fetch()
            except Exception as e:
                if is_definition_error(e):
                    raise
                log_error_with_context(
                    e,
                    create_error_context(component="Check Engine", operation="fetch", expected=expected),
                    level="warning"
                )
                self.recorder.record_actual(
                    f"The actual value could not be read: {type(e).__name__}: {getattr(e, 'message', e)}",
                    CheckStatus.FAIL,
                    elapsed
                )
                return sentinel

            passed = bool(verdict(actual))
            self.recorder.record_actual(describe(actual, passed), _status(passed), elapsed)
            return actual
        finally:
            self._drop_unanswered()

    def _drop_unanswered(self) -> None:
        # A check that raised leaves no half-recorded result for the next one
        if self.recorder.pending:
            logger.debug("Discarding the expectation of a check that raised")
            self.recorder.discard_pending()

    def await_state(
        self,
        expected: str,
        stages: Sequence[Gate],
        success: str,
        wait_for: Optional[float] = None
    ) -> bool:
        """
        Wait for a chain of states and record whether they all held.

        Args:
            expected: Expectation text
            stages: States waited for in order; the last one is the target state
            success: Outcome text when every stage held
            wait_for: Seconds to wait; None uses the scope default

        Returns:
            True when every stage held within the budget
        """
        budget = self.settings.resolve(wait_for)
        self.recorder.record_expected(expected, budget)

        try:
            outcome = self.poller.await_chain(
                [PollStage(stage.name, stage.predicate) for stage in stages],
                budget,
                self.settings.effective_poll_interval
            )
            if outcome.satisfied:
                self.recorder.record_actual(success, CheckStatus.PASS, outcome.elapsed)
            else:
                failure = next(stage.failure for stage in stages if stage.name == outcome.failed_stage)
                logger.debug(f"State '{outcome.failed_stage}' did not hold within {budget}s")
                self.recorder.record_actual(failure, CheckStatus.FAIL, outcome.elapsed)
            return outcome.satisfied
        finally:
            self._drop_unanswered()
