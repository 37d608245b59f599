import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from tenacity import (
    Retrying,
    retry_if_exception,
    retry_if_result,
)

from exceptions import (
    InvalidWaitError,
    create_error_context,
    is_retryable_error,
    log_poll_timeout,
)


logger = logging.getLogger(__name__)

# Matches the driver's historical 500ms poll
DEFAULT_POLL_INTERVAL = 0.5


@dataclass(frozen=True)
class PollOutcome:
    # Result of one bounded wait; elapsed is always within [0, budget]
    satisfied: bool
    elapsed: float
    failed_stage: Optional[str] = None
    attempts: int = 0

    @property
    def timed_out(self) -> bool:
        return not self.satisfied


@dataclass(frozen=True)
class PollStage:
    # One layer of a composed wait, e.g. "present" before "displayed"
    name: str
    predicate: Callable[[], bool]


def validate_seconds(seconds, argument: str = "seconds") -> float:
    # Budgets and intervals are non-negative real numbers of seconds
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise InvalidWaitError(
            f"{argument} must be a number of seconds, got {type(seconds).__name__}",
            seconds=seconds,
            error_context=create_error_context(component="Condition Poller", operation="validate")
        )
    if math.isnan(seconds) or seconds < 0:
        raise InvalidWaitError(
            f"{argument} must not be negative, got {seconds}",
            seconds=seconds,
            error_context=create_error_context(component="Condition Poller", operation="validate")
        )
    return float(seconds)


class ConditionPoller:
    # Bounded polling of a predicate against a monotonic deadline
    # Clock and sleep are injectable so the deadline arithmetic can run on a fake clock

    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.poll_interval = validate_seconds(poll_interval, "poll_interval")
        self._clock = clock
        self._sleep = sleep

    def await_condition(
        self,
        predicate: Callable[[], bool],
        budget: float,
        poll_interval: Optional[float] = None,
        description: str = "condition"
    ) -> PollOutcome:
        # Evaluate predicate until it holds or the budget is spent
        budget = validate_seconds(budget, "budget")
        interval = self.poll_interval if poll_interval is None else validate_seconds(poll_interval, "poll_interval")

        start = self._clock()
        attempts = 0
        last_error = None

        def evaluate() -> bool:
            nonlocal attempts, last_error
            attempts += 1
            try:
                return bool(predicate())
            except Exception as e:
                if is_retryable_error(e):
                    last_error = e
                raise

        def deadline_reached(retry_state) -> bool:
            return self._clock() - start >= budget

        def remaining_slice(retry_state) -> float:
            # Never sleep past the deadline
            remaining = budget - (self._clock() - start)
            return max(0.0, min(interval, remaining))

        def before_sleep(retry_state):
            outcome = retry_state.outcome
            reason = (
                f"raised {type(outcome.exception()).__name__}"
                if outcome.failed else "returned false"
            )
            logger.debug(
                f"Waiting for {description}: attempt {retry_state.attempt_number} {reason}, "
                f"retrying in {retry_state.next_action.sleep:.3f}s"
            )

        retrying = Retrying(
            stop=deadline_reached,
            wait=remaining_slice,
            retry=retry_if_result(lambda satisfied: not satisfied) | retry_if_exception(is_retryable_error),
            before_sleep=before_sleep,
            retry_error_callback=lambda retry_state: False,
            sleep=self._sleep,
        )

        satisfied = retrying(evaluate)
        elapsed = min(max(0.0, self._clock() - start), budget)

        if not satisfied and last_error is not None and budget > 0:
            log_poll_timeout(
                condition=description,
                budget=budget,
                attempts=attempts,
                last_error=f"{type(last_error).__name__}: {last_error}"
            )

        return PollOutcome(
            satisfied=satisfied,
            elapsed=elapsed,
            failed_stage=None if satisfied else description,
            attempts=attempts
        )

    def await_chain(
        self,
        stages: Sequence[PollStage],
        budget: float,
        poll_interval: Optional[float] = None
    ) -> PollOutcome:
        # Later stages only get what earlier stages left of the budget
        budget = validate_seconds(budget, "budget")
        elapsed = 0.0
        attempts = 0

        for stage in stages:
            remaining = max(0.0, budget - elapsed)
            if budget > 0 and remaining <= 0:
                logger.debug(f"Budget of {budget}s spent before stage '{stage.name}' could start")
                return PollOutcome(False, budget, stage.name, attempts)

            outcome = self.await_condition(stage.predicate, remaining, poll_interval, stage.name)
            attempts += outcome.attempts
            if not outcome.satisfied:
                return PollOutcome(False, budget, stage.name, attempts)
            elapsed = min(budget, elapsed + outcome.elapsed)

        return PollOutcome(True, elapsed, None, attempts)
