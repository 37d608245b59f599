import logging


logger = logging.getLogger(__name__)


class ErrorAggregator:
    # Per-test count of failed checks; only ever grows
    # A new test gets a new aggregator instead of a reset

    def __init__(self):
        self._count = 0

    def add_error(self) -> None:
        self._count += 1

    def add_errors(self, count: int) -> None:
        # Used when a batch of sub-checks hands back its own failure tally
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError(f"error count must be an integer, got {count!r}")
        if count < 0:
            raise ValueError(f"error count must not be negative, got {count}")
        self._count += count
        if count:
            logger.debug(f"Added {count} errors, total now {self._count}")

    def get_error_count(self) -> int:
        return self._count

    @property
    def error_count(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"ErrorAggregator(error_count={self._count})"
