"""
Cooperative wall-clock budgets.

The pipeline is single-threaded and synchronous, so budgets cannot preempt
work. Instead long-running loops call Deadline.check() and every phase is
wrapped in a Deadline used as a context manager, which raises on exit if
the phase overran its budget.

Usage:
    overall = Deadline("complete dataset analysis", 60)
    with overall.child("report generation", 10) as budget:
        for section in sections:
            budget.check()
            ...
"""

import logging
import time
from typing import Optional

from insight_framework.core.exceptions import AnalysisTimeoutError

logger = logging.getLogger(__name__)


class Deadline:
    """
    Monotonic-clock budget for one named operation.

    A child deadline never outlives its parent: check() on a child also
    checks every ancestor, so an exhausted overall budget stops nested work.

    Attributes:
        operation: Human-readable name used in timeout errors
        seconds: Budget for this operation
    """

    def __init__(self, operation: str, seconds: float, parent: Optional["Deadline"] = None,
                 clock=time.monotonic):
        self.operation = operation
        self.seconds = float(seconds)
        self.parent = parent
        self._clock = clock
        self._started = clock()

    def child(self, operation: str, seconds: float) -> "Deadline":
        """Create a nested budget bounded by this one."""
        return Deadline(operation, seconds, parent=self, clock=self._clock)

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    @property
    def remaining(self) -> float:
        own = self.seconds - self.elapsed
        if self.parent is not None:
            return min(own, self.parent.remaining)
        return own

    def expired(self) -> bool:
        return self.elapsed > self.seconds

    def check(self) -> None:
        """
        Raise if this budget or any enclosing budget is exhausted.

        Raises:
            AnalysisTimeoutError: Naming the outermost exhausted operation
        """
        if self.parent is not None:
            self.parent.check()
        if self.expired():
            raise AnalysisTimeoutError(self.operation, self.seconds)

    def __enter__(self) -> "Deadline":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        logger.debug(f"{self.operation} finished in {self.elapsed:.3f}s (budget {self.seconds:g}s)")
        if exc_type is None:
            self.check()
        return False


def unbounded(operation: str = "analysis") -> Deadline:
    """Budget that never expires, for direct component calls outside the pipeline."""
    return Deadline(operation, float("inf"))
