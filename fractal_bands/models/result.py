"""Update cycle results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Status(str, Enum):
    """Outcome of one update cycle."""

    OK = "ok"
    INSUFFICIENT_HISTORY = "insufficient_history"  # retry on a later cycle
    NOT_READY = "not_ready"  # engine not initialized / no bars yet
    INVARIANT_VIOLATION = "invariant_violation"  # pass aborted, see error


class InvariantViolationError(ArithmeticError):
    """A computed value left its mathematically guaranteed range."""

    def __init__(self, message: str, bar: int | None = None, value: float | None = None):
        super().__init__(message)
        self.bar = bar
        self.value = value


@dataclass
class UpdateResult:
    """Result of ``on_update``.

    Attributes:
        status: Cycle outcome.
        start_bar: Oldest offset planned for recomputation, if any.
        bars_computed: Number of bars actually written this cycle.
        failed_bar: Offset where an invariant violation stopped the pass.
        error: Description of the fault, if any.
    """

    status: Status
    start_bar: int | None = None
    bars_computed: int = 0
    failed_bar: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == Status.OK
