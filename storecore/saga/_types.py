"""
Saga types — core data structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from kungfu import LazyCoroResult

from storecore._types import Compensator

# ═══════════════════════════════════════════════════════════════════════════════
# Step — Single Action with Compensation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Step[T, E]:
    """
    A single unit-of-work step: action + compensator.

    When action succeeds, compensator is recorded with the value it produced.
    If a later step fails, recorded compensators run in reverse.
    """

    name: str
    action: LazyCoroResult[T, E]
    compensate: Compensator[T] | None


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaResult[T]:
    """Successful run: every step's value, in step order."""

    values: tuple[T, ...]
    steps_executed: int
    compensators_recorded: int


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """Saga error with rollback status."""

    error: E
    step_failed: str
    compensators_run: int
    compensators_failed: int

    @property
    def rollback_complete(self) -> bool:
        return self.compensators_failed == 0


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Step",
    "SagaResult",
    "SagaError",
)
