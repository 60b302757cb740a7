"""
Saga execution with automatic rollback.

Steps run strictly in order; the first failure stops the run and
every compensator recorded so far runs in reverse.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from kungfu import Result, Ok, Error

from storecore._types import Compensator
from storecore.saga._types import Step, SagaResult, SagaError

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Recorded Compensator
# ═══════════════════════════════════════════════════════════════════════════════

type RecordedCompensator[T] = tuple[str, T, Compensator[T]]

# ═══════════════════════════════════════════════════════════════════════════════
# run_step() — Execute single step
# ═══════════════════════════════════════════════════════════════════════════════


async def run_step[T, E](
    step: Step[T, E],
    compensators: list[RecordedCompensator[T]],
) -> Result[T, E]:
    """Execute single step, recording compensator on success."""
    result = await step.action
    match result:
        case Ok(value):
            if step.compensate is not None:
                compensators.append((step.name, value, step.compensate))
            return Ok(value)
        case Error(e):
            return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# run_compensators() — Rollback
# ═══════════════════════════════════════════════════════════════════════════════


async def run_compensators[T](
    compensators: list[RecordedCompensator[T]],
) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0

    for name, value, comp in reversed(compensators):
        try:
            outcome = await comp(value)
        except Exception:
            logger.exception("Compensation of step %s raised", name)
            comp_failed += 1
            continue

        if isinstance(outcome, Error):
            logger.error("Compensation of step %s failed: %s", name, outcome.error)
            comp_failed += 1
        else:
            comp_run += 1

    return comp_run, comp_failed


# ═══════════════════════════════════════════════════════════════════════════════
# run() — Execute Steps
# ═══════════════════════════════════════════════════════════════════════════════


async def run[T, E](
    steps: Sequence[Step[T, E]],
) -> Result[SagaResult[T], SagaError[E]]:
    """
    Execute steps in order with automatic rollback on failure.

    On success: returns SagaResult with every step's value.
    On failure: runs compensators in reverse, returns SagaError.

    Example:
        from storecore import saga as S

        result = await S.run([
            S.step("reserve", reserve_stock, compensate=release_stock),
            S.step("insert", insert_order, compensate=delete_order),
            S.step("clear", clear_cart),
        ])

        match result:
            case Ok(r):
                print(f"Done: {r.values}")
            case Error(e):
                print(f"Failed at {e.step_failed}: {e.error}")
    """
    compensators: list[RecordedCompensator[T]] = []
    values: list[T] = []

    for step in steps:
        result = await run_step(step, compensators)

        match result:
            case Ok(value):
                values.append(value)

            case Error(error):
                logger.warning(
                    "Step %s failed, rolling back %d step(s)",
                    step.name,
                    len(compensators),
                )
                comp_run, comp_failed = await run_compensators(compensators)

                return Error(SagaError(
                    error=error,
                    step_failed=step.name,
                    compensators_run=comp_run,
                    compensators_failed=comp_failed,
                ))

    return Ok(SagaResult(
        values=tuple(values),
        steps_executed=len(values),
        compensators_recorded=len(compensators),
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("run", "run_step", "run_compensators")
