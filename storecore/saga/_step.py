"""
Saga step creation.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable, Coroutine
from typing import Any

from kungfu import LazyCoroResult, Result
from combinators import lift as L

from storecore._types import Compensator
from storecore.saga._types import Step

# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    name: str,
    action: Callable[[], Coroutine[Any, Any, Result[T, E]]],
    compensate: Compensator[T] | None = None,
) -> Step[T, E]:
    """
    Create a compensated step from a Result-returning call.

    Args:
        name: Step label used in logs and SagaError.step_failed
        action: Zero-arg callable producing the Result coroutine
        compensate: Undo action, receives the step's value

    Example:
        from storecore import saga as S

        reserve = S.step(
            f"reserve:{line.product_id}",
            lambda: stock.reserve(line.product_id, line.quantity),
            compensate=lambda change: release(change),
        )
    """
    return Step(name=name, action=LazyCoroResult(action), compensate=compensate)


# ═══════════════════════════════════════════════════════════════════════════════
# from_async() — Create step from raising async callable
# ═══════════════════════════════════════════════════════════════════════════════


def from_async[T, E](
    name: str,
    action: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
    compensate: Compensator[T] | None = None,
) -> Step[T, E]:
    """
    Create step from an async callable that raises instead of returning Result.

    Example:
        S.from_async(
            "notify",
            lambda: mailer.send(order),
            on_error=lambda e: ShopErrors.persistence(str(e), e),
        )
    """
    return Step(
        name=name,
        action=L.catching_async(action, on_error=on_error),
        compensate=compensate,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("step", "from_async")
