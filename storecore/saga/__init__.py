"""
Saga — ordered unit of work with compensation.

    from storecore import saga as S

    result = await S.run([
        S.step("reserve", reserve, compensate=release),
        S.step("insert", insert, compensate=delete),
    ])
"""

from __future__ import annotations

from storecore.saga._types import Step, SagaResult, SagaError
from storecore.saga._step import step, from_async
from storecore.saga._run import run, run_step, run_compensators

__all__ = (
    "Step",
    "SagaResult",
    "SagaError",
    "step",
    "from_async",
    "run",
    "run_step",
    "run_compensators",
)
