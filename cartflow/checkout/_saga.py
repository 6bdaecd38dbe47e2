"""
Compensated steps — the settlement half of checkout.

    settle = S.step("charge", charge, compensate=refund).then(lambda receipt: S.step("clear", clear_cart(receipt)))
    result = await S.run_chain(settle)

If the second step fails, the first step's compensator runs with the value
the first step produced (the payment receipt is refunded).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from kungfu import Result, Ok, Error

from cartflow._types import Lazy

logger = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[T] = Callable[[T], Awaitable[None]]
"""Undo action; receives the value its step produced."""

type RecordedCompensator = tuple[str, object, Compensator[object]]


@dataclass(frozen=True, slots=True)
class SagaStep[T, E]:
    """
    One action plus the way to undo it.

    The compensator is only recorded once the action succeeded.
    """

    name: str
    action: Lazy[T, E]
    compensate: Compensator[T] | None = None

    def then[U](self, f: Callable[[T], SagaStep[U, E]]) -> Then[T, U, E]:
        """Run another step with this step's value."""
        return Then(self, f)


@dataclass(frozen=True, slots=True)
class Then[T, U, E]:
    """Sequential composition: first step, then the step built from its value."""

    first: SagaStep[T, E]
    next: Callable[[T], SagaStep[U, E]]


@dataclass(frozen=True, slots=True)
class SagaResult[T]:
    value: T
    steps_executed: int


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """Failed step plus how the rollback went."""

    error: E
    step_failed: str
    compensators_run: int
    compensators_failed: int

    @property
    def rollback_complete(self) -> bool:
        return self.compensators_failed == 0


# ═══════════════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    name: str,
    action: Lazy[T, E],
    compensate: Compensator[T] | None = None,
) -> SagaStep[T, E]:
    """
    Create a step.

    Example:
        charge = S.step(
            "charge",
            L.catching_async(lambda: gateway.charge(req), on_error=to_checkout_error),
            compensate=gateway.refund,
        )
    """
    return SagaStep(name=name, action=action, compensate=compensate)


# ═══════════════════════════════════════════════════════════════════════════════
# Execution
# ═══════════════════════════════════════════════════════════════════════════════


async def _run_step[T, E](
    s: SagaStep[T, E],
    compensators: list[RecordedCompensator],
) -> Result[T, E]:
    result = await s.action
    match result:
        case Ok(value):
            if s.compensate is not None:
                compensators.append((s.name, value, s.compensate))  # type: ignore[arg-type]
            return Ok(value)
        case Error(e):
            return Error(e)


async def _rollback(compensators: list[RecordedCompensator]) -> tuple[int, int]:
    """Run compensators newest first. Returns (run, failed)."""
    run = 0
    failed = 0
    for name, value, compensate in reversed(compensators):
        try:
            await compensate(value)
            run += 1
            logger.warning("Compensated step", step=name)
        except Exception:
            failed += 1
            logger.exception("Compensation failed", step=name)
    return run, failed


async def run_chain[T, U, E](chain: Then[T, U, E]) -> Result[SagaResult[U], SagaError[E]]:
    """
    Execute both steps; on failure undo what already succeeded.

    Example:
        match await S.run_chain(settle):
            case Ok(r):
                receipt, removed = r.value
            case Error(e):
                log(e.step_failed, e.rollback_complete)
    """
    compensators: list[RecordedCompensator] = []

    match await _run_step(chain.first, compensators):
        case Error(e):
            return Error(SagaError(error=e, step_failed=chain.first.name, compensators_run=0, compensators_failed=0))
        case Ok(value):
            second = chain.next(value)

    match await _run_step(second, compensators):
        case Ok(final):
            return Ok(SagaResult(value=final, steps_executed=2))
        case Error(e):
            run, failed = await _rollback(compensators)
            return Error(
                SagaError(
                    error=e,
                    step_failed=second.name,
                    compensators_run=run,
                    compensators_failed=failed,
                )
            )


__all__ = (
    "Compensator",
    "SagaStep",
    "Then",
    "SagaResult",
    "SagaError",
    "step",
    "run_chain",
)
