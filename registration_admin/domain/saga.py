"""Sequential saga runner - compensates completed steps newest first on the first hard failure"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from registration_admin.domain.exceptions import StoreError
from registration_admin.domain.results import CoordinatorError
from registration_admin.infrastructure.observability.metrics import (
    best_effort_failure_counter,
    compensation_counter,
    saga_step_failure_counter,
)


@dataclass
class SagaState:
    """Mutable state threaded through the steps of one saga run"""

    data: Dict[str, Any] = field(default_factory=dict)
    completed: List[str] = field(default_factory=list)
    compensated: List[str] = field(default_factory=list)
    compensation_failures: List[str] = field(default_factory=list)
    best_effort_failures: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.compensation_failures or self.best_effort_failures)


StepAction = Callable[[SagaState], Awaitable[Optional[CoordinatorError]]]
StepCompensation = Callable[[SagaState], Awaitable[None]]


@dataclass(frozen=True)
class SagaStep:
    """One forward action, optionally paired with its compensating action"""

    name: str
    action: StepAction
    compensation: Optional[StepCompensation] = None
    best_effort: bool = False


@dataclass
class SagaOutcome:
    """What a saga run produced: the final state and the error, if any"""

    state: SagaState
    error: Optional[CoordinatorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed_step(self) -> Optional[str]:
        return self.error.step if self.error else None


class SagaRunner:
    """Runs saga steps in order and compensates on the first hard failure"""

    def __init__(self, name: str):
        self.name = name

    async def run(self, steps: Sequence[SagaStep], state: Optional[SagaState] = None) -> SagaOutcome:
        state = state if state is not None else SagaState()
        executed: List[SagaStep] = []

        for step in steps:
            try:
                error = await self._invoke(step, state)
            except BaseException as e:
                # Cancellation or an adapter bug still unwinds what was written
                logging.error(
                    f"Saga step raised {type(e).__name__}, compensating before re-raising",
                    extra={"saga": self.name, "step": step.name},
                )
                await self._compensate(executed, state)
                raise

            if error is None:
                state.completed.append(step.name)
                executed.append(step)
                continue

            saga_step_failure_counter.labels(saga=self.name, step=step.name, kind=error.kind.value).inc()

            if step.best_effort:
                best_effort_failure_counter.labels(saga=self.name, step=step.name).inc()
                state.best_effort_failures.append(step.name)
                logging.warning(
                    f"Best-effort step failed: {error.message}",
                    extra={"saga": self.name, "step": step.name},
                )
                continue

            logging.error(
                f"Saga step failed: {error.message}",
                extra={"saga": self.name, "step": step.name, "error_kind": error.kind.value},
            )
            await self._compensate(executed, state)
            return SagaOutcome(state=state, error=error)

        return SagaOutcome(state=state)

    async def _invoke(self, step: SagaStep, state: SagaState) -> Optional[CoordinatorError]:
        try:
            error = await step.action(state)
        except StoreError as e:
            return CoordinatorError.store(str(e), step=step.name)
        except (TimeoutError, asyncio.TimeoutError) as e:
            return CoordinatorError.store(f"Store timeout: {str(e) or type(e).__name__}", step=step.name)

        if error is not None and error.step is None:
            return CoordinatorError(error.kind, error.message, step.name)
        return error

    async def _compensate(self, executed: List[SagaStep], state: SagaState) -> None:
        """Undo completed steps newest first; a failing compensation does not stop the rest"""
        for step in reversed(executed):
            if step.compensation is None:
                continue
            try:
                await step.compensation(state)
            except Exception as e:
                compensation_counter.labels(saga=self.name, step=step.name, outcome="failed").inc()
                state.compensation_failures.append(step.name)
                logging.error(
                    f"Compensation failed: {e}",
                    extra={"saga": self.name, "step": step.name},
                )
                continue

            compensation_counter.labels(saga=self.name, step=step.name, outcome="ok").inc()
            state.compensated.append(step.name)
            logging.info(
                "Compensation applied",
                extra={"saga": self.name, "step": step.name},
            )
