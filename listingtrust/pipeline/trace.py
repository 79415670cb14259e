"""Per-analysis execution trace: ordered, timed stage records."""

from __future__ import annotations

import inspect
import logging
import time
from typing import Awaitable, Callable, TypeVar

from listingtrust.schemas.models import StepStatus, TraceStep

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class TraceRecorder:
    """Owns the step list of one analysis; steps are appended in execution order and never changed."""

    def __init__(self) -> None:
        self._started = time.perf_counter()
        self._steps: list[TraceStep] = []

    @property
    def steps(self) -> list[TraceStep]:
        return list(self._steps)

    @property
    def elapsed_ms(self) -> int:
        return _elapsed_ms(self._started)

    def record(self, name: str, status: StepStatus, detail: str | None = None) -> None:
        """Append an untimed step (input validation, test-case lookup)."""
        self._steps.append(
            TraceStep(name=name, status=status, detail=detail if status == "failed" else None)
        )

    async def track(self, name: str, task: Callable[[], T | Awaitable[T]]) -> T:
        """
        Run ``task`` (sync or async) as stage ``name`` and record its duration.

        A failure is recorded as a ``failed`` step carrying the error message
        and then re-raised; there is no retry.
        """
        started = time.perf_counter()
        try:
            result = task()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            detail = str(e) or type(e).__name__
            self._steps.append(
                TraceStep(name=name, status="failed", duration_ms=_elapsed_ms(started), detail=detail)
            )
            logger.warning("Stage '%s' failed: %s", name, detail)
            raise
        self._steps.append(TraceStep(name=name, status="done", duration_ms=_elapsed_ms(started)))
        return result
