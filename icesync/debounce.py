"""
Webhook debouncing.

Todoist fires a webhook for every edit, so a burst of edits arrives as a
burst of calls. The first call of a burst is admitted and schedules one
run after a settle delay of ``min_interval``; every call that arrives
while that run is pending or in flight, or sooner than ``min_interval``
after the last admission, is dropped. Dropped calls leave no work behind.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .logger import StructuredLogger, get_logger

ALREADY_PROCESSING = "already processing"
TOO_SOON = "too soon"


@dataclass(frozen=True)
class AdmissionResult:
    admitted: bool
    reason: Optional[str] = None

    @classmethod
    def accept(cls) -> "AdmissionResult":
        return cls(True)

    @classmethod
    def reject(cls, reason: str) -> "AdmissionResult":
        return cls(False, reason)


class RunController:
    """Holds the run state: when the last run was admitted and whether one is active."""

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic):
        self.min_interval = min_interval
        self.clock = clock
        self.last_processed: Optional[float] = None
        self.is_processing = False

    def try_admit(self) -> AdmissionResult:
        if self.is_processing:
            return AdmissionResult.reject(ALREADY_PROCESSING)
        now = self.clock()
        if self.last_processed is not None and now - self.last_processed < self.min_interval:
            return AdmissionResult.reject(TOO_SOON)
        self.last_processed = now
        self.is_processing = True
        return AdmissionResult.accept()

    def release(self):
        self.is_processing = False

    @asynccontextmanager
    async def slot(self):
        """Hold an admitted slot; it is released on every exit path."""
        try:
            yield self
        finally:
            self.release()


class TriggerDebouncer:
    """
    Turns webhook calls into at most one deferred run per admission.

    Args:
        controller: Run state shared by every trigger
        run: Coroutine function performing one reconciliation run
        logger: Logger for admissions and run failures (default: global logger)
    """

    def __init__(
        self,
        controller: RunController,
        run: Callable[[], Awaitable[object]],
        logger: Optional[StructuredLogger] = None,
    ):
        self.controller = controller
        self.run = run
        self._logger = logger
        self._task: Optional[asyncio.Task] = None

    @property
    def logger(self) -> StructuredLogger:
        return self._logger or get_logger()

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_trigger(self) -> AdmissionResult:
        """Admit or drop one trigger. Must be called from the running event loop."""
        result = self.controller.try_admit()
        self.logger.record_trigger(result.admitted)
        if not result.admitted:
            self.logger.info("Skipping processing to avoid flooding.", reason=result.reason)
            return result

        try:
            self._task = asyncio.get_running_loop().create_task(self._deferred_run())
        except BaseException:
            self.controller.release()
            raise
        self.logger.info("Webhook received. Processing tasks...", delay=self.controller.min_interval)
        return result

    async def _deferred_run(self):
        async with self.controller.slot():
            await asyncio.sleep(self.controller.min_interval)
            self.logger.info("Processing tasks now...")
            self.logger.record_run_start()
            try:
                await self.run()
            except Exception as e:
                self.logger.record_run_end(e)
                self.logger.error("Error processing tasks", error=str(e), type=type(e).__name__)
            else:
                self.logger.record_run_end()
                self.logger.info("Tasks processed successfully.")

    async def drain(self):
        """Wait for a scheduled or running run to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)
