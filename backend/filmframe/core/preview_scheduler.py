# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Preview Scheduler
Coalesces rapid edits into at most one pending composition.

Every submit() replaces the pending request and restarts the debounce
timer. When the timer fires, the latest request is composed in the
background. Each submission gets a generation number; a result is only
delivered if no newer request arrived while it was being computed, so a
stale preview can never overwrite a fresher one. A stage that has already
started is allowed to finish and its result is then dropped.
"""

from __future__ import annotations

import asyncio
import inspect
import traceback
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

from filmframe.config import get_settings
from filmframe.core.errors import CompositionError
from filmframe.core.pipeline import CompositionPipeline
from filmframe.models.composition import CompositedImage, CompositionRequest
from filmframe.utils.logger import get_logger

log = get_logger(__name__)


class PreviewResult(BaseModel):
    """One delivered preview: either an image or the error that prevented it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    generation: int
    image: Optional[CompositedImage] = None
    error: Optional[CompositionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


ResultCallback = Callable[[PreviewResult], Any]


class PreviewScheduler:
    """
    Debounced, latest-wins preview runner.

    Usage:
        scheduler = PreviewScheduler(pipeline)
        scheduler.submit(request_a)
        scheduler.submit(request_b)     # replaces request_a
        result = await scheduler.wait_for_result()
        await scheduler.aclose()
    """

    def __init__(
        self,
        pipeline: Optional[CompositionPipeline] = None,
        debounce_seconds: Optional[float] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self.pipeline = pipeline or CompositionPipeline()
        self.debounce_seconds = (
            get_settings().preview_debounce_seconds
            if debounce_seconds is None
            else max(0.0, float(debounce_seconds))
        )
        self.on_result = on_result

        self._generation = 0
        self._pending: Optional[CompositionRequest] = None
        self._timer: Optional[asyncio.Task] = None
        self._runs: set[asyncio.Task] = set()
        self._waiters: list[asyncio.Future] = []
        self._latest: Optional[PreviewResult] = None
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> Optional[PreviewResult]:
        """The most recently delivered result, if any."""
        return self._latest

    @property
    def is_idle(self) -> bool:
        timer_active = self._timer is not None and not self._timer.done()
        return not timer_active and not self._runs

    # ─── Submission ──────────────────────────────────────────────────────────

    def submit(self, request: CompositionRequest) -> int:
        """
        Queue `request` as the next preview, replacing any pending one.
        Must be called from a running event loop. Returns its generation.
        """
        if self._closed:
            raise RuntimeError("PreviewScheduler is closed.")

        self._generation += 1
        self._pending = request
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(
            self._fire_after_delay(self._generation)
        )
        log.debug("preview_submitted", generation=self._generation)
        return self._generation

    async def _fire_after_delay(self, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        request, self._pending = self._pending, None
        if request is None:
            return
        task = asyncio.get_running_loop().create_task(self._run(generation, request))
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)

    # ─── Execution ───────────────────────────────────────────────────────────

    async def _run(self, generation: int, request: CompositionRequest) -> None:
        try:
            image = await self.pipeline.compose(request)
            result = PreviewResult(generation=generation, image=image)
        except CompositionError as exc:
            result = PreviewResult(generation=generation, error=exc)

        if generation != self._generation:
            log.debug(
                "preview_discarded",
                generation=generation,
                latest_generation=self._generation,
            )
            return
        await self._deliver(result)

    async def _deliver(self, result: PreviewResult) -> None:
        self._latest = result
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(result)

        log.info("preview_delivered", generation=result.generation, ok=result.ok)

        if self.on_result is None:
            return
        try:
            outcome = self.on_result(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            # Runs in a background task; nothing upstream would observe it
            log.error(
                "preview_callback_failed",
                generation=result.generation,
                error=str(exc),
                exc_type=type(exc).__name__,
                traceback=traceback.format_exc(),
            )

    async def wait_for_result(self, timeout: Optional[float] = None) -> PreviewResult:
        """Wait for the next delivered preview."""
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        if timeout is None:
            return await waiter
        return await asyncio.wait_for(waiter, timeout)

    # ─── Shutdown ────────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        """Cancel the pending request and let in-flight runs finish undelivered."""
        self._closed = True
        self._generation += 1
        self._pending = None
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
            await asyncio.gather(self._timer, return_exceptions=True)
        if self._runs:
            await asyncio.gather(*self._runs, return_exceptions=True)
        for waiter in self._waiters:
            waiter.cancel()
        self._waiters = []
        log.debug("preview_scheduler_closed")
