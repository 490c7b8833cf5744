"""Background sweep task with explicit start/stop.

Caches and rate limiters own one of these instead of relying on an implicit
module-level timer, so the application lifespan controls when sweeping runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Run ``sweep()`` every ``interval_seconds`` on the running event loop."""

    def __init__(self, sweep: Callable[[], int], *, interval_seconds: float, name: str) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._sweep = sweep
        self._interval = interval_seconds
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=f"sweeper:{self._name}")
        logger.debug("sweeper.started", extra={"sweeper": self._name, "interval_s": self._interval})

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.debug("sweeper.stopped", extra={"sweeper": self._name})

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            if self._stop_event.is_set():
                break
            try:
                removed = self._sweep()
            except Exception:
                logger.exception("sweeper.failed", extra={"sweeper": self._name})
                continue
            if removed:
                logger.debug("sweeper.swept", extra={"sweeper": self._name, "removed": removed})
