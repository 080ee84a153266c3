"""Cancellable periodic timers on the asyncio loop."""

from __future__ import annotations

import asyncio
import warnings
from typing import Callable, Optional


class PeriodicTimer:
    """Call ``callback`` every ``period`` seconds until cancelled.

    The first call happens one period after `start`. The callback runs on
    the loop and must not block; a callback that raises is reported and
    the timer keeps running.
    """

    def __init__(self, period: float, callback: Callable[[], None], name: str = "timer") -> None:
        if period <= 0:
            raise ValueError(f"Timer period must be positive, got {period}")
        self.period = period
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.period)
            try:
                self.callback()
            except Exception as exc:
                warnings.warn(f"[{self.name}] tick failed: {exc}", stacklevel=2)
