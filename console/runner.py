"""Run a `MonitoringConsole` on a background event loop.

Streamlit re-executes the page script on every interaction, so the console
cannot live on the script's thread. `ConsoleRunner` owns a daemon thread
with its own asyncio loop; the page talks to the console only through the
thread-safe helpers below, which hop onto that loop.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Callable, Coroutine, Optional

from .coordinator import ConsoleMode, ConsoleSnapshot, MonitoringConsole


class ConsoleRunner(threading.Thread):
    """Daemon thread hosting the console's event loop."""

    def __init__(self, console: MonitoringConsole, timeout: float = 5.0) -> None:
        super().__init__(daemon=True, name="console-loop")
        self.console = console
        self.timeout = timeout
        self.loop = asyncio.new_event_loop()
        self._ready = threading.Event()
        self._error: Optional[BaseException] = None

    def run(self) -> None:
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_until_complete(self.console.start())
        except Exception as exc:
            self._error = exc
            self._ready.set()
            return
        self._ready.set()
        self.loop.run_forever()

    def start_and_wait(self) -> "ConsoleRunner":
        self.start()
        self._ready.wait(self.timeout)
        if self._error is not None:
            raise RuntimeError(f"Console failed to start: {self._error}") from self._error
        return self

    def submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        """Schedule a coroutine on the console loop without waiting."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a plain console method on the loop thread and return its result."""

        async def invoke() -> Any:
            return fn(*args)

        return self.submit(invoke()).result(self.timeout)

    def snapshot(self) -> ConsoleSnapshot:
        return self.call(self.console.snapshot)

    def toggle(self) -> ConsoleMode:
        return self.call(self.console.toggle)

    def prime_audio(self) -> None:
        self.call(self.console.emitter.prime)

    def analyze_now(self) -> concurrent.futures.Future:
        return self.submit(self.console.analyze_now())

    def shutdown(self) -> None:
        if self.loop.is_running():
            self.submit(self.console.stop()).result(self.timeout)
            self.loop.call_soon_threadsafe(self.loop.stop)
        self.join(self.timeout)
