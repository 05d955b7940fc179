"""
Periodic background loops.

Each loop runs as an asyncio task that wakes either on its interval or on its
cancellation event, whichever comes first. A failing callback is logged and
counted, and the loop keeps running.
"""

import asyncio
import inspect
import time
from typing import Any

from apphost.core.interfaces import IAsyncLoop, IAsyncProvider, LoopCallback
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)


class AsyncLoop(IAsyncLoop):
    """A named periodic loop bound to a cancellation event."""

    def __init__(self, name: str, callback: LoopCallback, repeat_every: float):
        self._name = name
        self._callback = callback
        self.repeat_every = repeat_every

        self.run_count = 0
        self.failure_count = 0
        self.last_exception: Exception | None = None
        self.started_at: float | None = None
        self._task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_faulted(self) -> bool:
        return self.last_exception is not None

    def run(self, cancellation: asyncio.Event, start_after: float | None = None) -> "AsyncLoop":
        """Schedule the loop on the running event loop."""
        if self._task is not None:
            raise RuntimeError(f"Loop {self._name} is already running")

        self.started_at = time.time()
        self._task = asyncio.create_task(self._run(cancellation, start_after), name=self._name)
        return self

    async def _run(self, cancellation: asyncio.Event, start_after: float | None) -> None:
        logger.debug(f"Loop {self._name} started")

        if start_after and await self._wait(cancellation, start_after):
            logger.debug(f"Loop {self._name} stopped before its first run")
            return

        while not cancellation.is_set():
            try:
                result = self._callback(cancellation)
                if inspect.isawaitable(result):
                    await result
                self.run_count += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.failure_count += 1
                self.last_exception = e
                logger.error(f"Error in loop {self._name}: {e}", exc_info=True)

            if await self._wait(cancellation, self.repeat_every):
                break

        logger.debug(f"Loop {self._name} stopped")

    @staticmethod
    async def _wait(cancellation: asyncio.Event, timeout: float) -> bool:
        """Wait for the interval; True when cancellation fired first."""
        try:
            await asyncio.wait_for(cancellation.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def dispose(self) -> None:
        if self._task is None:
            return

        if not self._task.done():
            self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        logger.debug(f"Loop {self._name} disposed")

    def get_info(self) -> dict[str, Any]:
        return {
            "name": self._name,
            "running": self.is_running,
            "runs": self.run_count,
            "failures": self.failure_count,
            "last_error": str(self.last_exception) if self.last_exception else None,
        }


class AsyncProvider(IAsyncProvider):
    """Creates periodic loops and keeps track of them for statistics."""

    def __init__(self):
        self._loops: dict[str, AsyncLoop] = {}

    def create_and_run_periodic_loop(
        self,
        name: str,
        callback: LoopCallback,
        cancellation: asyncio.Event,
        repeat_every: float,
        start_after: float | None = None
    ) -> AsyncLoop:
        if repeat_every <= 0:
            raise ValueError("repeat_every must be positive")

        loop = AsyncLoop(name, callback, repeat_every)
        self._loops[name] = loop
        logger.debug(f"Creating periodic loop {name} every {repeat_every}s")
        return loop.run(cancellation, start_after)

    def get_loop(self, name: str) -> AsyncLoop | None:
        return self._loops.get(name)

    def list_loops(self) -> list[AsyncLoop]:
        return list(self._loops.values())

    def get_statistics(self, faulty_only: bool = False) -> str:
        loops = [loop for loop in self._loops.values() if loop.is_faulted or not faulty_only]
        running = sum(1 for loop in self._loops.values() if loop.is_running)

        lines = [f"====== Async loops: {running} running / {len(self._loops)} total ======"]
        for loop in loops:
            info = loop.get_info()
            status = "running" if info["running"] else "stopped"
            line = f"{info['name']:<24} {status:<8} runs: {info['runs']:<6} failures: {info['failures']}"
            if info["last_error"]:
                line += f" last error: {info['last_error']}"
            lines.append(line)
        return "\n".join(lines)
