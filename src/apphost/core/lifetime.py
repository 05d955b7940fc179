"""
Application lifetime signal.

A single latch-once object per host: the first stop request sets the
stopping event and runs the registered stopping callbacks; later requests
are ignored.
"""

import asyncio
from typing import Callable

from apphost.core.interfaces import IApplicationLifetime
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)


class ApplicationLifetime(IApplicationLifetime):
    """Started/stopping/stopped events of the host."""

    def __init__(self):
        self._started = asyncio.Event()
        self._stopping = asyncio.Event()
        self._stopped = asyncio.Event()
        self._stopping_callbacks: list[Callable[[], None]] = []

    @property
    def application_started(self) -> asyncio.Event:
        return self._started

    @property
    def application_stopping(self) -> asyncio.Event:
        return self._stopping

    @property
    def application_stopped(self) -> asyncio.Event:
        return self._stopped

    @property
    def is_stopping(self) -> bool:
        return self._stopping.is_set()

    def register_stopping_callback(self, callback: Callable[[], None]) -> None:
        if self._stopping.is_set():
            # Already latched; the callback would never fire otherwise.
            self._run_callback(callback)
            return
        self._stopping_callbacks.append(callback)

    def stop_application(self) -> None:
        if self._stopping.is_set():
            return

        logger.info("Application stop requested")
        self._stopping.set()

        callbacks, self._stopping_callbacks = self._stopping_callbacks, []
        for callback in callbacks:
            self._run_callback(callback)

    def notify_started(self) -> None:
        self._started.set()

    def notify_stopped(self) -> None:
        self._stopped.set()

    async def wait_for_stop_request(self) -> None:
        """Suspend until a shutdown has been requested."""
        await self._stopping.wait()

    @staticmethod
    def _run_callback(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Error in stopping callback {getattr(callback, '__name__', callback)}: {e}")
