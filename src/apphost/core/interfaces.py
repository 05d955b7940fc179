"""
Service interfaces for dependency injection and modularity.

This module defines abstract base classes for the services every host
registers by default, so features depend on contracts rather than on the
concrete implementations.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable


class IApplicationLifetime(ABC):
    """Cooperative shutdown signal shared by the host and its features."""

    @property
    @abstractmethod
    def application_started(self) -> asyncio.Event:
        """Set once the host has started all features."""
        pass

    @property
    @abstractmethod
    def application_stopping(self) -> asyncio.Event:
        """Set once a shutdown has been requested. Never cleared."""
        pass

    @property
    @abstractmethod
    def application_stopped(self) -> asyncio.Event:
        """Set once the host has been disposed."""
        pass

    @abstractmethod
    def stop_application(self) -> None:
        """Request a shutdown. Safe to call any number of times."""
        pass

    @abstractmethod
    def register_stopping_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` when a shutdown is requested."""
        pass


class IAsyncLoop(ABC):
    """Handle of a periodic background loop."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def dispose(self) -> None:
        """Stop the loop and wait for it to finish."""
        pass


LoopCallback = Callable[[asyncio.Event], Any]


class IAsyncProvider(ABC):
    """Factory for periodic background loops."""

    @abstractmethod
    def create_and_run_periodic_loop(
        self,
        name: str,
        callback: LoopCallback,
        cancellation: asyncio.Event,
        repeat_every: float,
        start_after: float | None = None
    ) -> IAsyncLoop:
        """Start a loop calling ``callback`` every ``repeat_every`` seconds until ``cancellation`` is set."""
        pass

    @abstractmethod
    def get_statistics(self, faulty_only: bool = False) -> str:
        """Render the state of the running loops."""
        pass


class StatsType(str, Enum):
    """Section of the stats report a callback contributes to."""
    INLINE = "inline"
    COMPONENT = "component"
    BENCHMARK = "benchmark"


class IApplicationStats(ABC):
    """Aggregates the periodic status and benchmark reports."""

    @abstractmethod
    def register_stats(
        self,
        render: Callable[[], str],
        stats_type: StatsType,
        component_name: str,
        priority: int = -1
    ) -> None:
        """Register a callback that renders part of a report."""
        pass

    @abstractmethod
    def get_stats(self) -> str:
        """Render the inline and component sections."""
        pass

    @abstractmethod
    def get_benchmark(self) -> str:
        """Render the benchmark section."""
        pass
