"""
Core infrastructure for the application host.

This package contains the service container and the services every host
registers by default: the lifetime signal, the periodic loop provider and
the stats aggregator.
"""

from .async_loop import AsyncLoop, AsyncProvider
from .container import ServiceContainer, ServiceRegistration
from .interfaces import (
    IApplicationLifetime,
    IApplicationStats,
    IAsyncLoop,
    IAsyncProvider,
    StatsType,
)
from .lifetime import ApplicationLifetime
from .stats import ApplicationStats

__all__ = [
    "ApplicationLifetime",
    "ApplicationStats",
    "AsyncLoop",
    "AsyncProvider",
    "IApplicationLifetime",
    "IApplicationStats",
    "IAsyncLoop",
    "IAsyncProvider",
    "ServiceContainer",
    "ServiceRegistration",
    "StatsType",
]
