"""
Application host.

The host owns the lifecycle state machine. It is created and initialized by
ApplicationHostBuilder.build(), started with ``await host.start()`` and torn
down with ``await host.dispose()``; feature orchestration is delegated to the
ApplicationFeatureExecutor.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import AsyncIterator, Type, TypeVar

from apphost import __version__
from apphost.builder.service_provider import ApplicationServiceProvider
from apphost.core.interfaces import IApplicationLifetime, IApplicationStats, IAsyncLoop, IAsyncProvider
from apphost.features.executor import ApplicationFeatureExecutor
from apphost.utils.config import ApplicationHostOptions, HostSettings
from apphost.utils.errors import (
    AggregateDisposalError,
    FeatureNotFoundError,
    HostDisposedError,
    InvalidStateError,
    MissingComponentError,
    ServiceNotFoundError,
)
from apphost.utils.logging import setup_logging
from apphost.utils.text_config import TextFileConfiguration

logger = setup_logging(__name__)

T = TypeVar("T")


class ApplicationState(str, Enum):
    """State of an ApplicationHost. Transitions only move forward."""
    CREATED = "Created"
    INITIALIZING = "Initializing"
    INITIALIZED = "Initialized"
    STARTING = "Starting"
    STARTED = "Started"
    DISPOSING = "Disposing"
    DISPOSED = "Disposed"


class ApplicationHost:
    """A configured host and the features it runs."""

    STATUS_LOOP_NAME = "PeriodicLog"
    BENCHMARK_LOOP_NAME = "PeriodicBenchmarkLog"

    def __init__(self):
        self.state = ApplicationState.CREATED
        self.start_time: datetime | None = None
        self.services: ApplicationServiceProvider | None = None

        self.lifetime: IApplicationLifetime | None = None
        self.stats: IApplicationStats | None = None
        self.async_provider: IAsyncProvider | None = None
        self.configuration: TextFileConfiguration | None = None
        self.options: ApplicationHostOptions | None = None
        self.settings: HostSettings | None = None

        self.last_log_output: str | None = None
        self.disposal_error: AggregateDisposalError | None = None

        self._executor: ApplicationFeatureExecutor | None = None
        self._periodic_log_loop: IAsyncLoop | None = None
        self._periodic_benchmark_loop: IAsyncLoop | None = None

    @property
    def version(self) -> str:
        return __version__

    @property
    def uptime(self) -> timedelta:
        if self.start_time is None:
            return timedelta(0)
        return datetime.now(timezone.utc) - self.start_time

    def initialize(self, services: ApplicationServiceProvider) -> "ApplicationHost":
        """Bind the services the host needs.

        Args:
            services: Provider of the registered services and features

        Returns:
            The host itself

        Raises:
            InvalidStateError: If already initialized or ``services`` is None
        """
        if self.state != ApplicationState.CREATED:
            raise InvalidStateError(f"ApplicationHost cannot be initialized in state {self.state.value}")
        if services is None:
            raise InvalidStateError("ApplicationHost cannot be initialized without services")

        self.state = ApplicationState.INITIALIZING

        self.services = services
        self.lifetime = services.get_service(IApplicationLifetime)
        self.stats = services.get_service(IApplicationStats)
        self.async_provider = services.get_service(IAsyncProvider)
        self.configuration = services.get_service(TextFileConfiguration)
        self.options = services.get_service(ApplicationHostOptions)
        self.settings = services.get_service(HostSettings)

        logger.info("ApplicationHost initialized.")

        self.state = ApplicationState.INITIALIZED
        self.start_time = datetime.now(timezone.utc)
        return self

    async def start(self) -> None:
        """Start the host and its features.

        Raises:
            HostDisposedError: If the host is disposing or disposed
            InvalidStateError: If the host is not initialized
            MissingComponentError: If the lifetime or the executor is not registered
            FeatureInitializationError: If a feature fails to start
        """
        if self.state in (ApplicationState.DISPOSING, ApplicationState.DISPOSED):
            raise HostDisposedError("ApplicationHost is disposed")
        if self.state != ApplicationState.INITIALIZED:
            raise InvalidStateError(f"ApplicationHost cannot be started in state {self.state.value}")

        if self.lifetime is None:
            raise MissingComponentError(f"{IApplicationLifetime.__name__} must be set.")

        self._executor = self.services.get_service(ApplicationFeatureExecutor)
        if self._executor is None:
            raise MissingComponentError(f"{ApplicationFeatureExecutor.__name__} must be set.")

        self.state = ApplicationState.STARTING
        logger.info("Starting application...")

        await self._executor.initialize()

        self.lifetime.notify_started()

        self._start_periodic_log()

        self.state = ApplicationState.STARTED
        logger.info("Application started.")

    def _start_periodic_log(self) -> None:
        """Start the status and benchmark loops.

        Both run until the lifetime's stopping event is set.
        """
        if self.async_provider is None or self.stats is None:
            logger.warning("No async provider or stats registered, periodic logging disabled")
            return

        settings = self.settings or HostSettings()
        cancellation = self.lifetime.application_stopping

        self._periodic_log_loop = self.async_provider.create_and_run_periodic_loop(
            self.STATUS_LOOP_NAME,
            self._log_stats,
            cancellation,
            repeat_every=settings.status_log_interval_seconds,
            start_after=settings.status_log_interval_seconds,
        )

        self._periodic_benchmark_loop = self.async_provider.create_and_run_periodic_loop(
            self.BENCHMARK_LOOP_NAME,
            self._log_benchmark,
            cancellation,
            repeat_every=settings.benchmark_log_interval_seconds,
            start_after=settings.benchmark_log_interval_seconds,
        )

    def _log_stats(self, cancellation: asyncio.Event) -> None:
        stats = self.stats.get_stats()
        logger.info(stats)
        self.last_log_output = stats

    def _log_benchmark(self, cancellation: asyncio.Event) -> None:
        logger.info(self.stats.get_benchmark())

    async def dispose(self) -> None:
        """Stop the host and dispose its features. Calling it again does nothing.

        Feature disposal errors are logged and kept on ``disposal_error``;
        they never stop the host from reaching the Disposed state.
        """
        if self.state in (ApplicationState.DISPOSING, ApplicationState.DISPOSED):
            return

        self.state = ApplicationState.DISPOSING
        logger.info("Closing application pending.")

        try:
            if self.lifetime is not None:
                self.lifetime.stop_application()

            logger.info("Disposing periodic logging loops.")
            for loop in (self._periodic_log_loop, self._periodic_benchmark_loop):
                if loop is not None:
                    await loop.dispose()

            if self._executor is not None:
                logger.info("Disposing the ApplicationHost feature executor.")
                await self._executor.dispose()
        except AggregateDisposalError as e:
            self.disposal_error = e
            logger.error(f"Features failed to dispose: {e}")
        except Exception as e:
            self.disposal_error = AggregateDisposalError([e])
            logger.error(f"💥 Unexpected error while disposing the application: {e}", exc_info=True)
        finally:
            if self.services is not None:
                self.services.dispose()

            if self.lifetime is not None:
                logger.info("Notify application has stopped.")
                self.lifetime.notify_stopped()

            self.state = ApplicationState.DISPOSED
            logger.info("Application stopped.")

    @asynccontextmanager
    async def managed_lifecycle(self) -> AsyncIterator["ApplicationHost"]:
        """Context manager for the host lifecycle.

        Usage:
            async with host.managed_lifecycle():
                # Features are initialized and ready
                pass
            # Features are disposed
        """
        try:
            await self.start()
            yield self
        finally:
            await self.dispose()

    def application_service(self, service_type: Type[T], fail_with_default: bool = False) -> T | None:
        """Find a registered service of a particular type.

        Args:
            service_type: Type the service was registered under
            fail_with_default: Return None instead of raising

        Raises:
            ServiceNotFoundError: If not found and ``fail_with_default`` is False
        """
        if self.services is not None:
            service = self.services.get_service(service_type)
            if service is not None:
                return service

        if fail_with_default:
            return None
        raise ServiceNotFoundError(service_type, f"The {service_type.__name__} service is not supported")

    def application_feature(self, feature_type: Type[T], fail_with_default: bool = False) -> T | None:
        """Find a feature of a particular type or having a given base class.

        Args:
            feature_type: Feature class or base class
            fail_with_default: Return None instead of raising

        Raises:
            FeatureNotFoundError: If not found and ``fail_with_default`` is False
        """
        if self.services is not None:
            for feature_cls in self.services.feature_types:
                if issubclass(feature_cls, feature_type):
                    feature = self.services.get_service(feature_cls)
                    if feature is not None:
                        return feature

        if fail_with_default:
            return None
        raise FeatureNotFoundError(feature_type)
