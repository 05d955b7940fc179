"""
Feature interfaces for the application host.

A feature extends the host with a unit of functionality. It is constructed
by the service container, validated and initialized by the feature executor
when the host starts, and disposed in reverse order when the host stops.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable

if TYPE_CHECKING:
    from apphost.builder.service_provider import ApplicationServiceProvider


class FeatureState(str, Enum):
    """Lifecycle label of a feature, written only by the feature executor."""
    CREATED = "Created"
    INITIALIZING = "Initializing"
    INITIALIZED = "Initialized"
    DISPOSING = "Disposing"
    DISPOSED = "Disposed"


class IApplicationFeature(ABC):
    """Abstract base class for all features managed by the host."""

    #: Start this feature before every feature that does not set the flag.
    initialize_before_base: bool = False

    #: Current lifecycle state.
    state: FeatureState = FeatureState.CREATED

    @abstractmethod
    def initialize(self) -> Awaitable[None] | None:
        """Start the feature once the host starts.

        May be a coroutine; the executor awaits it before moving on.

        Raises:
            Exception: Any error aborts the host start
        """
        pass

    @abstractmethod
    def dispose(self) -> Awaitable[None] | None:
        """Release the feature's resources. Best effort, should not raise."""
        pass

    @abstractmethod
    def validate_dependencies(self, services: "ApplicationServiceProvider") -> None:
        """Check that the services this feature needs are present.

        Args:
            services: Services and features registered with the host

        Raises:
            Exception: If a required service is missing
        """
        pass


class ApplicationFeature(IApplicationFeature):
    """Convenience base class with no-op dispose and validation.

    If a feature adds an option of functionality that configuration may
    enable, the builder helper is named ``add_<feature>``; a feature that is
    used whenever it is included gets ``use_<feature>``.
    """

    def dispose(self) -> Awaitable[None] | None:
        return None

    def validate_dependencies(self, services: "ApplicationServiceProvider") -> None:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={getattr(self.state, 'value', self.state)}>"


def feature_name(feature: Any) -> str:
    """Name used in logs and errors for a feature instance or type."""
    feature_type = feature if isinstance(feature, type) else type(feature)
    return feature_type.__name__
