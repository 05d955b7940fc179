"""
Provider of access to services and features registered with the host.
"""

from typing import Iterator, Sequence, Type, TypeVar

from apphost.core.container import ServiceContainer
from apphost.features.interfaces import IApplicationFeature
from apphost.utils.errors import ServiceNotFoundError

T = TypeVar("T")


class ApplicationServiceProvider:
    """Read view over the frozen container plus the registered feature types."""

    def __init__(self, container: ServiceContainer, feature_types: Sequence[Type[IApplicationFeature]]):
        """Initialize the provider.

        Args:
            container: Container holding the registered services
            feature_types: Registered feature types in registration order
        """
        if container is None:
            raise ValueError("container must not be None")
        if feature_types is None:
            raise ValueError("feature_types must not be None")

        self.container = container
        self._feature_types = list(feature_types)

    @property
    def feature_types(self) -> list[Type[IApplicationFeature]]:
        return list(self._feature_types)

    @property
    def features(self) -> Iterator[IApplicationFeature]:
        """Feature instances, in the order their types were registered."""
        for feature_type in self._feature_types:
            yield self.container.get(feature_type)

    def get_service(self, service_type: Type[T]) -> T | None:
        """Resolve a service, or None when it is not registered."""
        return self.container.try_get(service_type)

    def get_required_service(self, service_type: Type[T]) -> T:
        """Resolve a service.

        Raises:
            ServiceNotFoundError: If it is not registered
        """
        return self.container.get(service_type)

    def is_service_registered(self, service_type: type) -> bool:
        return self.container.is_registered(service_type)

    def ensure_service_is_registered(self, service_type: type) -> None:
        """Raise ServiceNotFoundError unless the service is registered."""
        if not self.is_service_registered(service_type):
            raise ServiceNotFoundError(service_type)

    def dispose(self) -> None:
        self.container.dispose()
