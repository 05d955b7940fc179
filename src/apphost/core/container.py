"""
Dependency injection container for the application host.

This module provides a service container that manages dependencies and service
lifecycle. Registrations are made while the host is composed; once the builder
freezes the container, services can only be resolved.
"""

import inspect
import typing
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from apphost.utils.errors import ConfigurationError, ServiceNotFoundError
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)

T = TypeVar('T')


class ServiceContainer:
    """Dependency injection container for managing services and their dependencies."""

    def __init__(self):
        """Initialize an empty, writable service container."""
        self._singletons: Dict[Type, Any] = {}
        self._registrations: Dict[Type, 'ServiceRegistration'] = {}
        self._building: set = set()  # Track services being built to prevent cycles
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        interface: Type[T],
        implementation: Optional[Type[T]] = None,
        singleton: bool = True,
        factory: Optional[Callable[['ServiceContainer'], T]] = None
    ) -> None:
        """Register a service with the container.

        A later registration of the same interface replaces the earlier one.

        Args:
            interface: The interface/abstract class
            implementation: The concrete implementation (defaults to the interface)
            singleton: Whether to treat as singleton
            factory: Optional factory receiving the container, for custom instantiation

        Raises:
            ConfigurationError: If the container is frozen
        """
        self._ensure_writable(interface)
        implementation = implementation or interface
        logger.debug(f"Registering {interface.__name__} -> {implementation.__name__}")

        self._singletons.pop(interface, None)
        self._registrations[interface] = ServiceRegistration(
            interface=interface,
            implementation=implementation,
            singleton=singleton,
            factory=factory
        )

    def register_instance(self, interface: Type[T], instance: T) -> None:
        """Register an existing instance.

        Args:
            interface: The interface/abstract class
            instance: The instance to register

        Raises:
            ConfigurationError: If the container is frozen
        """
        self._ensure_writable(interface)
        logger.debug(f"Registering instance for {interface.__name__}")
        self._registrations.pop(interface, None)
        self._singletons[interface] = instance

    def freeze(self) -> None:
        """Reject any further registration."""
        self._frozen = True
        logger.debug(f"🔒 Service container frozen with {len(self._registrations) + len(self._singletons)} services")

    def is_registered(self, interface: Type) -> bool:
        return interface in self._singletons or interface in self._registrations

    def get(self, interface: Type[T]) -> T:
        """Get a service instance.

        Args:
            interface: The interface/abstract class to get

        Returns:
            Service instance

        Raises:
            ServiceNotFoundError: If service is not registered
            ConfigurationError: If a circular dependency is detected
        """
        logger.debug(f"🔍 Requesting service: {interface.__name__}")

        if interface in self._building:
            logger.error(f"❌ Circular dependency detected for {interface.__name__}")
            raise ConfigurationError(f"Circular dependency detected for {interface.__name__}")

        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._registrations:
            logger.debug(f"📋 Available registrations: {[t.__name__ for t in self._registrations]}")
            raise ServiceNotFoundError(interface)

        registration = self._registrations[interface]

        self._building.add(interface)
        try:
            if registration.factory:
                logger.debug(f"🏭 Using factory for {interface.__name__}")
                instance = registration.factory(self)
            else:
                instance = self._create_instance(registration.implementation)

            if registration.singleton:
                self._singletons[interface] = instance

            logger.debug(f"✅ Created instance of {interface.__name__}")
            return instance

        except Exception as e:
            logger.error(f"❌ Failed to create instance of {interface.__name__}: {e}")
            raise
        finally:
            self._building.discard(interface)

    def try_get(self, interface: Type[T]) -> Optional[T]:
        """Get a service instance, or None when it is not registered."""
        if not self.is_registered(interface):
            return None
        return self.get(interface)

    def _create_instance(self, implementation: Type[T]) -> T:
        """Create an instance with dependency injection.

        Constructor parameters annotated with a registered type are resolved
        from the container; parameters with defaults are left alone.

        Args:
            implementation: The class to instantiate

        Returns:
            Instance with dependencies injected

        Raises:
            ServiceNotFoundError: If a required parameter cannot be resolved
        """
        signature = inspect.signature(implementation.__init__)
        try:
            hints = typing.get_type_hints(implementation.__init__)
        except (NameError, TypeError):
            hints = {}

        args = {}
        for param_name, param in signature.parameters.items():
            if param_name == 'self' or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            annotation = hints.get(param_name, param.annotation)
            if self.is_registered(annotation):
                args[param_name] = self.get(annotation)
            elif param.default is not inspect.Parameter.empty:
                continue
            else:
                raise ServiceNotFoundError(
                    annotation,
                    f"Cannot resolve parameter '{param_name}' of {implementation.__name__}",
                )

        return implementation(**args)

    def get_service_info(self) -> Dict[str, Any]:
        """Get information about registered services.

        Returns:
            Dictionary with service information
        """
        info = {
            "registered_services": len(self._registrations),
            "singleton_instances": len(self._singletons),
            "frozen": self._frozen,
            "services": {}
        }

        for interface, registration in self._registrations.items():
            info["services"][interface.__name__] = {
                "implementation": registration.implementation.__name__,
                "singleton": registration.singleton,
                "has_instance": interface in self._singletons
            }

        return info

    def registered_types(self) -> List[Type]:
        return list(self._registrations) + [t for t in self._singletons if t not in self._registrations]

    def dispose(self) -> None:
        """Close singleton services and clear the container.

        Singletons exposing ``close()`` are closed in reverse creation order.
        """
        logger.info("Disposing service container")

        for interface, instance in reversed(list(self._singletons.items())):
            if hasattr(instance, 'close'):
                try:
                    instance.close()
                    logger.debug(f"Closed service {interface.__name__}")
                except Exception as e:
                    logger.error(f"Error closing service {interface.__name__}: {e}")

        self._singletons.clear()
        self._registrations.clear()
        self._building.clear()

        logger.info("Service container disposed")

    def _ensure_writable(self, interface: Type) -> None:
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register {interface.__name__}: the service container is frozen",
                suggestions=["Register services in configure_services or a feature registration"],
            )

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.dispose()


class ServiceRegistration:
    """Represents a service registration in the container."""

    def __init__(
        self,
        interface: Type,
        implementation: Type,
        singleton: bool = True,
        factory: Optional[Callable] = None
    ):
        self.interface = interface
        self.implementation = implementation
        self.singleton = singleton
        self.factory = factory
