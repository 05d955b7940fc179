"""
Registration of a feature with the host builder.
"""

from typing import Callable, Sequence, Type

from apphost.core.container import ServiceContainer
from apphost.features.interfaces import IApplicationFeature
from apphost.utils.errors import MissingDependencyError
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)

ConfigureServices = Callable[[ServiceContainer], None]


class FeatureRegistration:
    """Binding of one feature type: its dependencies and its services.

    Created while the host is composed and consumed once by the builder.
    """

    def __init__(self, feature_type: Type[IApplicationFeature]):
        if not (isinstance(feature_type, type) and issubclass(feature_type, IApplicationFeature)):
            raise TypeError(f"{feature_type!r} is not an IApplicationFeature type")

        self.feature_type = feature_type
        self.feature_startup_type: type | None = None
        self.configure_services_delegates: list[ConfigureServices] = []
        self._dependencies: list[Type[IApplicationFeature]] = []

    @property
    def dependencies(self) -> list[Type[IApplicationFeature]]:
        return list(self._dependencies)

    def feature_services(self, configure_services: ConfigureServices) -> "FeatureRegistration":
        """Add a callback that registers the feature's services."""
        if not callable(configure_services):
            raise TypeError("configure_services must be callable")
        self.configure_services_delegates.append(configure_services)
        return self

    def use_startup(self, startup_type: type) -> "FeatureRegistration":
        """Use a startup class whose ``configure_services(container)`` is called on build."""
        self.feature_startup_type = startup_type
        return self

    def depend_on(self, feature_type: Type[IApplicationFeature]) -> "FeatureRegistration":
        """Declare a feature type that must also be registered."""
        self._dependencies.append(feature_type)
        return self

    def ensure_dependencies(self, registrations: Sequence["FeatureRegistration"]) -> None:
        """Check every declared dependency against the registered feature types.

        A dependency is met by its own type or by any subclass of it.

        Raises:
            MissingDependencyError: Naming the first unmet dependency
        """
        for dependency in self._dependencies:
            if not any(issubclass(r.feature_type, dependency) for r in registrations):
                logger.error(
                    f"Feature {self.feature_type.__name__} cannot be configured because "
                    f"it depends on {dependency.__name__} which was not registered"
                )
                raise MissingDependencyError(dependency.__name__, self.feature_type.__name__)

    def build_feature(self, container: ServiceContainer) -> None:
        """Register the feature as a singleton and run its service callbacks."""
        container.register(self.feature_type, self.feature_type, singleton=True)

        for configure_services in self.configure_services_delegates:
            configure_services(container)

        if self.feature_startup_type is not None:
            self._run_startup(container)

    def _run_startup(self, container: ServiceContainer) -> None:
        configure = getattr(self.feature_startup_type, "configure_services", None)
        if callable(configure):
            configure(container)
        else:
            logger.debug(f"Startup type {self.feature_startup_type.__name__} has no configure_services")

    def __repr__(self) -> str:
        deps = ", ".join(d.__name__ for d in self._dependencies)
        return f"FeatureRegistration({self.feature_type.__name__}, depends_on=[{deps}])"
