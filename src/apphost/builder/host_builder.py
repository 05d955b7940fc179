"""
ApplicationHost builder.

Collects service, logging, feature and service-provider callbacks, then
composes them into an initialized ApplicationHost in one build() call.
"""

from typing import Callable, Mapping

from apphost.builder.service_provider import ApplicationServiceProvider
from apphost.core.async_loop import AsyncProvider
from apphost.core.container import ServiceContainer
from apphost.core.interfaces import IApplicationLifetime, IApplicationStats, IAsyncProvider
from apphost.core.lifetime import ApplicationLifetime
from apphost.core.stats import ApplicationStats
from apphost.features.collection import FeatureCollection
from apphost.features.executor import ApplicationFeatureExecutor
from apphost.host import ApplicationHost
from apphost.utils.config import ApplicationHostOptions, DataFolder, HostSettings, get_settings
from apphost.utils.errors import AlreadyBuiltError, MissingComponentError
from apphost.utils.logging import LoggingConfiguration, setup_logging
from apphost.utils.text_config import TextFileConfiguration

logger = setup_logging(__name__)

ConfigureServices = Callable[[ServiceContainer], None]
ConfigureFeatures = Callable[[FeatureCollection], None]
ConfigureLogging = Callable[[LoggingConfiguration], None]
ConfigureServiceProvider = Callable[[ApplicationServiceProvider], None]


def _ensure_callable(callback: Callable, name: str) -> None:
    if not callable(callback):
        raise TypeError(f"{name} must be callable")


class ApplicationHostBuilder:
    """Builds an ApplicationHost from services and features."""

    def __init__(self, settings: HostSettings | None = None):
        """Initialize the builder.

        Args:
            settings: Host settings; the global settings are used when omitted
        """
        self._configure_services_delegates: list[ConfigureServices] = []
        self._features_registration_delegates: list[ConfigureFeatures] = []
        self._configure_logging_delegates: list[ConfigureLogging] = []
        self._configure_delegates: list[ConfigureServiceProvider] = []

        self._settings = settings
        self._configuration = TextFileConfiguration()
        self._logging_configuration: LoggingConfiguration | None = None
        self._application_built = False

    def use_settings(self, settings: HostSettings) -> "ApplicationHostBuilder":
        """Use explicit host settings instead of the global ones."""
        self._settings = settings
        return self

    def use_logging_configuration(self, logging_configuration: LoggingConfiguration) -> "ApplicationHostBuilder":
        """Use the given logging configuration instead of one derived from settings."""
        if logging_configuration is None:
            raise ValueError("logging_configuration must not be None")
        self._logging_configuration = logging_configuration
        return self

    def configure_logging(self, configure_logging: ConfigureLogging) -> "ApplicationHostBuilder":
        """Add a callback configuring the LoggingConfiguration. May be called multiple times."""
        _ensure_callable(configure_logging, "configure_logging")
        self._configure_logging_delegates.append(configure_logging)
        return self

    def configure_features(self, configure_features: ConfigureFeatures) -> "ApplicationHostBuilder":
        """Add a callback that adds features to the collection."""
        _ensure_callable(configure_features, "configure_features")
        self._features_registration_delegates.append(configure_features)
        return self

    def configure_service_provider(self, configure: ConfigureServiceProvider) -> "ApplicationHostBuilder":
        """Add a callback run against the frozen service provider, before the host is resolved."""
        _ensure_callable(configure, "configure_service_provider")
        self._configure_delegates.append(configure)
        return self

    def configure_services(self, configure_services: ConfigureServices) -> "ApplicationHostBuilder":
        """Add a callback that registers services with the container."""
        _ensure_callable(configure_services, "configure_services")
        self._configure_services_delegates.append(configure_services)
        return self

    def use_setting(self, key: str, value: str | None) -> "ApplicationHostBuilder":
        """Add or replace a setting in the configuration."""
        self._configuration.set(key, value)
        return self

    def get_setting(self, key: str) -> str | None:
        """Get the value a setting currently holds."""
        return self._configuration[key]

    def use_configuration(self, configuration: TextFileConfiguration | Mapping[str, str]) -> "ApplicationHostBuilder":
        """Copy every setting of ``configuration`` into the builder's configuration."""
        values = configuration.as_dict() if isinstance(configuration, TextFileConfiguration) else configuration
        for key, value in values.items():
            self.use_setting(key, None if value is None else str(value))
        return self

    def build(self) -> ApplicationHost:
        """Compose services and features into an initialized host.

        Returns:
            The initialized, not yet started, host

        Raises:
            AlreadyBuiltError: If build() was already called on this builder
            MissingDependencyError: If a feature depends on an unregistered feature
            MissingComponentError: If no ApplicationHost is registered
        """
        if self._application_built:
            raise AlreadyBuiltError("The ApplicationHost is already built")
        self._application_built = True

        container, features = self._build_services_and_features()

        container.freeze()
        services = ApplicationServiceProvider(
            container,
            [registration.feature_type for registration in features.feature_registrations]
        )

        for configure in self._configure_delegates:
            configure(services)

        host = container.try_get(ApplicationHost)
        if host is None:
            raise MissingComponentError(f"{ApplicationHost.__name__} not registered with provider")

        host.initialize(services)
        logger.info(f"ApplicationHost built with {len(features)} feature(s)")
        return host

    def _build_services_and_features(self) -> tuple[ServiceContainer, FeatureCollection]:
        """Construct and configure the services and features used by the host."""
        container = ServiceContainer()
        settings = self._settings or get_settings()
        options = ApplicationHostOptions.from_configuration(self._configuration, settings.app_name)

        logging_configuration = self._logging_configuration or LoggingConfiguration(
            level=settings.log_level,
            debug_categories=options.debug_args,
            structured=settings.log_structured,
        )

        # configure logging before services
        for configure_logging in self._configure_logging_delegates:
            configure_logging(logging_configuration)
        logging_configuration.apply()

        self._register_defaults(container, settings, options, logging_configuration)

        # register services before features, as some features may depend on independent services
        for configure_services in self._configure_services_delegates:
            configure_services(container)

        features = FeatureCollection()
        for configure_features in self._features_registration_delegates:
            configure_features(features)

        registrations = features.feature_registrations
        for registration in registrations:
            registration.ensure_dependencies(registrations)
            registration.build_feature(container)

        return container, features

    def _register_defaults(
        self,
        container: ServiceContainer,
        settings: HostSettings,
        options: ApplicationHostOptions,
        logging_configuration: LoggingConfiguration
    ) -> None:
        configuration = self._configuration

        container.register_instance(HostSettings, settings)
        container.register_instance(TextFileConfiguration, configuration)
        container.register_instance(ApplicationHostOptions, options)
        container.register_instance(LoggingConfiguration, logging_configuration)
        container.register(
            DataFolder,
            factory=lambda c: DataFolder.from_configuration(c.get(TextFileConfiguration), c.get(HostSettings))
        )
        container.register(IApplicationLifetime, ApplicationLifetime)
        container.register(IApplicationStats, ApplicationStats)
        container.register(IAsyncProvider, AsyncProvider)
        container.register(ApplicationHost)
        container.register(
            ApplicationFeatureExecutor,
            factory=lambda c: ApplicationFeatureExecutor(c.get(ApplicationHost))
        )
