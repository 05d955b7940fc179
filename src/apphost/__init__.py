"""
apphost - a generic process host.

Registers application features, wires their services through a small
dependency container and runs them through one ordered lifecycle:
build, start, wait for a stop request, dispose.

Usage:
    from apphost import ApplicationHostBuilder, run_host, use_base_feature

    builder = use_base_feature(ApplicationHostBuilder())
    builder.configure_features(lambda features: features.add_feature(MyFeature))
    host = builder.build()
    asyncio.run(run_host(host))
"""

__version__ = "0.1.0"

from apphost.base_feature import ApplicationBaseFeature, use_base_feature
from apphost.builder.host_builder import ApplicationHostBuilder
from apphost.builder.service_provider import ApplicationServiceProvider
from apphost.features.interfaces import ApplicationFeature, FeatureState, IApplicationFeature
from apphost.host import ApplicationHost, ApplicationState
from apphost.runner import run_host
from apphost.utils.errors import (
    AggregateDisposalError,
    AlreadyBuiltError,
    ConfigurationError,
    FeatureInitializationError,
    HostError,
    InvalidStateError,
    MissingDependencyError,
)

__all__ = [
    "AggregateDisposalError",
    "AlreadyBuiltError",
    "ApplicationBaseFeature",
    "ApplicationFeature",
    "ApplicationHost",
    "ApplicationHostBuilder",
    "ApplicationServiceProvider",
    "ApplicationState",
    "ConfigurationError",
    "FeatureInitializationError",
    "FeatureState",
    "HostError",
    "IApplicationFeature",
    "InvalidStateError",
    "MissingDependencyError",
    "__version__",
    "run_host",
    "use_base_feature",
]
