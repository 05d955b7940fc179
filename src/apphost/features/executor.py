"""
Feature executor.

Starts and stops all the features registered with a host. Initialization is
fail-fast: the first error stops the remaining features from being touched.
Disposal is fail-soft: every feature is disposed and the errors are raised
together at the end.
"""

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Type

from apphost.features.interfaces import FeatureState, IApplicationFeature, feature_name
from apphost.utils.errors import AggregateDisposalError, FeatureInitializationError
from apphost.utils.logging import setup_logging

if TYPE_CHECKING:
    from apphost.host import ApplicationHost

logger = setup_logging(__name__)


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class ApplicationFeatureExecutor:
    """Starts and stops all features registered with a host."""

    def __init__(self, host: "ApplicationHost"):
        """Initialize the executor.

        Args:
            host: Host whose features are managed by this executor
        """
        if host is None:
            raise ValueError("host must not be None")
        self._host = host

    def resolve_features(self) -> list[IApplicationFeature] | None:
        """Features in initialization order, or None when the host has no services.

        Registration order, with features flagged ``initialize_before_base``
        moved ahead of the rest; ties keep their registration order.
        """
        feature_types = self._resolve_feature_types()
        if feature_types is None:
            return None

        container = self._host.services.container
        return [container.get(feature_type) for feature_type in feature_types]

    def _resolve_feature_types(self) -> list[Type[IApplicationFeature]] | None:
        services = self._host.services
        if services is None:
            return None
        return sorted(services.feature_types, key=lambda t: not t.initialize_before_base)

    async def initialize(self) -> None:
        """Resolve and validate, then initialize every feature.

        Raises:
            FeatureInitializationError: Wrapping the first error raised by a feature,
                including a feature the container cannot construct
        """
        feature_types = self._resolve_feature_types()
        if feature_types is None:
            logger.debug("No services, skipping feature initialization")
            return

        services = self._host.services
        try:
            features = self._construct_features(feature_types)
            await self._execute_in_order(
                features, "validate_dependencies",
                lambda feature: feature.validate_dependencies(services)
            )
            await self._execute_in_order(features, "initialize", self._initialize_feature)
        except FeatureInitializationError as e:
            logger.error(f"An error occurred starting the application: {e}")
            raise

        logger.info(f"{len(features)} feature(s) initialized")

    async def dispose(self) -> None:
        """Dispose every feature in reverse initialization order.

        A feature that cannot be constructed is skipped and its error is
        reported with the dispose errors.

        Raises:
            AggregateDisposalError: If one or more features raised while resolving or disposing
        """
        feature_types = self._resolve_feature_types()
        if feature_types is None:
            logger.debug("No services, skipping feature disposal")
            return

        container = self._host.services.container
        exceptions: list[Exception] = []

        # When the application is shutting down every feature gets disposed, errors or not.
        for feature_type in reversed(feature_types):
            name = feature_name(feature_type)
            try:
                feature = container.get(feature_type)
            except Exception as e:
                exceptions.append(e)
                logger.error(f"Feature {name} cannot be resolved for disposal: '{e}'")
                continue

            try:
                await self._dispose_feature(feature)
            except Exception as e:
                exceptions.append(e)
                logger.error(f"An error occurred disposing {name}: '{e}'", exc_info=True)

        if exceptions:
            logger.error("An error occurred stopping the application.")
            raise AggregateDisposalError(exceptions)

        logger.info(f"{len(feature_types)} feature(s) disposed")

    def _construct_features(self, feature_types: list[Type[IApplicationFeature]]) -> list[IApplicationFeature]:
        container = self._host.services.container
        features = []
        for feature_type in feature_types:
            try:
                features.append(container.get(feature_type))
            except Exception as e:
                name = feature_name(feature_type)
                logger.error(f"Feature {name} failed during resolve: {e}", exc_info=True)
                raise FeatureInitializationError(name, "resolve", e) from e
        return features

    @staticmethod
    async def _execute_in_order(
        features: list[IApplicationFeature],
        phase: str,
        callback: Callable[[IApplicationFeature], Awaitable[None] | None]
    ) -> None:
        for feature in features:
            name = feature_name(feature)
            logger.debug(f"{phase}: {name}")
            try:
                await _maybe_await(callback(feature))
            except Exception as e:
                logger.error(f"Feature {name} failed during {phase}: {e}", exc_info=True)
                raise FeatureInitializationError(name, phase, e) from e

    @staticmethod
    async def _initialize_feature(feature: IApplicationFeature) -> None:
        feature.state = FeatureState.INITIALIZING
        await _maybe_await(feature.initialize())
        feature.state = FeatureState.INITIALIZED

    @staticmethod
    async def _dispose_feature(feature: IApplicationFeature) -> None:
        feature.state = FeatureState.DISPOSING
        await _maybe_await(feature.dispose())
        feature.state = FeatureState.DISPOSED
