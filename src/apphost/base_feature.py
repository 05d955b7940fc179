"""
Base runtime feature of every host.
"""

from apphost.builder.host_builder import ApplicationHostBuilder
from apphost.core.interfaces import IApplicationLifetime, IApplicationStats, IAsyncProvider, StatsType
from apphost.features.interfaces import ApplicationFeature
from apphost.utils.config import ApplicationHostOptions
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)


class ApplicationBaseFeature(ApplicationFeature):
    """Reports the host's background loops in the periodic status log."""

    STATS_PRIORITY = 100

    def __init__(
        self,
        options: ApplicationHostOptions,
        lifetime: IApplicationLifetime,
        async_provider: IAsyncProvider,
        stats: IApplicationStats
    ):
        if options is None:
            raise ValueError("options must not be None")
        if lifetime is None:
            raise ValueError("lifetime must not be None")

        self._options = options
        self._lifetime = lifetime
        self._async_provider = async_provider
        self._stats = stats

    def initialize(self) -> None:
        self._stats.register_stats(
            self._render_loop_stats,
            StatsType.COMPONENT,
            type(self).__name__,
            self.STATS_PRIORITY,
        )
        logger.debug("Base feature initialized")

    def _render_loop_stats(self) -> str:
        # Only faulted loops are worth a line unless someone is debugging.
        return self._async_provider.get_statistics(faulty_only=not self._options.debug_args)


def use_base_feature(builder: ApplicationHostBuilder) -> ApplicationHostBuilder:
    """Make the host use the features every application needs.

    Args:
        builder: Builder responsible for creating the host

    Returns:
        The builder, to allow fluent code
    """
    builder.configure_features(lambda features: features.add_feature(ApplicationBaseFeature))
    return builder
