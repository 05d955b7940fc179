"""
Running a host until it is asked to stop.

Process signals (Ctrl+C, SIGTERM) only request a stop through the host's
lifetime; the shutdown itself runs on the normal dispose path.
"""

import asyncio
import signal
from contextlib import suppress

from apphost.core.interfaces import IApplicationLifetime
from apphost.host import ApplicationHost, ApplicationState
from apphost.utils.errors import MissingComponentError
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, lifetime: IApplicationLifetime) -> list[signal.Signals]:
    installed = []

    def request_stop(signum: signal.Signals) -> None:
        if not lifetime.application_stopping.is_set():
            logger.info(f"Received {signum.name}, application is shutting down...")
        lifetime.stop_application()

    for signum in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(signum, request_stop, signum)
            installed.append(signum)
        except (NotImplementedError, RuntimeError, ValueError) as e:
            # Not supported on this platform or not on the main thread.
            logger.debug(f"Cannot install handler for {signum.name}: {e}")
    return installed


async def run_host(
    host: ApplicationHost,
    stop_event: asyncio.Event | None = None,
    handle_signals: bool = True
) -> None:
    """Start a host, wait until it is asked to stop, then dispose it.

    Args:
        host: Initialized host to run
        stop_event: Optional external event that requests a stop when set
        handle_signals: Map SIGINT and SIGTERM to a stop request

    Raises:
        MissingComponentError: If the host has no lifetime
        FeatureInitializationError: If a feature fails to start; the host is still disposed
    """
    lifetime = host.lifetime
    if lifetime is None:
        raise MissingComponentError(f"{IApplicationLifetime.__name__} must be set.")

    loop = asyncio.get_running_loop()
    installed = _install_signal_handlers(loop, lifetime) if handle_signals else []

    watcher: asyncio.Task | None = None
    if stop_event is not None:
        async def link_stop_event() -> None:
            await stop_event.wait()
            lifetime.stop_application()

        watcher = asyncio.create_task(link_stop_event(), name="StopEventWatcher")

    try:
        logger.info("ApplicationHost starting, press Ctrl+C to cancel.")
        await host.start()
        logger.info("ApplicationHost started, press Ctrl+C to stop.")

        await lifetime.application_stopping.wait()
    finally:
        if watcher is not None:
            watcher.cancel()
            with suppress(asyncio.CancelledError):
                await watcher

        await host.dispose()

        for signum in installed:
            loop.remove_signal_handler(signum)

    if host.state == ApplicationState.DISPOSED:
        logger.info("ApplicationHost stopped.")
