"""
Main entry point for the apphost CLI.

This module provides the command-line interface that builds a host with the
base feature, runs it until Ctrl+C or SIGTERM, and shows the effective
configuration.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from apphost.base_feature import use_base_feature
from apphost.builder.host_builder import ApplicationHostBuilder
from apphost.runner import run_host
from apphost.utils.config import (
    CONFIGURATION_FILE_KEY,
    DATA_DIR_KEY,
    DEBUG_ARGS_KEY,
    DataFolder,
    get_settings,
    load_configuration,
)
from apphost.utils.errors import HostError
from apphost.utils.logging import configure_root_logging, setup_logging

logger = setup_logging(__name__)

EXTRA_ARGS_SETTINGS = {"ignore_unknown_options": True, "allow_extra_args": True}


def _collect_args(extra_args: tuple[str, ...], conf: Optional[Path], datadir: Optional[Path]) -> list[str]:
    """Turn click options into ``-key=value`` arguments, extras last."""
    args = []
    if conf:
        args.append(f"-{CONFIGURATION_FILE_KEY}={conf}")
    if datadir:
        args.append(f"-{DATA_DIR_KEY}={datadir}")
    args.extend(extra_args)
    return args


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """apphost - generic process host."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    if verbose:
        logger.info("Verbose logging enabled")


@cli.command(context_settings=EXTRA_ARGS_SETTINGS)
@click.option('--conf', type=click.Path(path_type=Path), help='Configuration file (key=value lines)')
@click.option('--datadir', type=click.Path(path_type=Path), help='Data directory of the application')
@click.option('--debug', is_flag=True, help='Enable debug logging for every category')
@click.option('--structured-logs', is_flag=True, help='Emit JSON log records')
@click.argument('extra_args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, conf: Optional[Path], datadir: Optional[Path], debug: bool,
        structured_logs: bool, extra_args: tuple[str, ...]) -> None:
    """Run the host until Ctrl+C or SIGTERM.

    Extra ``-key=value`` arguments are added to the configuration, e.g.
    ``apphost run -appname=ticker -debugargs=application,features``.
    """
    settings = get_settings()
    verbose = ctx.obj.get('verbose', False) if ctx.obj else False
    level = "DEBUG" if debug or verbose else settings.log_level
    structured = structured_logs or settings.log_structured

    try:
        configuration = load_configuration(_collect_args(extra_args, conf, datadir))
        if debug and not configuration[DEBUG_ARGS_KEY]:
            configuration[DEBUG_ARGS_KEY] = "1"

        log_file = None
        if settings.log_to_file:
            data_folder = DataFolder.from_configuration(configuration, settings)
            log_file = data_folder.log_path / f"{settings.app_name.lower()}.log"

        configure_root_logging(level=level, structured=structured, log_file=log_file)
        logger.info(f"🚀 Starting {settings.app_name} {settings.app_version}")

        builder = use_base_feature(ApplicationHostBuilder(settings)).use_configuration(configuration)
        host = builder.build()

        asyncio.run(run_host(host))

    except KeyboardInterrupt:
        click.echo("\nHost stopped")
        logger.info("⌨️ Host stopped by user")
    except HostError as e:
        logger.error(f"💥 Host failed: {e}")
        click.echo(f"Error: {e}", err=True)
        for suggestion in e.suggestions:
            click.echo(f"  - {suggestion}", err=True)
        sys.exit(1)


@cli.command(name='show-config', context_settings=EXTRA_ARGS_SETTINGS)
@click.option('--conf', type=click.Path(path_type=Path), help='Configuration file (key=value lines)')
@click.option('--datadir', type=click.Path(path_type=Path), help='Data directory of the application')
@click.argument('extra_args', nargs=-1, type=click.UNPROCESSED)
def show_config(conf: Optional[Path], datadir: Optional[Path], extra_args: tuple[str, ...]) -> None:
    """Show the settings and the merged configuration."""
    settings = get_settings()

    try:
        configuration = load_configuration(_collect_args(extra_args, conf, datadir))
    except HostError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("Settings:")
    for key, value in settings.model_dump().items():
        click.echo(f"  {key}: {value}")

    click.echo("Configuration:")
    if not len(configuration):
        click.echo("  (empty)")
    for key, value in sorted(configuration.as_dict().items()):
        click.echo(f"  {key} = {value}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
