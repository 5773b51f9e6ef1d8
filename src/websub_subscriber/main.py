"""
Main entry point for the WebSub subscriber.

This module provides the command-line interface: ``serve`` runs the
callback endpoint together with the renewal loop, ``subscribe`` sends a
single subscribe request and exits.
"""

import asyncio
import sys
from typing import Optional

import click

from .config.settings import LOG_FORMATS, LOG_LEVELS, ConfigError, Settings, load_config
from .hub.client import HubClient
from .hub.renewer import SubscriptionRenewer
from .server import WebSubSubscriber
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _load_settings(
    port: Optional[int] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> Settings:
    """Load settings and configure logging, exiting on a bad environment."""
    try:
        settings = load_config(port=port, log_level=log_level, log_format=log_format)
    except ConfigError as e:
        setup_logging(log_level or "INFO", log_format or "json")
        logger.error("Invalid configuration", error=str(e))
        sys.exit(1)

    setup_logging(settings.log_level, settings.log_format)
    return settings


@click.command()
@click.option("--port", "-p", type=int, help="Listen port (overrides PORT)")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Set logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS, case_sensitive=False),
    help="Render logs as JSON or for a terminal",
)
@click.version_option(package_name="websub-subscriber")
def main(
    port: Optional[int] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    WebSub subscriber - verifies and logs hub notifications.

    Serves the callback endpoint and keeps the topic subscription
    renewed on a fixed interval.
    """
    settings = _load_settings(port=port, log_level=log_level, log_format=log_format)

    logger.info(
        "Starting WebSub subscriber",
        port=settings.port,
        callback=settings.callback_url,
        topic=settings.topic_url,
        log_level=settings.log_level,
    )

    try:
        asyncio.run(WebSubSubscriber(settings).run())
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
        sys.exit(0)
    except OSError as e:
        logger.error("Failed to bind listener", port=settings.port, error=str(e))
        sys.exit(1)


async def _subscribe_once(settings: Settings) -> bool:
    hub_client = HubClient(
        hub_url=settings.hub_url,
        timeout_seconds=settings.hub_timeout_seconds,
    )
    try:
        return await SubscriptionRenewer(settings, hub_client).renew_once()
    finally:
        await hub_client.close()


@click.command()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Set logging level",
)
def subscribe(log_level: Optional[str] = None) -> None:
    """Send one subscribe request to the hub and exit."""
    settings = _load_settings(log_level=log_level)

    if not asyncio.run(_subscribe_once(settings)):
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """WebSub subscriber CLI. Without a command, runs ``serve``."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(main)


cli.add_command(main, name="serve")
cli.add_command(subscribe, name="subscribe")


if __name__ == "__main__":
    main()
