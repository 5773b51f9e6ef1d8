"""
WebSub subscriber service.

Runs the callback endpoint and the subscription renewer side by side
on one event loop. The two share nothing but the startup settings.
"""

import asyncio
import signal
import sys
from typing import Any, Dict, Optional

import structlog
from aiohttp import web

from .callback.handlers import create_app
from .config.settings import Settings
from .hub.client import HubClient
from .hub.renewer import SubscriptionRenewer

logger = structlog.get_logger(__name__)


class WebSubSubscriber:
    """
    Owns the callback listener and the renewal loop.

    ``start()`` binds the listener before the first subscribe request so
    the hub can reach the callback as soon as it verifies.
    """

    def __init__(self, settings: Settings, host: str = "0.0.0.0"):
        """
        Initialize the service.

        Args:
            settings: Startup configuration
            host: Interface to bind the callback listener on
        """
        self.settings = settings
        self.host = host
        self._running = False
        self._shutdown_event = asyncio.Event()

        self.app = create_app(settings)
        self.hub_client = HubClient(
            hub_url=settings.hub_url,
            timeout_seconds=settings.hub_timeout_seconds,
        )
        self.renewer = SubscriptionRenewer(settings, self.hub_client)

        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        """Bind the callback listener and start renewing the subscription.

        Raises:
            OSError: If the listener cannot bind its port
        """
        if self._running:
            return

        logger.info("Starting WebSub subscriber")

        try:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.settings.port)
            await site.start()

            logger.info(
                "Listening",
                host=self.host,
                port=self.settings.port,
                path=self.settings.callback_path,
            )

            await self.renewer.start()
            self._running = True

        except Exception as e:
            logger.error("Failed to start subscriber", error=str(e))
            await self._cleanup()
            raise

    async def stop(self) -> None:
        """Stop the renewer, then the listener, then release the hub session."""
        if not self._running:
            return

        logger.info("Stopping WebSub subscriber")

        self._running = False
        self._shutdown_event.set()
        await self._cleanup()

        logger.info("Subscriber stopped")

    async def _cleanup(self) -> None:
        await self.renewer.stop()

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        await self.hub_client.close()

    def request_shutdown(self) -> None:
        """Ask ``run()`` to return; safe to call from a signal handler."""
        self._shutdown_event.set()

    async def run(self) -> None:
        """Run until a shutdown is requested (SIGINT or SIGTERM)."""
        try:
            await self.start()
            self._setup_signal_handlers()

            try:
                await self._shutdown_event.wait()
            except asyncio.CancelledError:
                logger.info("Subscriber operation cancelled")
        finally:
            self._remove_signal_handlers()
            await self.stop()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()

            def signal_handler(signum: int) -> None:
                logger.info("Received signal, initiating shutdown", signal=signum)
                self.request_shutdown()

            for signum in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(signum, signal_handler, signum)

    def _remove_signal_handlers(self) -> None:
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for signum in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(signum)

    @property
    def running(self) -> bool:
        """Check if the subscriber is running."""
        return self._running

    def status(self) -> Dict[str, Any]:
        """Describe the running service."""
        return {
            "running": self._running,
            "callback_url": self.settings.callback_url,
            "topic_url": self.settings.topic_url,
            "hub_url": self.settings.hub_url,
            "renewer": self.renewer.get_stats(),
        }
