"""
Background renewal of the hub subscription.

The renewer subscribes once at startup and again after every fixed
interval. The interval does not follow the lease the hub grants.
"""

import asyncio
import time
from typing import Any, Dict, Optional

import structlog

from ..config.settings import Settings
from .client import HubClient, HubSubscribeError

logger = structlog.get_logger(__name__)


class SubscriptionRenewer:
    """
    Long-lived task that keeps the topic subscription alive.

    Failures are logged and the loop carries on to the next cycle; there
    is no backoff and no early retry.
    """

    def __init__(self, settings: Settings, hub_client: HubClient):
        """
        Initialize subscription renewer.

        Args:
            settings: Startup configuration (callback, channel, token, interval)
            hub_client: Client used for subscribe requests
        """
        self.settings = settings
        self.hub_client = hub_client
        self.interval_seconds = settings.renew_interval_seconds

        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self._is_running = False

        # Statistics
        self._attempts = 0
        self._failures = 0
        self._last_success_at: Optional[float] = None

    async def start(self) -> None:
        """Start the renewal loop in the background."""
        if self._is_running:
            return

        self._is_running = True
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run())

        logger.info(
            "Subscription renewer started",
            callback=self.settings.callback_url,
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the renewal loop, abandoning any request in flight."""
        if not self._is_running:
            return

        self._is_running = False
        self._stop_event.set()

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Subscription renewer stopped", attempts=self._attempts)

    async def renew_once(self) -> bool:
        """
        Send one subscribe request and log the outcome.

        Returns:
            True if the hub accepted the request
        """
        topic = self.settings.topic_url
        self._attempts += 1

        try:
            await self.hub_client.subscribe(
                callback=self.settings.callback_url,
                topic=topic,
                verify_token=self.settings.verify_token,
            )
        except HubSubscribeError as e:
            self._failures += 1
            logger.error("Subscribe failed", topic=topic, status=e.status, error=str(e))
            return False
        except Exception as e:
            # Log and continue: nothing here may end the renewal loop
            self._failures += 1
            logger.error("Subscribe failed", topic=topic, error=str(e), exc_info=True)
            return False

        self._last_success_at = time.time()
        logger.info("Subscribe OK", topic=topic)
        return True

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await self.renew_once()

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

    @property
    def running(self) -> bool:
        """Check if the renewal loop is running."""
        return self._is_running

    def get_stats(self) -> Dict[str, Any]:
        """Get renewal statistics."""
        return {
            "running": self._is_running,
            "attempts": self._attempts,
            "failures": self._failures,
            "last_success_at": self._last_success_at,
            "interval_seconds": self.interval_seconds,
        }
