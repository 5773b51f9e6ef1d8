"""
Client for the WebSub hub's subscription endpoint.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
import structlog

from ..config.settings import DEFAULT_HUB_URL

logger = structlog.get_logger(__name__)


class HubSubscribeError(Exception):
    """A subscribe request was not accepted by the hub.

    ``status`` and ``body`` are set when the hub answered with a status of
    300 or above; ``original_error`` is set when the request never got a
    response.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.original_error = original_error


@dataclass(frozen=True)
class SubscriptionRequest:
    """A single subscribe request, built fresh for every attempt."""

    topic: str
    callback: str
    verify_token: str
    mode: str = "subscribe"
    verify: str = "async"

    def to_form(self) -> Dict[str, str]:
        """Form fields as sent to the hub."""
        return {
            "hub.mode": self.mode,
            "hub.topic": self.topic,
            "hub.callback": self.callback,
            "hub.verify": self.verify,
            "hub.verify_token": self.verify_token,
        }


class HubClient:
    """
    Sends subscription requests to a WebSub hub.

    The HTTP session is created on first use and must be released with
    ``close()``.
    """

    def __init__(self, hub_url: str = DEFAULT_HUB_URL, timeout_seconds: Optional[float] = None):
        """
        Initialize hub client.

        Args:
            hub_url: Hub base URL; ``subscribe`` is appended to it
            timeout_seconds: Total request timeout (None keeps aiohttp's default)
        """
        self.hub_url = hub_url if hub_url.endswith("/") else hub_url + "/"
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def subscribe_url(self) -> str:
        return self.hub_url + "subscribe"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            if self.timeout_seconds is not None:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
                )
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def subscribe(self, callback: str, topic: str, verify_token: str) -> None:
        """
        Ask the hub to subscribe ``callback`` to ``topic``.

        Args:
            callback: Public URL of the callback endpoint
            topic: Feed URL to subscribe to
            verify_token: Token the hub echoes back during verification

        Raises:
            HubSubscribeError: If the hub answers with a status of 300 or
                above, or the request fails at the transport level
        """
        request = SubscriptionRequest(topic=topic, callback=callback, verify_token=verify_token)
        session = self._get_session()

        try:
            # A redirect is a refusal, not something to follow
            async with session.post(
                self.subscribe_url,
                data=request.to_form(),
                allow_redirects=False,
            ) as resp:
                body = await resp.text(errors="replace")
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise HubSubscribeError(
                f"hub subscribe request failed: {e!r}",
                original_error=e,
            ) from e

        if status >= 300:
            raise HubSubscribeError(
                f"hub subscribe status {status}: {body}",
                status=status,
                body=body,
            )

        logger.debug("Hub accepted subscribe request", topic=topic, status=status)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
