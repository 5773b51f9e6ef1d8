"""
HTTP handlers for the WebSub callback endpoint.

The hub calls the callback with GET to verify a subscription request
and with POST to deliver notifications for the subscribed topic.
"""

from dataclasses import dataclass
from typing import Mapping

import aiohttp
import structlog
from aiohttp import web
from aiohttp.http_exceptions import HttpProcessingError

from ..config.settings import Settings

logger = structlog.get_logger(__name__)

SNIPPET_MAX_BYTES = 1024
READ_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True)
class VerificationQuery:
    """Parameters of a hub verification request."""

    mode: str
    topic: str
    challenge: str
    lease_seconds: str
    verify_token: str

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "VerificationQuery":
        """Build from a request query string; absent parameters are empty."""
        return cls(
            mode=query.get("hub.mode", ""),
            topic=query.get("hub.topic", ""),
            challenge=query.get("hub.challenge", ""),
            lease_seconds=query.get("hub.lease_seconds", ""),
            verify_token=query.get("hub.verify_token", ""),
        )


class CallbackHandler:
    """
    Request handlers for the callback path.

    Holds only read-only settings; requests share no mutable state.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def token_matches(self, supplied: str) -> bool:
        """Whether a supplied verify token is acceptable.

        An empty supplied token is accepted, as is any token when none
        is configured.
        """
        expected = self.settings.verify_token
        return not expected or not supplied or supplied == expected

    async def handle_verify(self, request: web.Request) -> web.Response:
        """Answer the hub's verification handshake by echoing the challenge."""
        query = VerificationQuery.from_query(request.query)

        logger.info(
            "Verification request",
            mode=query.mode,
            topic=query.topic,
            lease_seconds=query.lease_seconds,
            verify_token=query.verify_token,
        )

        if not self.token_matches(query.verify_token):
            logger.warning("Rejected verification with bad verify_token", topic=query.topic)
            return web.Response(status=403, text="bad verify_token")

        # The hub compares the body byte for byte
        return web.Response(
            status=200,
            body=query.challenge.encode("utf-8"),
            content_type="text/plain",
        )

    async def handle_notify(self, request: web.Request) -> web.Response:
        """Log a notification delivery and acknowledge it."""
        # Streamed so there is no size cap; only the snippet is kept
        size = 0
        head = bytearray()
        try:
            async for chunk in request.content.iter_chunked(READ_CHUNK_BYTES):
                size += len(chunk)
                if len(head) < SNIPPET_MAX_BYTES:
                    head.extend(chunk[: SNIPPET_MAX_BYTES - len(head)])
        except (aiohttp.ClientPayloadError, HttpProcessingError, ConnectionError) as e:
            # Best effort: the hub only needs the acknowledgement
            logger.warning("Failed to read notification body", error=str(e), bytes_read=size)

        logger.info(
            "Notification received",
            content_type=request.headers.get("Content-Type", ""),
            bytes=size,
        )
        logger.info(
            "Notification snippet",
            snippet=bytes(head).decode("utf-8", errors="replace"),
        )

        return web.Response(status=204)


def create_app(settings: Settings) -> web.Application:
    """
    Create the callback application.

    Args:
        settings: Startup configuration

    Returns:
        Application serving GET and POST on the callback path; any other
        method on that path is answered with 405
    """
    handler = CallbackHandler(settings)

    app = web.Application()
    app.router.add_get(settings.callback_path, handler.handle_verify, allow_head=False)
    app.router.add_post(settings.callback_path, handler.handle_notify)

    return app
