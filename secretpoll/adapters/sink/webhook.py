"""Webhook sink adapter.

Implements MessageProcessorPort by POSTing each drained event as JSON
to an HTTP endpoint. Non-2xx responses raise, which fails the poll cycle
and leaves the remaining events buffered.
"""

import logging
from typing import Any

import httpx

from secretpoll.adapters.watch.kubernetes import resource_name, to_serializable
from secretpoll.core.models import EVENT_ACTION_HEADER, EVENT_TIMESTAMP_HEADER, Message
from secretpoll.core.ports import MessageProcessorPort

logger = logging.getLogger(__name__)


class WebhookMessageSink(MessageProcessorPort):
    """Forwards drained Secret events to an HTTP endpoint."""

    def __init__(
        self,
        url: str,
        token: str = "",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize webhook sink.

        Args:
            url: Endpoint receiving one POST per message.
            token: Optional bearer token for the Authorization header.
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport (used by tests).
        """
        if not url:
            raise ValueError("url must be a non-empty string")

        self.url = url
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def process(self, message: Message) -> None:
        client = await self._get_client()
        response = await client.post(self.url, json=self._format_payload(message))
        response.raise_for_status()
        logger.debug(
            f"Delivered {message.action.value} for secret "
            f"{resource_name(message.body)} ({response.status_code})"
        )

    @staticmethod
    def _format_payload(message: Message) -> dict[str, Any]:
        """Format a message as the webhook JSON document."""
        return {
            "headers": {
                EVENT_ACTION_HEADER: message.action.value,
                EVENT_TIMESTAMP_HEADER: message.timestamp,
            },
            "body": to_serializable(message.body),
        }
