"""Poll cycle logic for the Secret watch bridge.

This module implements the consumer that owns the watch subscription
and drains the event buffer into the downstream processor each time the
scheduler triggers a poll.
"""

import asyncio
import logging
from datetime import datetime, timezone

from .buffer import Clock, EventBuffer, current_millis
from .listener import SecretWatchListener
from .models import Message, PollResult
from .ports import MessageProcessorPort, PollPort, WatchSourcePort, WatchSubscription

logger = logging.getLogger(__name__)


class ConsumerNotStartedError(RuntimeError):
    """Raised when a poll cycle is requested on a stopped consumer."""


class SecretsPollService(PollPort):
    """Implements the Secret consumer lifecycle and drain cycle.

    This service orchestrates:
    - Subscribing the watch listener when a credential is configured
    - Draining buffered events into the message processor
    - Clearing the buffer on stop

    Delivery is best-effort. If the processor raises on an entry, the
    entries already handed off are gone and the rest stay buffered for
    the next poll.
    """

    def __init__(
        self,
        watch_source: WatchSourcePort,
        processor: MessageProcessorPort,
        oauth_token: str = "",
        namespace: str = "",
        clock: Clock = current_millis,
    ):
        self.watch_source = watch_source
        self.processor = processor
        self.oauth_token = oauth_token
        self.namespace = namespace
        self.clock = clock
        self.buffer = EventBuffer()
        self.listener = SecretWatchListener(self.buffer, clock=clock)
        self.running = False
        self._subscription: WatchSubscription | None = None

    @property
    def watching(self) -> bool:
        return self._subscription is not None

    async def start(self) -> None:
        """Reset the buffer and subscribe to Secret notifications.

        Without an OAuth token the consumer runs idle: nothing is watched
        and every poll finds an empty buffer.
        """
        if self.running:
            logger.warning("Secrets consumer already running")
            return

        self.buffer = EventBuffer()
        self.listener = SecretWatchListener(self.buffer, clock=self.clock)

        if not self.oauth_token:
            self.running = True
            return

        namespace = self.namespace or None
        self._subscription = await asyncio.to_thread(
            self.watch_source.watch, self.listener, namespace
        )
        self.running = True
        logger.info(
            f"Watching secrets in namespace {namespace}"
            if namespace
            else "Watching secrets in all namespaces"
        )

    async def stop(self) -> None:
        """Close the watch subscription and discard pending events."""
        if not self.running:
            return

        self.running = False
        subscription, self._subscription = self._subscription, None
        try:
            if subscription is not None:
                await asyncio.to_thread(subscription.close)
        finally:
            pending = len(self.buffer)
            self.buffer.clear()
            if pending:
                logger.debug(f"Discarded {pending} undelivered secret events")

    async def execute_poll_cycle(self) -> PollResult:
        """Hand every buffered event to the processor and remove it.

        Returns a summary whose events_found is the buffer size when the
        cycle began.
        """
        if not self.running:
            raise ConsumerNotStartedError("Secrets consumer is not started")

        now = datetime.now(timezone.utc)
        events_found = len(self.buffer)
        delivered = 0

        for timestamp, event in self.buffer.snapshot():
            message = Message.from_event(timestamp, event)
            await self.processor.process(message)
            self.buffer.remove(timestamp)
            delivered += 1

        return PollResult(
            events_found=events_found,
            events_delivered=delivered,
            timestamp=now,
        )
