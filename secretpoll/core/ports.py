"""Port interfaces for the secretpoll bridge.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - WatchSourcePort: Subscribe to Secret change notifications
   - MessageProcessorPort: Hand drained events to the downstream pipeline

2. **Callback Capabilities** (adapters call back into core)
   - WatchHandler: Receives watch notifications and closure

3. **Driving Ports** (schedulers call into core)
   - PollPort: Entry point for drain cycles
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Message, PollResult, WatchAction


# ============================================================================
# CALLBACK CAPABILITIES (Adapters call back into core)
# ============================================================================


class WatchHandler(ABC):
    """Capability a watch source invokes for each notification.

    Implementations are called from the watch source's own thread, never
    from the event loop, and must not block.
    """

    @abstractmethod
    def on_event(self, action: WatchAction, resource: Any) -> None:
        """Handle one add/modify/delete/error notification.

        Args:
            action: Notification type.
            resource: Secret snapshot as delivered by the client library.
        """

    @abstractmethod
    def on_close(self, error: BaseException | None) -> None:
        """Handle the end of the watch stream.

        Args:
            error: Failure cause, or None when the stream closed cleanly.
        """


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class WatchSubscription(ABC):
    """Handle for an active watch returned by WatchSourcePort.watch()."""

    @abstractmethod
    def close(self) -> None:
        """Terminate the watch. Safe to call more than once."""


class WatchSourcePort(ABC):
    """Port for subscribing to Kubernetes Secret change notifications.

    Adapters own connection handling and threading. Reconnection after
    the stream ends, if any, is the adapter's concern; the core does not
    resubscribe.
    """

    @abstractmethod
    def watch(
        self, handler: WatchHandler, namespace: str | None = None
    ) -> WatchSubscription:
        """Start watching Secrets and deliver notifications to handler.

        Args:
            handler: Callback receiving events and closure.
            namespace: Restrict the watch to this namespace.
                If None, watch Secrets in all namespaces.

        Returns:
            Subscription handle used to stop the watch.

        Raises:
            Exception: If the subscription cannot be established.
        """


class MessageProcessorPort(ABC):
    """Port for the downstream pipeline consuming drained events.

    Implementations must raise on failure; the drain cycle relies on the
    exception to stop and leave unprocessed entries buffered.
    """

    @abstractmethod
    async def process(self, message: Message) -> None:
        """Process a single message.

        Args:
            message: Body is the Secret resource; headers carry the
                watch action and the buffer timestamp.

        Raises:
            Exception: If processing fails.
        """


# ============================================================================
# DRIVING PORTS (Schedulers call into core)
# ============================================================================


class PollPort(ABC):
    """Port for triggering drain cycles.

    Called by the scheduler on a fixed delay.
    """

    @abstractmethod
    async def execute_poll_cycle(self) -> PollResult:
        """Drain buffered events into the downstream processor.

        Returns:
            PollResult whose events_found is the buffer size at the start
            of the cycle.

        Raises:
            Exception: If the downstream processor fails on any entry.
        """
