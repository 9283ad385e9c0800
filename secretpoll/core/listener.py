"""Watch callback that feeds the event buffer."""

import logging
from typing import Any

from .buffer import Clock, EventBuffer, current_millis
from .models import SecretEvent, WatchAction
from .ports import WatchHandler

logger = logging.getLogger(__name__)


class SecretWatchListener(WatchHandler):
    """Buffers every Secret notification under its arrival time."""

    def __init__(self, buffer: EventBuffer, clock: Clock = current_millis):
        self.buffer = buffer
        self.clock = clock

    def on_event(self, action: WatchAction, resource: Any) -> None:
        event = SecretEvent(action=action, secret=resource)
        self.buffer.put(self.clock(), event)

    def on_close(self, error: BaseException | None) -> None:
        # No resubscription here; the watch stays down until restart.
        if error is not None:
            logger.error(f"Secret watch closed: {error}", exc_info=error)
