"""Stdout sink adapter.

Implements MessageProcessorPort by printing one line per drained event.
Only Secret metadata is printed; data values never leave the process.
"""

import asyncio
import logging
from datetime import datetime, timezone

from secretpoll.adapters.watch.kubernetes import resource_name
from secretpoll.core.models import Message
from secretpoll.core.ports import MessageProcessorPort

logger = logging.getLogger(__name__)


class StdoutMessageSink(MessageProcessorPort):
    """Prints drained Secret events to stdout."""

    def __init__(self, verbose: bool = False):
        """Initialize stdout sink.

        Args:
            verbose: If True, also list the Secret's data keys.
        """
        self.verbose = verbose

    async def process(self, message: Message) -> None:
        await asyncio.to_thread(print, self.format_message(message))

    def format_message(self, message: Message) -> str:
        """Format a message as a single human-readable line."""
        when = datetime.fromtimestamp(message.timestamp / 1000, tz=timezone.utc)
        line = (
            f"{when.isoformat(timespec='milliseconds')} "
            f"{message.action.value:<8} secret {resource_name(message.body)}"
        )
        if self.verbose:
            keys = self._data_keys(message.body)
            line += f" keys=[{', '.join(keys)}]"
        return line

    @staticmethod
    def _data_keys(secret: object) -> list[str]:
        data = (
            secret.get("data")
            if isinstance(secret, dict)
            else getattr(secret, "data", None)
        )
        return sorted(data) if data else []
