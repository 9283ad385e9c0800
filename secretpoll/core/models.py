"""Domain models for the secretpoll bridge.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain. Kubernetes
resources are carried as opaque payloads.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

EVENT_ACTION_HEADER = "event-action"
EVENT_TIMESTAMP_HEADER = "event-timestamp"


class WatchAction(Enum):
    """Change notification types delivered by a Kubernetes watch."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SecretEvent:
    """A single watch notification for a Secret resource.

    The secret snapshot is opaque to the core: whatever the watch source
    delivered is passed through to the downstream message untouched.
    """

    action: WatchAction
    secret: Any

    def __post_init__(self) -> None:
        """Validate the action on creation."""
        if not isinstance(self.action, WatchAction):
            raise TypeError(
                f"action must be a WatchAction, got {type(self.action).__name__}"
            )


@dataclass(frozen=True)
class Message:
    """Unit of work handed to the downstream message processor."""

    body: Any
    headers: Mapping[str, Any]

    def __post_init__(self) -> None:
        """Convert headers dict to read-only proxy."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, "headers", MappingProxyType(self.headers))

    @property
    def action(self) -> WatchAction:
        return self.headers[EVENT_ACTION_HEADER]

    @property
    def timestamp(self) -> int:
        return self.headers[EVENT_TIMESTAMP_HEADER]

    @classmethod
    def from_event(cls, timestamp: int, event: SecretEvent) -> "Message":
        """Build the outbound message for a buffered event.

        Args:
            timestamp: Buffer key (milliseconds since epoch).
            event: The buffered secret event.

        Returns:
            Message whose body is the secret and whose headers carry
            the watch action and timestamp key.
        """
        return cls(
            body=event.secret,
            headers={
                EVENT_ACTION_HEADER: event.action,
                EVENT_TIMESTAMP_HEADER: timestamp,
            },
        )


@dataclass(frozen=True)
class PollResult:
    """Result of a single drain cycle."""

    events_found: int  # buffer size at the start of the poll
    events_delivered: int
    timestamp: datetime

    def __post_init__(self) -> None:
        """Validate counts on creation."""
        if self.events_found < 0:
            raise ValueError(
                f"events_found must be non-negative, got {self.events_found}"
            )
        if self.events_delivered < 0:
            raise ValueError(
                f"events_delivered must be non-negative, got {self.events_delivered}"
            )
