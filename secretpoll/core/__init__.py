"""Core domain logic for the secretpoll bridge.

This package contains zero external dependencies and represents
the pure buffering and drain logic of the application. The Kubernetes
client, downstream sinks and scheduling are handled by the adapters
package.
"""

from .models import (
    EVENT_ACTION_HEADER,
    EVENT_TIMESTAMP_HEADER,
    Message,
    PollResult,
    SecretEvent,
    WatchAction,
)

__all__ = [
    "EVENT_ACTION_HEADER",
    "EVENT_TIMESTAMP_HEADER",
    "Message",
    "PollResult",
    "SecretEvent",
    "WatchAction",
]
