"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeWatchSource: Captures the subscribed handler and replays events
- FakeMessageProcessor: Captured messages for assertion
- FakePollPort: Canned poll cycle results
"""

from .poll import FakePollPort
from .processor import FakeMessageProcessor
from .watch import FakeWatchSource, FakeWatchSubscription

__all__ = [
    "FakeMessageProcessor",
    "FakePollPort",
    "FakeWatchSource",
    "FakeWatchSubscription",
]
