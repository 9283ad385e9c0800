"""Fake PollPort implementation for testing."""

from datetime import UTC, datetime

from secretpoll.core.models import PollResult
from secretpoll.core.ports import PollPort


class FakePollPort(PollPort):
    """In-memory poll port for testing.

    Allows tests to configure and track poll cycle executions.
    """

    def __init__(self) -> None:
        """Initialize with default values."""
        self.poll_results: list[PollResult] = []
        self.execute_poll_cycle_call_count = 0
        self.default_poll_result: PollResult | None = None
        self.should_fail: bool = False
        self.fail_message: str = "Poll failed"

    def set_default_poll_result(self, result: PollResult) -> None:
        """Set the default poll result to return."""
        self.default_poll_result = result

    def add_poll_result(self, result: PollResult) -> None:
        """Queue a poll result to be returned on next call."""
        self.poll_results.append(result)

    @property
    def poll_cycle_count(self) -> int:
        """Alias for execute_poll_cycle_call_count."""
        return self.execute_poll_cycle_call_count

    async def execute_poll_cycle(self) -> PollResult:
        """Execute a poll cycle.

        Returns queued results or the default result.
        """
        self.execute_poll_cycle_call_count += 1

        if self.should_fail:
            raise RuntimeError(self.fail_message)

        if self.poll_results:
            return self.poll_results.pop(0)

        if self.default_poll_result:
            return self.default_poll_result

        return PollResult(
            events_found=0,
            events_delivered=0,
            timestamp=datetime.now(UTC),
        )

    def set_should_fail(self, should_fail: bool, message: str = "Poll failed") -> None:
        """Configure the adapter to fail on the next operation."""
        self.should_fail = should_fail
        self.fail_message = message
