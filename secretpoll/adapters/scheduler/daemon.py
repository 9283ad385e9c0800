"""Daemon scheduler adapter.

Implements a long-running asyncio polling loop that triggers drain
cycles with a fixed delay, optional greedy re-polling and backoff after
repeated idle or failed cycles.
"""

import asyncio
import logging
import signal
from typing import cast

from secretpoll.core.models import PollResult
from secretpoll.core.ports import PollPort

logger = logging.getLogger(__name__)


class DaemonScheduler:
    """Asyncio-based daemon scheduler for periodic poll cycles."""

    def __init__(
        self,
        poll_port: PollPort | None = None,
        poll_interval_seconds: float = 0.5,
        initial_delay_seconds: float = 0.0,
        backoff_multiplier: int = 0,
        backoff_error_threshold: int = 0,
        backoff_idle_threshold: int = 0,
        greedy: bool = False,
    ):
        """Initialize daemon scheduler.

        Args:
            poll_port: PollPort implementation to call for poll cycles (can be set later).
            poll_interval_seconds: Delay between the end of one cycle and the next.
            initial_delay_seconds: Delay before the first cycle.
            backoff_multiplier: Number of cycles to skip once a backoff
                threshold is reached (0 disables backoff).
            backoff_error_threshold: Consecutive failed cycles that trigger
                backoff (0 = never).
            backoff_idle_threshold: Consecutive cycles finding no events that
                trigger backoff (0 = never).
            greedy: Poll again without delay when a cycle found events.
        """
        if backoff_multiplier < 0:
            raise ValueError("backoff_multiplier must be non-negative")

        self.poll_port = poll_port
        self.poll_interval_seconds = poll_interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.backoff_multiplier = backoff_multiplier
        self.backoff_error_threshold = backoff_error_threshold
        self.backoff_idle_threshold = backoff_idle_threshold
        self.greedy = greedy
        self.running = False
        self._stop_event = asyncio.Event()
        self._error_count = 0  # consecutive failed cycles
        self._idle_count = 0  # consecutive empty cycles
        self._backoff_counter = 0  # cycles left to skip

    async def start(self) -> None:
        """Start the daemon scheduler loop.

        Blocks until stop() is called or a termination signal arrives.

        Raises:
            ValueError: If poll_port is not set.
        """
        if self.poll_port is None:
            raise ValueError("poll_port must be set before starting the scheduler")

        if self.running:
            logger.warning("Daemon scheduler already running")
            return

        self.running = True
        self._stop_event.clear()
        logger.info(
            f"Starting daemon scheduler with {self.poll_interval_seconds}s interval"
        )

        self._setup_signal_handlers()

        try:
            await self._run_loop()
        except asyncio.CancelledError:
            logger.info("Daemon scheduler cancelled")
        except Exception as e:
            logger.error(f"Daemon scheduler error: {e}", exc_info=True)
        finally:
            self.running = False
            logger.info("Daemon scheduler stopped")

    async def stop(self) -> None:
        """Stop the daemon scheduler loop."""
        if not self.running:
            return

        logger.info("Stopping daemon scheduler...")
        self.running = False
        self._stop_event.set()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        try:
            loop = asyncio.get_running_loop()

            def _handle_signal(sig: int) -> None:
                logger.info(f"Received signal {sig}, initiating graceful shutdown...")
                asyncio.create_task(self.stop())

            loop.add_signal_handler(
                signal.SIGTERM, _handle_signal, signal.SIGTERM
            )
            loop.add_signal_handler(signal.SIGINT, _handle_signal, signal.SIGINT)
        except NotImplementedError:
            # Signal handlers not available on Windows
            logger.debug("Signal handlers not available on this platform")
        except Exception as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    async def _sleep(self, seconds: float) -> None:
        """Sleep for the given time, returning early if stop() is called."""
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def _run_loop(self) -> None:
        """Main daemon loop."""
        # Type guard: poll_port is guaranteed to be non-None (checked in start())
        poll_port = cast(PollPort, self.poll_port)

        cycle_number = 0
        loop = asyncio.get_running_loop()

        if self.initial_delay_seconds > 0:
            await self._sleep(self.initial_delay_seconds)

        while self.running:
            cycle_number += 1
            events_found = 0

            if self._backoff_counter > 0:
                self._backoff_counter -= 1
                logger.debug(
                    f"Skipping poll cycle #{cycle_number} due to backoff "
                    f"({self._backoff_counter} more to skip)"
                )
            else:
                try:
                    start_time = loop.time()
                    result = await poll_port.execute_poll_cycle()
                    elapsed = loop.time() - start_time
                    events_found = result.events_found
                    self._record_success(result)

                    if events_found:
                        logger.info(
                            f"Poll cycle #{cycle_number} completed in {elapsed:.2f}s: "
                            f"{result.events_delivered} of {events_found} events delivered"
                        )
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    self._record_failure()
                    logger.error(
                        f"Error in poll cycle #{cycle_number}: {e} "
                        f"(consecutive failures: {self._error_count})",
                        exc_info=True,
                    )

                self._update_backoff()

            if not self.running:
                break
            if self.greedy and events_found > 0:
                await self._sleep(0)
            else:
                await self._sleep(self.poll_interval_seconds)

    def _record_success(self, result: PollResult) -> None:
        self._error_count = 0
        if result.events_found == 0:
            self._idle_count += 1
        else:
            self._idle_count = 0

    def _record_failure(self) -> None:
        self._error_count += 1
        self._idle_count = 0

    def _update_backoff(self) -> None:
        """Start skipping cycles when an idle or error threshold is reached."""
        if self.backoff_multiplier <= 0:
            return

        errors_hit = (
            self.backoff_error_threshold > 0
            and self._error_count >= self.backoff_error_threshold
        )
        idle_hit = (
            self.backoff_idle_threshold > 0
            and self._idle_count >= self.backoff_idle_threshold
        )
        if not (errors_hit or idle_hit):
            return

        logger.debug(
            f"Backing off for {self.backoff_multiplier} cycles "
            f"(errors={self._error_count}, idle={self._idle_count})"
        )
        self._backoff_counter = self.backoff_multiplier
        self._error_count = 0
        self._idle_count = 0

    async def run_single_cycle(self) -> PollResult:
        """Run a single poll cycle (non-daemon mode).

        Raises:
            ValueError: If poll_port is not set.
            Exception: Whatever the poll cycle raised.
        """
        if self.poll_port is None:
            raise ValueError("poll_port must be set to run a poll cycle")

        try:
            logger.info("Running single poll cycle")
            result = await self.poll_port.execute_poll_cycle()
            logger.info(
                f"Poll cycle completed: {result.events_delivered} of "
                f"{result.events_found} events delivered"
            )
            return result
        except Exception as e:
            logger.error(f"Error in poll cycle: {e}", exc_info=True)
            raise
