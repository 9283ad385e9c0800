"""Composition root for the secretpoll bridge.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Entry point selection (daemon or single cycle)
"""

import asyncio
import logging
import sys

from secretpoll.adapters.scheduler.daemon import DaemonScheduler
from secretpoll.adapters.sink.stdout import StdoutMessageSink
from secretpoll.adapters.sink.webhook import WebhookMessageSink
from secretpoll.adapters.watch.kubernetes import KubernetesSecretWatchAdapter
from secretpoll.config import Settings, load_settings
from secretpoll.core.poll_service import SecretsPollService
from secretpoll.core.ports import MessageProcessorPort


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_sink(settings: Settings) -> MessageProcessorPort:
    """Instantiate the configured downstream sink.

    Raises:
        ValueError: If the sink backend is unknown.
    """
    if settings.sink_backend == "stdout":
        return StdoutMessageSink(verbose=settings.debug)
    if settings.sink_backend == "webhook":
        return WebhookMessageSink(
            url=settings.sink_webhook_url,
            token=settings.sink_webhook_token,
            timeout_seconds=settings.sink_webhook_timeout_seconds,
        )
    raise ValueError(f"Unknown sink backend: {settings.sink_backend}")


def build_scheduler(settings: Settings, poll_service: SecretsPollService) -> DaemonScheduler:
    return DaemonScheduler(
        poll_port=poll_service,
        poll_interval_seconds=settings.poll_interval_seconds,
        initial_delay_seconds=settings.poll_initial_delay_seconds,
        backoff_multiplier=settings.poll_backoff_multiplier,
        backoff_error_threshold=settings.poll_backoff_error_threshold,
        backoff_idle_threshold=settings.poll_backoff_idle_threshold,
        greedy=settings.poll_greedy,
    )


async def bootstrap(settings: Settings | None = None) -> None:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize the secrets consumer
    5. Select and start run mode

    Raises:
        asyncio.CancelledError: On graceful shutdown signal
    """
    # Step 1: Load configuration
    if settings is None:
        settings = load_settings()

    # Step 2: Configure logging
    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading secretpoll bridge...")

    # Step 3: Instantiate adapters
    watch_source = KubernetesSecretWatchAdapter(
        master_url=settings.kubernetes_master_url,
        oauth_token=settings.kubernetes_oauth_token,
        verify_ssl=settings.kubernetes_verify_ssl,
        ca_cert_file=settings.kubernetes_ca_cert_file,
    )
    sink = build_sink(settings)
    logger.info(f"Sink adapter: {settings.sink_backend}")

    # Step 4: Initialize the consumer
    poll_service = SecretsPollService(
        watch_source=watch_source,
        processor=sink,
        oauth_token=settings.kubernetes_oauth_token,
        namespace=settings.kubernetes_namespace,
    )
    scheduler = build_scheduler(settings, poll_service)

    # Step 5: Start and run
    try:
        await poll_service.start()
        if not poll_service.watching:
            logger.info("No Kubernetes OAuth token configured, secrets will not be watched")

        logger.info(f"Starting in {settings.run_mode} mode...")
        if settings.run_mode == "daemon":
            await scheduler.start()
        else:
            await scheduler.run_single_cycle()
    finally:
        await poll_service.stop()
        watch_source.close()
        if hasattr(sink, "close"):
            await sink.close()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
