"""Kubernetes Secret watch adapter.

Implements WatchSourcePort on top of the official kubernetes client.
Each subscription streams watch events on a dedicated daemon thread and
forwards them to the core's WatchHandler.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from kubernetes import client, config, watch

from secretpoll.core.models import WatchAction
from secretpoll.core.ports import WatchHandler, WatchSourcePort, WatchSubscription

logger = logging.getLogger(__name__)


def parse_action(event_type: str | None) -> WatchAction | None:
    """Map a raw watch event type to a WatchAction.

    Returns None for types the bridge does not buffer (e.g. BOOKMARK).
    """
    try:
        return WatchAction(event_type)
    except ValueError:
        return None


class KubernetesWatchSubscription(WatchSubscription):
    """Running watch stream bound to one thread."""

    def __init__(
        self,
        stream: Callable[..., Any],
        handler: WatchHandler,
        join_timeout_seconds: float = 1.0,
        name: str = "secret-watch",
        **stream_kwargs: Any,
    ):
        self.handler = handler
        self.join_timeout_seconds = join_timeout_seconds
        self._stream = stream
        self._stream_kwargs = stream_kwargs
        self._watch = watch.Watch()
        self._closed = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def start(self) -> "KubernetesWatchSubscription":
        self._thread.start()
        return self

    def _run(self) -> None:
        try:
            for event in self._watch.stream(self._stream, **self._stream_kwargs):
                if self.closed:
                    break
                action = parse_action(event.get("type"))
                if action is None:
                    logger.debug(f"Ignoring watch event of type {event.get('type')}")
                    continue
                self.handler.on_event(action, event["object"])
        except Exception as e:
            if self.closed:
                # Stream torn down by close(); not a failure.
                self.handler.on_close(None)
            else:
                self.handler.on_close(e)
            return

        self.handler.on_close(None)

    def close(self) -> None:
        if self.closed:
            return

        self._closed.set()
        self._watch.stop()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            # The stream only notices stop() on its next event; don't wait for it.
            self._thread.join(timeout=self.join_timeout_seconds)


class KubernetesSecretWatchAdapter(WatchSourcePort):
    """Watches Secret resources through the Kubernetes API."""

    def __init__(
        self,
        master_url: str = "",
        oauth_token: str = "",
        verify_ssl: bool = True,
        ca_cert_file: str = "",
        server_timeout_seconds: int | None = None,
    ):
        """Initialize the Kubernetes watch adapter.

        Args:
            master_url: API server URL. If empty, use in-cluster
                configuration, falling back to the local kubeconfig.
            oauth_token: Bearer token sent with every request.
            verify_ssl: Verify the API server's TLS certificate.
            ca_cert_file: Path to a CA bundle for the API server.
            server_timeout_seconds: Server-side watch timeout. If None,
                the API server's default applies.
        """
        self.master_url = master_url
        self.oauth_token = oauth_token
        self.verify_ssl = verify_ssl
        self.ca_cert_file = ca_cert_file
        self.server_timeout_seconds = server_timeout_seconds
        self._core_api: client.CoreV1Api | None = None

    def _build_configuration(self) -> client.Configuration:
        configuration = client.Configuration()

        if self.master_url:
            configuration.host = self.master_url
        else:
            try:
                config.load_incluster_config(client_configuration=configuration)
            except config.ConfigException:
                config.load_kube_config(client_configuration=configuration)

        if self.oauth_token:
            configuration.api_key = {"authorization": self.oauth_token}
            configuration.api_key_prefix = {"authorization": "Bearer"}

        configuration.verify_ssl = self.verify_ssl
        if self.ca_cert_file:
            configuration.ssl_ca_cert = self.ca_cert_file

        return configuration

    def _get_core_api(self) -> client.CoreV1Api:
        """Get or create the CoreV1 API client."""
        if self._core_api is None:
            api_client = client.ApiClient(self._build_configuration())
            self._core_api = client.CoreV1Api(api_client)
        return self._core_api

    def watch(
        self, handler: WatchHandler, namespace: str | None = None
    ) -> WatchSubscription:
        core_api = self._get_core_api()

        stream_kwargs: dict[str, Any] = {}
        if self.server_timeout_seconds is not None:
            stream_kwargs["timeout_seconds"] = self.server_timeout_seconds

        if namespace:
            stream_kwargs["namespace"] = namespace
            subscription = KubernetesWatchSubscription(
                core_api.list_namespaced_secret,
                handler,
                name=f"secret-watch-{namespace}",
                **stream_kwargs,
            )
        else:
            subscription = KubernetesWatchSubscription(
                core_api.list_secret_for_all_namespaces,
                handler,
                **stream_kwargs,
            )

        logger.debug(
            f"Starting secret watch ({namespace or 'all namespaces'})"
        )
        return subscription.start()

    def close(self) -> None:
        """Close the underlying API client."""
        if self._core_api is not None:
            self._core_api.api_client.close()
            self._core_api = None


_serializer: client.ApiClient | None = None


def to_serializable(resource: Any) -> Any:
    """Convert a kubernetes model (or plain data) to JSON-compatible data.

    Uses the client's own serializer so keys come out in API casing
    (``apiVersion``, ``metadata.resourceVersion``).
    """
    global _serializer
    if _serializer is None:
        _serializer = client.ApiClient()
    return _serializer.sanitize_for_serialization(resource)


def resource_name(resource: Any) -> str:
    """Return ``namespace/name`` for a Secret model or dict, best effort."""
    metadata = (
        resource.get("metadata")
        if isinstance(resource, dict)
        else getattr(resource, "metadata", None)
    )
    if metadata is None:
        return "<unknown>"
    if isinstance(metadata, dict):
        name, namespace = metadata.get("name"), metadata.get("namespace")
    else:
        name, namespace = metadata.name, metadata.namespace
    if namespace:
        return f"{namespace}/{name}"
    return str(name)
