"""Tests for the Kubernetes Secret watch adapter.

The kubernetes client is never contacted: watch.Watch is replaced by a
scripted stream and the CoreV1 API by a MagicMock.
"""

import threading
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from secretpoll.adapters.watch.kubernetes import (
    KubernetesSecretWatchAdapter,
    KubernetesWatchSubscription,
    parse_action,
    resource_name,
)
from secretpoll.core.models import WatchAction
from secretpoll.core.ports import WatchHandler

WATCH_PATH = "secretpoll.adapters.watch.kubernetes.watch.Watch"


class RecordingHandler(WatchHandler):
    """WatchHandler capturing callbacks and signalling closure."""

    def __init__(self) -> None:
        self.events: list[tuple[WatchAction, Any]] = []
        self.close_errors: list[BaseException | None] = []
        self.closed = threading.Event()

    def on_event(self, action: WatchAction, resource: Any) -> None:
        self.events.append((action, resource))

    def on_close(self, error: BaseException | None) -> None:
        self.close_errors.append(error)
        self.closed.set()


class ScriptedWatch:
    """Stand-in for kubernetes.watch.Watch yielding canned events."""

    def __init__(self, events: list[dict], error: BaseException | None = None) -> None:
        self.events = events
        self.error = error
        self.stream_func: Any = None
        self.stream_kwargs: dict[str, Any] = {}
        self.stopped = False

    def stream(self, func: Any, **kwargs: Any) -> Iterator[dict]:
        self.stream_func = func
        self.stream_kwargs = kwargs
        for event in self.events:
            if self.stopped:
                return
            yield event
        if self.error is not None:
            raise self.error

    def stop(self) -> None:
        self.stopped = True


def _secret(name: str, namespace: str = "default") -> client.V1Secret:
    return client.V1Secret(metadata=client.V1ObjectMeta(name=name, namespace=namespace))


def _run_subscription(scripted: ScriptedWatch, handler: RecordingHandler) -> KubernetesWatchSubscription:
    with patch(WATCH_PATH, return_value=scripted):
        subscription = KubernetesWatchSubscription(MagicMock(), handler)
    subscription.start()
    assert handler.closed.wait(timeout=5)
    return subscription


# --- helpers ---


def test_parse_action_known_types() -> None:
    assert parse_action("ADDED") is WatchAction.ADDED
    assert parse_action("MODIFIED") is WatchAction.MODIFIED
    assert parse_action("DELETED") is WatchAction.DELETED
    assert parse_action("ERROR") is WatchAction.ERROR


def test_parse_action_ignores_bookmark() -> None:
    assert parse_action("BOOKMARK") is None
    assert parse_action(None) is None


def test_resource_name_for_model_and_dict() -> None:
    assert resource_name(_secret("tls", "web")) == "web/tls"
    assert resource_name({"metadata": {"name": "tls"}}) == "tls"
    assert resource_name(object()) == "<unknown>"


# --- KubernetesWatchSubscription ---


def test_subscription_forwards_events_then_clean_close() -> None:
    first, second = _secret("a"), _secret("b")
    scripted = ScriptedWatch(
        [
            {"type": "ADDED", "object": first},
            {"type": "BOOKMARK", "object": None},
            {"type": "MODIFIED", "object": second},
        ]
    )
    handler = RecordingHandler()

    _run_subscription(scripted, handler)

    assert handler.events == [(WatchAction.ADDED, first), (WatchAction.MODIFIED, second)]
    assert handler.close_errors == [None]


def test_subscription_reports_stream_failure() -> None:
    error = ApiException(status=410, reason="Gone")
    scripted = ScriptedWatch([{"type": "ADDED", "object": _secret("a")}], error=error)
    handler = RecordingHandler()

    _run_subscription(scripted, handler)

    assert len(handler.events) == 1
    assert handler.close_errors == [error]


def test_close_stops_watch_and_is_idempotent() -> None:
    release = threading.Event()

    class BlockingWatch(ScriptedWatch):
        def stream(self, func: Any, **kwargs: Any) -> Iterator[dict]:
            release.wait(timeout=5)
            yield {"type": "ADDED", "object": _secret("late")}

    scripted = BlockingWatch([])
    handler = RecordingHandler()
    with patch(WATCH_PATH, return_value=scripted):
        subscription = KubernetesWatchSubscription(
            MagicMock(), handler, join_timeout_seconds=0.01
        )
    subscription.start()

    subscription.close()
    subscription.close()
    release.set()

    assert handler.closed.wait(timeout=5)
    assert subscription.closed
    assert scripted.stopped
    assert handler.events == []
    assert handler.close_errors == [None]


# --- KubernetesSecretWatchAdapter ---


def test_watch_all_namespaces_uses_cluster_wide_list() -> None:
    core_api = MagicMock()
    adapter = KubernetesSecretWatchAdapter(master_url="https://k8s:6443", oauth_token="t")
    adapter._core_api = core_api
    scripted = ScriptedWatch([])
    handler = RecordingHandler()

    with patch(WATCH_PATH, return_value=scripted):
        adapter.watch(handler)
    assert handler.closed.wait(timeout=5)

    assert scripted.stream_func is core_api.list_secret_for_all_namespaces
    assert scripted.stream_kwargs == {}


def test_watch_namespace_uses_namespaced_list() -> None:
    core_api = MagicMock()
    adapter = KubernetesSecretWatchAdapter(
        master_url="https://k8s:6443", oauth_token="t", server_timeout_seconds=300
    )
    adapter._core_api = core_api
    scripted = ScriptedWatch([])
    handler = RecordingHandler()

    with patch(WATCH_PATH, return_value=scripted):
        adapter.watch(handler, namespace="payments")
    assert handler.closed.wait(timeout=5)

    assert scripted.stream_func is core_api.list_namespaced_secret
    assert scripted.stream_kwargs == {"namespace": "payments", "timeout_seconds": 300}


def test_build_configuration_with_master_url_and_token() -> None:
    adapter = KubernetesSecretWatchAdapter(
        master_url="https://k8s.example.com:6443",
        oauth_token="sa-token",
        verify_ssl=False,
        ca_cert_file="/etc/ssl/k8s-ca.pem",
    )

    configuration = adapter._build_configuration()

    assert configuration.host == "https://k8s.example.com:6443"
    assert configuration.api_key == {"authorization": "sa-token"}
    assert configuration.api_key_prefix == {"authorization": "Bearer"}
    assert configuration.verify_ssl is False
    assert configuration.ssl_ca_cert == "/etc/ssl/k8s-ca.pem"


def test_build_configuration_falls_back_to_kubeconfig() -> None:
    adapter = KubernetesSecretWatchAdapter(oauth_token="sa-token")

    with patch.object(
        config, "load_incluster_config", side_effect=config.ConfigException("not in cluster")
    ) as incluster, patch.object(config, "load_kube_config") as kubeconfig:
        configuration = adapter._build_configuration()

    incluster.assert_called_once()
    kubeconfig.assert_called_once_with(client_configuration=configuration)
    assert configuration.api_key == {"authorization": "sa-token"}


def test_close_releases_api_client() -> None:
    core_api = MagicMock()
    adapter = KubernetesSecretWatchAdapter()
    adapter._core_api = core_api

    adapter.close()
    adapter.close()

    core_api.api_client.close.assert_called_once()
    assert adapter._core_api is None


@pytest.mark.parametrize("namespace", [None, "payments"])
def test_subscription_thread_is_daemon(namespace: str | None) -> None:
    adapter = KubernetesSecretWatchAdapter(master_url="https://k8s:6443")
    adapter._core_api = MagicMock()
    handler = RecordingHandler()

    with patch(WATCH_PATH, return_value=ScriptedWatch([])):
        subscription = adapter.watch(handler, namespace=namespace)
    assert handler.closed.wait(timeout=5)

    assert isinstance(subscription, KubernetesWatchSubscription)
    assert subscription._thread.daemon
