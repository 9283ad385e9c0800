"""External adapters for the secretpoll bridge.

This package contains all external dependencies (Kubernetes API client,
HTTP clients, the asyncio scheduler) and provides implementations of the
core port interfaces.

Adapter Organization:

- watch/: Adapters delivering Secret change notifications (Kubernetes)
- sink/: Adapters consuming drained events (stdout, webhook)
- scheduler/: Adapters driving the poll loop (daemon)
"""
