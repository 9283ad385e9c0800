"""Watch source adapters for receiving Secret change notifications.

Implementations:
- Kubernetes (official kubernetes Python client, thread-per-watch)
"""
