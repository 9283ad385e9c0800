"""Sink adapters for delivering drained Secret events downstream.

Implementations:
- Stdout (one summary line per event, no secret values)
- Webhook (JSON POST via httpx)
"""
