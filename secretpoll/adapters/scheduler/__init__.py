"""Scheduler adapters for driving the poll loop.

Implementations support multiple scheduling strategies:
- Daemon (asyncio event loop with fixed delay, greedy mode and backoff)
- Single cycle (one drain pass, for cron-style invocation)
"""
