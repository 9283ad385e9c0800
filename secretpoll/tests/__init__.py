"""Test suite for the secretpoll bridge.

Organized into three categories:

1. core/: Unit tests for the buffer, listener and poll service
   - No external dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - Kubernetes client and HTTP calls are mocked
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory WatchSourcePort, MessageProcessorPort and PollPort
"""
