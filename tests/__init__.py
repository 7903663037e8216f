"""Test package for Chat Relay.

Unit tests cover each relay component in isolation; integration tests
drive the FastAPI app over HTTP and WebSocket.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests
    - fakes.py: Scripted completion provider and in-memory transport

No test needs an API key or network access.
Leverages pytest with pytest-check for soft assertions.
"""
