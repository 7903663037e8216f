"""Integration tests for components working together as a system.

Coverage:
    - HTTP endpoints with real requests through ASGITransport
    - Full chat workflow over the WebSocket, from frame to streamed reply

The completion provider is scripted; everything else is the real app.
"""
