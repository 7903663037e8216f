"""FastAPI endpoints for the chat relay.

HTTP and WebSocket routes with async request handling.
The WebSocket streams completion fragments as they are generated.

Endpoints:
    - GET /health: Service health status
    - GET /: Chat page
    - WS /ws: Chat relay connection
"""

from chat_relay.api.app import app, create_app

__all__ = ["app", "create_app"]
