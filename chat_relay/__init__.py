"""Chat Relay - streaming chat completions over a WebSocket.

Combines FastAPI for the HTTP and WebSocket surface, the OpenAI SDK for
token-streaming completions, Jinja2 for HTML fragments, and Pydantic for
data validation.

Components:
    - api: HTTP endpoints and the WebSocket route
    - relay: Conversation state, completion driving and token flushing
    - rendering: Chat page and fragment templates
    - models: Message and wire schemas
"""

__version__ = "0.1.0"
