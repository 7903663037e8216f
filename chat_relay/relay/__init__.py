"""Streaming relay between a client connection and a completion provider.

Responsibilities:
    - Conversation history per connection
    - One upstream streaming completion per user turn
    - Incremental forwarding of generated text while it streams
    - Completion signalling under failure and connection teardown

Each connection gets its own session and conversation log; the provider,
driver and renderer are shared.
"""

from chat_relay.relay.accumulator import TokenAccumulator
from chat_relay.relay.conversation import ConversationLog
from chat_relay.relay.driver import CompletionDriver
from chat_relay.relay.flush import flush_fragments
from chat_relay.relay.merge import CompletionMerger
from chat_relay.relay.provider import CompletionProvider, OpenAICompletionProvider
from chat_relay.relay.session import (
    ConnectionSession,
    SessionState,
    TurnOutcome,
    handle_connection,
)
from chat_relay.relay.transport import Frame, FrameKind, Transport, WebSocketTransport

__all__ = [
    "CompletionDriver",
    "CompletionMerger",
    "CompletionProvider",
    "ConnectionSession",
    "ConversationLog",
    "Frame",
    "FrameKind",
    "OpenAICompletionProvider",
    "SessionState",
    "TokenAccumulator",
    "Transport",
    "TurnOutcome",
    "WebSocketTransport",
    "flush_fragments",
    "handle_connection",
]
