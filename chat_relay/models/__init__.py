"""Pydantic models for the relay's conversation state and wire payloads.

Provides type safety and validation for everything crossing a boundary:
the client connection on one side and the completion provider on the other.

Models:
    - Role: Speaker of a message
    - Message: Individual message in the conversation log
    - InboundChatRequest: Decoded client frame
    - CompletionDelta: One incremental unit of a streamed completion
    - Completion: Merged result of a completion stream
"""

from chat_relay.models.schemas import (
    Completion,
    CompletionChoice,
    CompletionDelta,
    DeltaChoice,
    InboundChatRequest,
    Message,
    ProtocolHeaders,
    Role,
)

__all__ = [
    "Completion",
    "CompletionChoice",
    "CompletionDelta",
    "DeltaChoice",
    "InboundChatRequest",
    "Message",
    "ProtocolHeaders",
    "Role",
]
