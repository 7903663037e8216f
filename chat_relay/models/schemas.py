from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Speaker of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single chat message in the conversation.

    Attributes:
        role: The speaker identifier (system, user, or assistant).
        content: The message text. Present for every message sent upstream
            or stored after a completion.
    """

    role: Role = Field(..., description="Message role: 'system', 'user', or 'assistant'")
    content: str | None = Field(None, description="The message content")

    def to_provider(self) -> dict[str, str]:
        """Return the message in the chat-completions wire format."""
        return {"role": self.role.value, "content": self.content or ""}


class ProtocolHeaders(BaseModel):
    """htmx metadata attached to every frame sent by the ws extension."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hx_request: str | None = Field(None, alias="HX-Request")
    hx_trigger: str | None = Field(None, alias="HX-Trigger")
    hx_trigger_name: Any = Field(None, alias="HX-Trigger-Name")
    hx_target: str | None = Field(None, alias="HX-Target")
    hx_current_url: str | None = Field(None, alias="HX-Current-URL")


class InboundChatRequest(BaseModel):
    """Payload of one inbound text frame.

    Attributes:
        chat: The user's message.
        context: Snippets used to seed the system message on the first turn.
        headers: Connection-protocol metadata sent under the ``HEADERS`` key.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    chat: str = Field(..., min_length=1)
    context: list[str] = Field(default_factory=list)
    headers: ProtocolHeaders = Field(default_factory=ProtocolHeaders, alias="HEADERS")

    @field_validator("chat", mode="before")
    @classmethod
    def strip_chat(cls, v: str) -> str:
        """Strip whitespace from chat before validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("context", mode="before")
    @classmethod
    def listify_context(cls, v: Any) -> Any:
        """Accept a single snippet; htmx sends one-element form fields as strings."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v


class DeltaChoice(BaseModel):
    """Incremental state of one choice within a streamed delta."""

    index: int = 0
    role: Role | None = None
    content: str | None = None
    finish_reason: str | None = None


class CompletionDelta(BaseModel):
    """One incremental unit of a streamed completion response.

    Attributes:
        id: Completion identifier shared by every delta of one stream.
        choices: Per-choice increments carried by this delta.
    """

    id: str | None = None
    choices: list[DeltaChoice] = Field(default_factory=list)

    @property
    def fragment(self) -> str | None:
        """Text carried by the choice with index 0, wherever it sits in the list."""
        for choice in self.choices:
            if choice.index == 0:
                return choice.content
        return None

    @property
    def finished(self) -> bool:
        """Whether any choice carries a finish marker."""
        return any(choice.finish_reason for choice in self.choices)

    @classmethod
    def from_chunk(cls, chunk: Any) -> "CompletionDelta":
        """Build a delta from an OpenAI ``ChatCompletionChunk``."""
        choices = []
        for choice in getattr(chunk, "choices", None) or []:
            delta = getattr(choice, "delta", None)
            choices.append(
                DeltaChoice(
                    index=getattr(choice, "index", 0) or 0,
                    role=getattr(delta, "role", None),
                    content=getattr(delta, "content", None),
                    finish_reason=getattr(choice, "finish_reason", None),
                )
            )
        return cls(id=getattr(chunk, "id", None), choices=choices)


class CompletionChoice(BaseModel):
    """A fully merged choice."""

    index: int
    message: Message
    finish_reason: str | None = None


class Completion(BaseModel):
    """Final result of merging every delta of a stream."""

    id: str | None = None
    choices: list[CompletionChoice] = Field(default_factory=list)
