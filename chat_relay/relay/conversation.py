"""Conversation log shared by a connection and its in-flight completion."""

import asyncio
import logging
from collections.abc import Iterable, Iterator

from chat_relay.models import Message, Role

logger = logging.getLogger(__name__)


def build_system_context(system_prompt: str, snippets: Iterable[str]) -> str:
    """Join the base instructions and context snippets into one system message."""
    parts = [s.strip() for s in snippets if s and s.strip()]
    if not parts:
        return system_prompt
    context = "\n\n".join(parts)
    return f"{system_prompt}\n\nUse the following context when answering:\n\n{context}"


class ConversationLog:
    """Ordered, append-only list of messages for one connection.

    The insertion order is the context window sent upstream. Every
    read-modify-write goes through an asyncio lock so the session (seeding)
    and the completion driver (user and assistant turns) never interleave.
    """

    def __init__(self, system_prompt: str) -> None:
        self._system_prompt = system_prompt
        self._messages: list[Message] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    async def append(self, message: Message) -> None:
        async with self._lock:
            self._messages.append(message)

    async def seed_system_context(self, snippets: Iterable[str]) -> bool:
        """Append the system message built from ``snippets``.

        Only the first call on an empty log has an effect.

        Args:
            snippets: Context snippets sent with the first turn.

        Returns:
            True if a system message was appended.
        """
        async with self._lock:
            if self._messages:
                return False
            content = build_system_context(self._system_prompt, snippets)
            self._messages.append(Message(role=Role.SYSTEM, content=content))
        logger.debug(f"Seeded system context ({len(content)} chars)")
        return True

    async def snapshot(self) -> list[Message]:
        """Return a copy of the current contents."""
        async with self._lock:
            return list(self._messages)
