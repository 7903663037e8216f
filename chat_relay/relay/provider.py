"""Completion providers that stream token deltas.

The relay only needs a provider to turn an ordered message list into an
async stream of ``CompletionDelta``. ``OpenAICompletionProvider`` does this
against OpenAI or any OpenAI-compatible endpoint.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from openai import AsyncOpenAI

from chat_relay.config import RelayConfig, get_relay_config
from chat_relay.models import CompletionDelta, Message

logger = logging.getLogger(__name__)


class CompletionProvider(Protocol):
    """Anything that can stream a chat completion."""

    def stream_complete(
        self, model_id: str, messages: Sequence[Message]
    ) -> AsyncIterator[CompletionDelta]: ...


class OpenAICompletionProvider:
    """Streams chat completions from the OpenAI API.

    Wraps ``AsyncOpenAI`` so the rest of the relay never sees the SDK's
    chunk types. One client is created per provider and shared by every
    connection.
    """

    def __init__(self, config: RelayConfig | None = None) -> None:
        """Initialize the provider.

        Args:
            config: Optional relay configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_relay_config()
        self._client = self._create_client()

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self._config.api_key,
            base_url=self._config.base_url,
        )

    async def stream_complete(
        self,
        model_id: str,
        messages: Sequence[Message],
    ) -> AsyncIterator[CompletionDelta]:
        """Stream deltas for a completion over ``messages``.

        Args:
            model_id: Model identifier to request.
            messages: The conversation so far, oldest first.

        Yields:
            One delta per chunk received from the API.
        """
        stream = await self._client.chat.completions.create(
            model=model_id,
            messages=[m.to_provider() for m in messages],
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            stream=True,
        )
        logger.debug(f"Opened completion stream: model={model_id} messages={len(messages)}")

        # Releases the HTTP response as soon as the consumer stops or is cancelled
        async with stream:
            async for chunk in stream:
                yield CompletionDelta.from_chunk(chunk)

    async def close(self) -> None:
        await self._client.close()
