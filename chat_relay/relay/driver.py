"""Completion driver: one upstream request per user turn.

Appends the user's message, streams the provider's reply into the turn's
token accumulator, merges the deltas into the final assistant message and
appends it to the conversation log. The accumulator is marked done on
every path out of ``run`` so the flush loop can never wait forever.
"""

import logging

from chat_relay.models import Message, Role
from chat_relay.relay.accumulator import TokenAccumulator
from chat_relay.relay.conversation import ConversationLog
from chat_relay.relay.errors import CompletionError, UpstreamError
from chat_relay.relay.merge import CompletionMerger
from chat_relay.relay.provider import CompletionProvider

logger = logging.getLogger(__name__)


class CompletionDriver:
    """Drives request/response cycles against a completion provider."""

    def __init__(self, provider: CompletionProvider, model_id: str) -> None:
        self._provider = provider
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    async def run(
        self,
        text: str,
        log: ConversationLog,
        accumulator: TokenAccumulator,
    ) -> Message:
        """Run one full turn.

        Args:
            text: The user's new message.
            log: The connection's conversation log.
            accumulator: Fresh accumulator for this turn.

        Returns:
            The assistant message appended to the log.

        Raises:
            UpstreamError: If the provider fails to open or continue the stream.
            MergeError: If two deltas cannot be merged.
            EmptyCompletionError: If the stream ends without any choice.
        """
        try:
            await log.append(Message(role=Role.USER, content=text))
            messages = await log.snapshot()

            merger = CompletionMerger()
            try:
                async for delta in self._provider.stream_complete(self._model_id, messages):
                    fragment = delta.fragment
                    if fragment:
                        accumulator.push(fragment)
                    merger.add(delta)
            except CompletionError:
                raise
            except Exception as e:
                raise UpstreamError(f"Completion stream failed: {e}") from e

            completion = merger.result()
            reply = Message(role=Role.ASSISTANT, content=completion.choices[0].message.content)
            await log.append(reply)
            logger.info(
                f"Completion finished: model={self._model_id} "
                f"deltas={merger.delta_count} chars={len(reply.content or '')}"
            )
            return reply
        finally:
            accumulator.mark_done()
