"""Per-connection state machine.

A session owns one conversation log for the lifetime of its connection.
It decodes each text frame into a chat request, seeds the system context
on the first turn, and runs one turn at a time: the completion driver in
its own task, the flush loop in the session's task. The driver task is
always joined before the next frame is read.

States::

    AWAITING_FRAME -> PROCESSING_TURN -> AWAITING_FRAME ...
          |                  |
          +--> CLOSED <------+   (close frame, send failure, strict decode failure)
"""

import asyncio
import logging
from enum import Enum

from pydantic import ValidationError

from chat_relay.config import RelayConfig
from chat_relay.models import InboundChatRequest
from chat_relay.relay.accumulator import TokenAccumulator
from chat_relay.relay.conversation import ConversationLog
from chat_relay.relay.driver import CompletionDriver
from chat_relay.relay.errors import CompletionError, FrameDecodeError, TransportClosedError
from chat_relay.relay.flush import flush_fragments
from chat_relay.relay.transport import CLOSE_INVALID_PAYLOAD, Frame, FrameKind, Transport
from chat_relay.rendering import FragmentRenderer

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    AWAITING_FRAME = "awaiting_frame"
    PROCESSING_TURN = "processing_turn"
    CLOSED = "closed"


class TurnOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


def decode_chat_request(payload: str | None) -> InboundChatRequest:
    """Decode a text frame payload.

    Raises:
        FrameDecodeError: If the payload is not JSON or misses required fields.
    """
    if payload is None:
        raise FrameDecodeError("Text frame without payload")
    try:
        return InboundChatRequest.model_validate_json(payload)
    except ValidationError as e:
        raise FrameDecodeError(f"Invalid chat request: {e.error_count()} error(s)") from e


class ConnectionSession:
    """Conversation state machine for one connection."""

    def __init__(
        self,
        transport: Transport,
        driver: CompletionDriver,
        renderer: FragmentRenderer,
        config: RelayConfig,
    ) -> None:
        self._transport = transport
        self._driver = driver
        self._renderer = renderer
        self._config = config
        self._log = ConversationLog(config.system_prompt)
        self._state = SessionState.AWAITING_FRAME
        self.turns_completed = 0
        self.turns_failed = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def log(self) -> ConversationLog:
        return self._log

    async def run(self) -> None:
        """Process frames until the connection closes."""
        logger.info(f"Session opened (model={self._driver.model_id})")
        try:
            while self._state is not SessionState.CLOSED:
                frame = await self._transport.receive()
                await self.handle_frame(frame)
        except TransportClosedError as e:
            logger.info(f"Peer gone, closing session: {e}")
        finally:
            self._state = SessionState.CLOSED
            logger.info(
                f"Session closed: turns={self.turns_completed} "
                f"failed={self.turns_failed} messages={len(self._log)}"
            )

    async def handle_frame(self, frame: Frame) -> TurnOutcome | None:
        """Apply one inbound frame to the state machine.

        Returns:
            The turn outcome for text frames, None for every other kind.

        Raises:
            TransportClosedError: If a send fails while processing the turn.
        """
        if self._state is SessionState.CLOSED:
            logger.debug(f"Ignoring {frame.kind.value} frame on closed session")
            return None

        if frame.kind is FrameKind.CLOSE:
            logger.info(f"Received close with code {frame.code} and reason {frame.reason!r}")
            self._state = SessionState.CLOSED
            return None

        if frame.kind is FrameKind.TEXT:
            return await self._handle_text(frame.text)

        # Ping replies are sent by the ASGI server
        logger.debug(f"Received {frame.kind.value} frame")
        return None

    async def _handle_text(self, payload: str | None) -> TurnOutcome:
        try:
            request = decode_chat_request(payload)
        except FrameDecodeError as e:
            logger.warning(f"Dropping malformed frame: {e}")
            if self._config.strict_decoding:
                self._state = SessionState.CLOSED
                await self._transport.close(CLOSE_INVALID_PAYLOAD, "malformed chat request")
            return TurnOutcome.SKIPPED

        self._state = SessionState.PROCESSING_TURN
        outcome = await self._run_turn(request)
        self._state = SessionState.AWAITING_FRAME
        return outcome

    async def _run_turn(self, request: InboundChatRequest) -> TurnOutcome:
        if await self._log.seed_system_context(request.context):
            logger.info(f"Seeded system context from {len(request.context)} snippet(s)")

        # Position of the user message, correlates fragments client-side
        turn_index = len(self._log)
        await self._transport.send_text(self._renderer.user_message(request.chat, turn_index))

        accumulator = TokenAccumulator()
        completion = asyncio.create_task(
            self._driver.run(request.chat, self._log, accumulator),
            name=f"completion-turn-{turn_index}",
        )
        try:
            await flush_fragments(
                accumulator,
                self._send_fragment,
                turn_index,
                self._config.flush_interval,
            )
        except BaseException:
            completion.cancel()
            await asyncio.gather(completion, return_exceptions=True)
            raise

        try:
            await completion
        except CompletionError as e:
            logger.warning(f"Turn {turn_index} failed: {e}")
        except Exception:
            logger.exception(f"Turn {turn_index} failed unexpectedly")
        else:
            self.turns_completed += 1
            return TurnOutcome.COMPLETED

        self.turns_failed += 1
        # Marks any partial reply already on the page as cut off
        await self._transport.send_text(self._renderer.error_fragment(turn_index))
        return TurnOutcome.FAILED

    async def _send_fragment(self, text: str, turn_index: int) -> None:
        await self._transport.send_text(self._renderer.stream_fragment(text, turn_index))


async def handle_connection(
    transport: Transport,
    *,
    driver: CompletionDriver,
    renderer: FragmentRenderer,
    config: RelayConfig,
) -> None:
    """Serve one connection until it closes.

    Args:
        transport: The accepted connection.
        driver: Completion driver shared by all connections.
        renderer: Rendering context shared by all connections.
        config: Relay configuration.
    """
    session = ConnectionSession(transport, driver, renderer, config)
    await session.run()
