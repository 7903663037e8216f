"""Flush loop: forwards buffered tokens to the connection as they arrive."""

import logging
from collections.abc import Awaitable, Callable

from chat_relay.relay.accumulator import TokenAccumulator

logger = logging.getLogger(__name__)

# Sends one fragment of text for the given turn index
FragmentSender = Callable[[str, int], Awaitable[None]]


async def flush_fragments(
    accumulator: TokenAccumulator,
    send: FragmentSender,
    turn_index: int,
    interval: float,
) -> int:
    """Forward drained text until the producer is done.

    The done flag is read before each drain, and one more drain runs after
    the loop exits, so a fragment pushed just before ``mark_done`` is never
    dropped. Send failures propagate unchanged.

    Args:
        accumulator: The turn's token accumulator.
        send: Coroutine sending one text fragment downstream.
        turn_index: Ordinal of the turn, passed through to ``send``.
        interval: Longest wait in seconds between two drains.

    Returns:
        Number of fragments sent.
    """
    sent = 0
    while True:
        await accumulator.wait(interval)
        finished = accumulator.is_done()
        text = accumulator.drain()
        if text:
            await send(text, turn_index)
            sent += 1
        if finished:
            break

    # Final drain for anything that landed after the last check
    text = accumulator.drain()
    if text:
        await send(text, turn_index)
        sent += 1

    logger.debug(f"Flushed turn {turn_index} in {sent} sends")
    return sent
