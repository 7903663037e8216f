"""Token buffer shared by a turn's completion driver and flush loop."""

import asyncio
import contextlib

from chat_relay.relay.errors import AccumulatorClosedError


class TokenAccumulator:
    """Fragment buffer paired with a completion flag.

    One producer (the completion driver) pushes fragments and marks the
    buffer done exactly once. One consumer (the flush loop) drains it.
    None of the methods below await, so each runs atomically on the event
    loop. ``wait`` lets the consumer wake on a push instead of a full tick.
    """

    def __init__(self) -> None:
        self._buffer: list[str] = []
        self._done = False
        self._changed = asyncio.Event()

    def push(self, fragment: str) -> None:
        if self._done:
            raise AccumulatorClosedError("Cannot push to a finished accumulator")
        self._buffer.append(fragment)
        self._changed.set()

    def drain(self) -> str:
        """Remove and return all buffered fragments, in arrival order."""
        if not self._buffer:
            return ""
        fragments, self._buffer = self._buffer, []
        return "".join(fragments)

    def mark_done(self) -> None:
        if self._done:
            raise AccumulatorClosedError("Accumulator already marked done")
        self._done = True
        self._changed.set()

    def is_done(self) -> bool:
        return self._done

    async def wait(self, timeout: float) -> None:
        """Suspend until a push or ``mark_done`` happens, or ``timeout`` passes."""
        with contextlib.suppress(TimeoutError):
            async with asyncio.timeout(timeout):
                await self._changed.wait()
        self._changed.clear()
