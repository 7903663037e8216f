"""Duplex connection abstraction used by the session.

``Frame`` is the transport-neutral view of one inbound message.
``WebSocketTransport`` adapts a FastAPI/Starlette ``WebSocket`` to it and
turns every "peer is gone" condition into ``TransportClosedError``.
"""

import logging
from enum import Enum
from typing import Protocol

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from pydantic import BaseModel

from chat_relay.relay.errors import TransportClosedError

logger = logging.getLogger(__name__)

# RFC 6455 close codes
CLOSE_NORMAL = 1000
CLOSE_NO_STATUS = 1005
CLOSE_INVALID_PAYLOAD = 1007


class FrameKind(str, Enum):
    TEXT = "text"
    CLOSE = "close"
    PING = "ping"
    PONG = "pong"
    BINARY = "binary"


class Frame(BaseModel):
    """One inbound frame.

    Attributes:
        kind: Frame type.
        text: Payload of a text frame.
        data: Payload of a binary, ping or pong frame.
        code: Close code of a close frame.
        reason: Close reason of a close frame.
    """

    kind: FrameKind
    text: str | None = None
    data: bytes | None = None
    code: int | None = None
    reason: str | None = None

    @classmethod
    def text_frame(cls, text: str) -> "Frame":
        return cls(kind=FrameKind.TEXT, text=text)

    @classmethod
    def close_frame(cls, code: int = CLOSE_NORMAL, reason: str = "") -> "Frame":
        return cls(kind=FrameKind.CLOSE, code=code, reason=reason)


class Transport(Protocol):
    """Duplex message channel owned by one session."""

    async def send_text(self, text: str) -> None: ...

    async def receive(self) -> Frame: ...

    async def close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None: ...


class WebSocketTransport:
    """Transport over an accepted FastAPI WebSocket.

    Ping and pong are answered by the ASGI server and never reach the
    application, so this adapter only produces text, binary and close frames.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._closed = False

    async def send_text(self, text: str) -> None:
        if self._closed:
            raise TransportClosedError("Connection already closed")
        try:
            await self._websocket.send_text(text)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            self._closed = True
            raise TransportClosedError(f"Send failed: {e!r}") from e

    async def receive(self) -> Frame:
        if self._closed:
            return Frame.close_frame(CLOSE_NO_STATUS, "connection already closed")
        try:
            message = await self._websocket.receive()
        except (WebSocketDisconnect, RuntimeError) as e:
            self._closed = True
            return Frame.close_frame(CLOSE_NO_STATUS, str(e))

        if message["type"] == "websocket.disconnect":
            self._closed = True
            return Frame.close_frame(
                message.get("code", CLOSE_NORMAL),
                message.get("reason") or "",
            )
        if message.get("text") is not None:
            return Frame.text_frame(message["text"])
        return Frame(kind=FrameKind.BINARY, data=message.get("bytes") or b"")

    async def close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None:
        if self._closed or self._websocket.client_state == WebSocketState.DISCONNECTED:
            self._closed = True
            return
        self._closed = True
        try:
            await self._websocket.close(code=code, reason=reason)
        except (RuntimeError, OSError) as e:
            logger.debug(f"Close after disconnect ignored: {e!r}")
