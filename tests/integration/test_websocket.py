"""Integration tests for the chat page and the WebSocket relay.

Runs the real FastAPI app with the scripted completion provider, so no
API key or network access is needed.
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import AsyncClient
from starlette.websockets import WebSocketDisconnect

from chat_relay.api.app import create_app
from tests.fakes import ScriptedProvider, chat_frame, streamed_text


def _receive_reply(ws, turn: int, expected: str, limit: int = 20) -> list[str]:
    """Receive frames until the reply for ``turn`` is complete."""
    received: list[str] = []
    for _ in range(limit):
        if streamed_text(received, turn) == expected:
            break
        received.append(ws.receive_text())
    return received


class TestHttpEndpoints:
    """Tests for plain HTTP routes."""

    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "chat-relay"}

    async def test_chat_page_embeds_context(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/", params={"context": ["doc A: <cats>", "doc B"]})

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert 'ws-connect="/ws"' in response.text
        assert "doc A: &lt;cats&gt;" in response.text
        assert 'value="doc B"' in response.text

    async def test_cors_headers_present(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health", headers={"Origin": "http://localhost:3000"})

        assert "access-control-allow-origin" in response.headers


class TestWebSocketRelay:
    """Tests for the /ws relay."""

    def test_streams_reply_for_each_turn(self, test_app: FastAPI) -> None:
        with TestClient(test_app) as client, client.websocket_connect("/ws") as ws:
            ws.send_text(chat_frame("tell me about cats", ["doc A: cats are great"]).text)
            first = _receive_reply(ws, 1, "Hello world")

            ws.send_text(chat_frame("and dogs?").text)
            second = _receive_reply(ws, 3, "Hello world")

        assert "tell me about cats" in first[0]
        assert 'id="response-1"' in first[0]
        assert streamed_text(first, 1) == "Hello world"
        assert 'id="response-3"' in second[0]
        assert streamed_text(second, 3) == "Hello world"

    def test_history_is_sent_upstream(self, test_app: FastAPI, provider: ScriptedProvider) -> None:
        with TestClient(test_app) as client, client.websocket_connect("/ws") as ws:
            ws.send_text(chat_frame("first", ["doc A: cats are great"]).text)
            _receive_reply(ws, 1, "Hello world")
            ws.send_text(chat_frame("second").text)
            _receive_reply(ws, 3, "Hello world")

        _, messages = provider.calls[1]
        assert [m.role.value for m in messages] == ["system", "user", "assistant", "user"]
        assert "cats are great" in messages[0].content
        assert messages[2].content == "Hello world"

    def test_malformed_frame_keeps_connection(self, test_app: FastAPI) -> None:
        with TestClient(test_app) as client, client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            ws.send_text(chat_frame("hi").text)
            received = _receive_reply(ws, 1, "Hello world")

        assert streamed_text(received, 1) == "Hello world"

    def test_connections_have_separate_histories(self, test_app: FastAPI) -> None:
        with TestClient(test_app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.send_text(chat_frame("one").text)
                _receive_reply(ws, 1, "Hello world")
            with client.websocket_connect("/ws") as ws:
                ws.send_text(chat_frame("two").text)
                received = _receive_reply(ws, 1, "Hello world")

        assert 'id="response-1"' in received[0]

    def test_rejects_handshake_without_api_key(self) -> None:
        """The server starts without a key; only the handshake is refused."""
        with patch.dict("os.environ", {}, clear=True):
            with TestClient(create_app()) as client:
                health = client.get("/health")

                with pytest.raises(WebSocketDisconnect) as exc_info:
                    with client.websocket_connect("/ws") as ws:
                        ws.receive_text()

        assert health.status_code == 200
        assert exc_info.value.code == 1011
