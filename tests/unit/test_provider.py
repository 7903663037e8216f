"""Unit tests for OpenAICompletionProvider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from chat_relay.config import RelayConfig
from chat_relay.models import Message, Role
from chat_relay.relay.provider import OpenAICompletionProvider


class _ChunkStream:
    """Async iterable standing in for the SDK's AsyncStream."""

    def __init__(self, chunks: list) -> None:
        self._chunks = chunks
        self.closed = False

    async def __aenter__(self) -> "_ChunkStream":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.closed = True

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk


def _chunk(content=None, role=None, finish=None) -> SimpleNamespace:
    return SimpleNamespace(
        id="chatcmpl-1",
        choices=[
            SimpleNamespace(
                index=0,
                delta=SimpleNamespace(role=role, content=content),
                finish_reason=finish,
            )
        ],
    )


class TestOpenAICompletionProvider:
    """Tests for the OpenAI-backed provider."""

    @patch("chat_relay.relay.provider.AsyncOpenAI")
    def test_client_uses_config(self, mock_client_class: MagicMock) -> None:
        config = RelayConfig(api_key="sk-test", base_url="http://localhost:11434/v1")

        OpenAICompletionProvider(config)

        mock_client_class.assert_called_once_with(
            api_key="sk-test",
            base_url="http://localhost:11434/v1",
        )

    @patch("chat_relay.relay.provider.AsyncOpenAI")
    async def test_streams_deltas(self, mock_client_class: MagicMock) -> None:
        create = AsyncMock(
            return_value=_ChunkStream(
                [_chunk("Hi", role="assistant"), _chunk(" there"), _chunk(finish="stop")]
            )
        )
        mock_client_class.return_value.chat.completions.create = create
        config = RelayConfig(api_key="sk-test", temperature=0.2, max_tokens=64)
        provider = OpenAICompletionProvider(config)
        messages = [
            Message(role=Role.SYSTEM, content="Be brief."),
            Message(role=Role.USER, content="hello"),
        ]

        deltas = [d async for d in provider.stream_complete("gpt-test", messages)]

        assert [d.fragment for d in deltas] == ["Hi", " there", None]
        assert deltas[-1].finished
        assert create.return_value.closed
        create.assert_awaited_once_with(
            model="gpt-test",
            messages=[
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "hello"},
            ],
            temperature=0.2,
            max_tokens=64,
            stream=True,
        )

    @patch("chat_relay.relay.provider.AsyncOpenAI")
    async def test_stream_closed_when_consumer_stops(self, mock_client_class: MagicMock) -> None:
        upstream = _ChunkStream([_chunk("Hi", role="assistant"), _chunk(" there"), _chunk(" again")])
        mock_client_class.return_value.chat.completions.create = AsyncMock(return_value=upstream)
        provider = OpenAICompletionProvider(RelayConfig(api_key="sk-test"))

        deltas = provider.stream_complete("gpt-test", [Message(role=Role.USER, content="hello")])
        first = await anext(deltas)
        assert not upstream.closed

        await deltas.aclose()

        assert first.fragment == "Hi"
        assert upstream.closed
