"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - relay_config: Configuration with a test key and a short flush interval
    - renderer: Rendering context over the packaged templates
    - provider: Scripted completion provider replying "Hello world"
    - driver: Completion driver over the scripted provider
    - test_app: FastAPI app wired to the scripted provider
    - async_client: HTTPX client for API testing

The provider and transport fakes live in tests/fakes.py.
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from chat_relay.api.app import create_app
from chat_relay.config import RelayConfig
from chat_relay.relay.driver import CompletionDriver
from chat_relay.rendering import FragmentRenderer
from tests.fakes import ScriptedProvider


@pytest.fixture
def relay_config() -> RelayConfig:
    """Return a relay configuration that needs no environment.

    Returns:
        RelayConfig with a dummy key and a 5ms flush interval.
    """
    return RelayConfig(
        api_key="sk-test-key",
        model_name="gpt-test",
        flush_interval_ms=5,
        system_prompt="You are a helpful assistant.",
        strict_decoding=False,
    )


@pytest.fixture
def renderer() -> FragmentRenderer:
    """Return the rendering context over the packaged templates."""
    return FragmentRenderer()


@pytest.fixture
def provider() -> ScriptedProvider:
    """Return a provider streaming "Hel", "lo", " world"."""
    return ScriptedProvider()


@pytest.fixture
def driver(provider: ScriptedProvider, relay_config: RelayConfig) -> CompletionDriver:
    """Return a completion driver over the scripted provider."""
    return CompletionDriver(provider, relay_config.model_name)


@pytest.fixture
def test_app(relay_config: RelayConfig, provider: ScriptedProvider) -> FastAPI:
    """Create an app wired to the scripted provider."""
    return create_app(config=relay_config, provider=provider)


@pytest.fixture
async def async_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
