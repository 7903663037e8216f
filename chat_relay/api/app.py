"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration. Shared relay components (configuration, completion
provider, driver and renderer) live on ``app.state``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import chat_relay
from chat_relay.api.routes import router as chat_router
from chat_relay.config import RelayConfig
from chat_relay.relay.provider import CompletionProvider, OpenAICompletionProvider
from chat_relay.rendering import FragmentRenderer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    The completion driver is built on the first WebSocket handshake, so a
    missing API key rejects connections instead of stopping the server.
    Closes the provider's HTTP client on shutdown if the app created it.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting chat relay...")
    yield
    # Shutdown
    logger.info("Shutting down chat relay...")
    if app.state.owns_provider and isinstance(app.state.provider, OpenAICompletionProvider):
        await app.state.provider.close()


def create_app(
    config: RelayConfig | None = None,
    provider: CompletionProvider | None = None,
    renderer: FragmentRenderer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Relay configuration. Loaded from environment on the first
            WebSocket handshake if omitted.
        provider: Completion provider. An OpenAI provider is built if omitted.
        renderer: Rendering context. The packaged templates are used if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Chat Relay",
        description=(
            "Streams chat completions to the browser over a WebSocket. "
            "Each connection keeps its own conversation history and receives "
            "the reply as HTML fragments while the model generates it."
        ),
        version=chat_relay.__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.state.config = config
    application.state.provider = provider
    application.state.owns_provider = False
    application.state.driver = None
    application.state.renderer = renderer or FragmentRenderer()

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "chat-relay"}

    return application


app = create_app()
