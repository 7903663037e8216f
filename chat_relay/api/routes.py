"""Chat page and WebSocket relay endpoint.

The page embeds optional context snippets as hidden form fields; the
htmx WebSocket extension sends them with every message, and the session
uses them to seed the system message of the first turn.
"""

import logging

from fastapi import APIRouter, Query, Request, WebSocket, status
from fastapi.responses import HTMLResponse

from chat_relay.api.dependencies import resolve_driver
from chat_relay.relay.session import handle_connection
from chat_relay.relay.transport import WebSocketTransport
from chat_relay.rendering.renderer import INDEX_PAGE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.get("/", response_class=HTMLResponse)
async def chat_page(
    request: Request,
    context: list[str] = Query([]),
) -> HTMLResponse:
    """Render the chat page.

    Args:
        request: The incoming request.
        context: Snippets sent as system context with the first message.

    Returns:
        The rendered chat page.
    """
    renderer = request.app.state.renderer
    return HTMLResponse(renderer.render(INDEX_PAGE, context=context))


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket) -> None:
    """Relay one chat connection until the client closes it.

    Rejects the handshake with 1011 if the completion driver cannot be
    built (for example, no API key configured).
    """
    try:
        driver = resolve_driver(websocket.app)
    except ValueError as e:
        logger.error(f"Completion driver unavailable: {e}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    await websocket.accept()
    client = websocket.client
    logger.info(f"WebSocket connected: {client.host if client else 'unknown'}")

    transport = WebSocketTransport(websocket)
    try:
        await handle_connection(
            transport,
            driver=driver,
            renderer=websocket.app.state.renderer,
            config=websocket.app.state.config,
        )
    finally:
        await transport.close()
        logger.info("WebSocket context destroyed")
