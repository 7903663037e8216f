"""Shared relay components stored on the application state."""

import logging

from fastapi import FastAPI

from chat_relay.config import get_relay_config
from chat_relay.relay.driver import CompletionDriver
from chat_relay.relay.provider import OpenAICompletionProvider

logger = logging.getLogger(__name__)


def resolve_driver(app: FastAPI) -> CompletionDriver:
    """Return the app's completion driver, building missing parts from the environment.

    Args:
        app: The FastAPI application instance.

    Returns:
        The shared CompletionDriver.

    Raises:
        ValueError: If no configuration was injected and no API key is set.
    """
    state = app.state
    if state.driver is not None:
        return state.driver

    if state.config is None:
        state.config = get_relay_config()
    if state.provider is None:
        state.provider = OpenAICompletionProvider(state.config)
        state.owns_provider = True

    state.driver = CompletionDriver(state.provider, state.config.model_name)
    logger.info(f"Completion driver ready: model={state.config.model_name}")
    return state.driver
