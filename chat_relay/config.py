"""Relay configuration with environment variable loading.

Pydantic-based configuration for the chat relay.
Supports OpenAI and OpenAI-compatible APIs via custom base URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_SYSTEM_PROMPT = (
    "you are omniscient and really kind and friendly, "
    "you possess infinite wisdom and patience"
)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class RelayConfig(BaseModel):
    """Configuration for the streaming chat relay.

    Supports OpenAI and any OpenAI-compatible API via LLM_BASE_URL.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for OpenAI default).
        model_name: Model identifier sent with every completion request.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
        flush_interval_ms: Upper bound between two flushes of buffered tokens.
        system_prompt: Base instructions of the seeded system message.
        strict_decoding: Close the connection on a malformed frame instead
            of skipping it.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", "")),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    flush_interval_ms: int = Field(
        default_factory=lambda: int(os.getenv("FLUSH_INTERVAL_MS", "50")),
        ge=1,
        le=1000,
        description="Milliseconds between flushes of buffered tokens",
    )
    system_prompt: str = Field(
        default_factory=lambda: os.getenv("SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
        min_length=1,
        description="Instructions placed at the start of every conversation",
    )
    strict_decoding: bool = Field(
        default_factory=lambda: _env_flag("STRICT_DECODING"),
        description="Close the connection when an inbound frame cannot be decoded",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY or OPENAI_API_KEY in .env"
            )
        return v.strip()

    @property
    def flush_interval(self) -> float:
        """Flush interval in seconds."""
        return self.flush_interval_ms / 1000


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return RelayConfig()
