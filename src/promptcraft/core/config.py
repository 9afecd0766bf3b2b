"""Configuration management for Promptcraft.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROMPTCRAFT_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROMPTCRAFT_* prefix)
2. .env file in the project root
3. Default values defined in PromptcraftConfig

The upstream credential is the one exception to the prefix rule: it is read
from ``PROMPTCRAFT_OPENAI_API_KEY`` or, failing that, from the conventional
``OPENAI_API_KEY`` variable.

Example .env file:
    OPENAI_API_KEY=sk-...
    PROMPTCRAFT_RELAY_URL=http://127.0.0.1:8000/api/generate-image
    PROMPTCRAFT_OUTPUTS_DIR=outputs

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Both the relay and the Gradio client read from it.

Usage Example
-------------
    from promptcraft.core.config import config

    print(config.relay_url)
    print(config.retry_max_attempts)

Input Limits
------------
The hard input limits are module constants rather than settings because the
relay and the client must agree on them:

- MAX_PROMPT_LENGTH: 4000 characters
- MAX_FILE_SIZE_BYTES: 5 MiB per reference image
- MAX_REFERENCE_IMAGES: 5 images per request
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_PROMPT_LENGTH = 4000
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024
MAX_REFERENCE_IMAGES = 5
ALLOWED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/webp")

DEFAULT_PROMPT = "A beautiful, high-quality image"


class PromptcraftConfig(BaseSettings):
    """Main configuration for Promptcraft.

    Attributes
    ----------
    Upstream Settings (relay side):
        openai_api_key : str | None
            Credential for the upstream generation API. Never accepted from
            a request body.
        upstream_url : str
            Endpoint of the multimodal Responses API
        upstream_model : str
            Model that drives the image_generation tool
        upstream_timeout_seconds : float
            Hard timeout for one upstream call

    Relay Client Settings (UI side):
        relay_url : str
            URL of the relay's generate-image route
        relay_timeout_seconds : float
            Client timeout for one relay call (slightly above the upstream one)
        retry_max_attempts : int
            Attempts made by the retry wrapper
        retry_initial_delay_ms : int
            First backoff delay; doubles after each failed attempt
        connectivity_timeout_seconds : float
            Timeout of the pre-flight connectivity check

    Paths:
        outputs_dir : Path
            Directory where generated images are written for display/download

    Server Settings:
        server_host / server_port : relay bind address
        gradio_server_name / gradio_server_port / gradio_share : UI bind settings

    Examples
    --------
        >>> custom = PromptcraftConfig(relay_url="http://relay:8000/api/generate-image")
        >>> custom.retry_max_attempts
        3
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTCRAFT_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Upstream settings
    openai_api_key: str | None = Field(
        default=None,
        # populate_by_name keeps openai_api_key=... usable as a keyword
        validation_alias=AliasChoices("PROMPTCRAFT_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="Upstream API credential (environment only)",
    )
    upstream_url: str = Field(
        default="https://api.openai.com/v1/responses",
        description="Upstream Responses API endpoint",
    )
    upstream_model: str = Field(
        default="gpt-4.1-mini",
        description="Model used with the image_generation tool",
    )
    upstream_timeout_seconds: float = Field(
        default=60.0,
        description="Hard timeout for the upstream call",
        gt=0,
    )

    # Relay client settings
    relay_url: str = Field(
        default="http://127.0.0.1:8000/api/generate-image",
        description="Relay endpoint used by the UI",
    )
    relay_timeout_seconds: float = Field(
        default=75.0,
        description="Client-side timeout for one relay call",
        gt=0,
    )
    retry_max_attempts: int = Field(
        default=3,
        description="Attempts made by the retry wrapper",
        ge=1,
        le=10,
    )
    retry_initial_delay_ms: int = Field(
        default=1000,
        description="Initial backoff delay in milliseconds",
        ge=0,
    )
    connectivity_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout of the connectivity check",
        gt=0,
    )

    # Paths
    outputs_dir: Path = Field(
        default=Path("outputs"),
        description="Directory for generated images",
    )

    # Relay server settings
    server_host: str = Field(default="0.0.0.0", description="Relay bind address")
    server_port: int = Field(default=8000, description="Relay port", ge=1024, le=65535)

    # UI settings
    gradio_server_name: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the outputs directory."""
        super().__init__(**kwargs)
        self.outputs_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
config = PromptcraftConfig()
