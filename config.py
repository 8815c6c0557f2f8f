# config.py
#
# Description: Centralized configuration for the WanderBot assistant. It uses
#              Pydantic to load settings from a .env file or environment
#              variables, ensuring all modules share a single, consistent
#              configuration.
#

# --------------------------------------------------------------------------- #
# imports
# --------------------------------------------------------------------------- #
from __future__ import annotations  # enable postponed evaluation of annotations
from typing import Optional          # optional credential
from pydantic import AliasChoices, Field  # to define configuration fields
from pydantic_settings import BaseSettings # for loading settings from env

# --------------------------------------------------------------------------- #
# settings
# --------------------------------------------------------------------------- #
class AppConfig(BaseSettings):
    """
    Load all application settings from environment variables or defaults.
    Only the provider credential changes how replies are produced: without
    it every reply is the offline guidance message.

    Returns:
        AppConfig: A populated and validated settings instance.
    """

    # --- Provider Credential ---
    openrouter_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("WANDERBOT_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
        description="OpenRouter API key. When unset WanderBot runs in offline mode.",
    )

    # --- Provider Endpoint ---
    openrouter_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="Chat-completions endpoint shared by both providers.",
    )
    primary_model: str = Field(
        default="anthropic/claude-3.5-sonnet",
        description="Model tried first for every reply.",
    )
    fallback_model: str = Field(
        default="openai/gpt-4-turbo",
        description="Model tried when the primary model fails.",
    )
    request_timeout: int = Field(
        default=30,
        description="Request timeout for a single provider call in seconds.",
    )
    app_referer: str = Field(
        default="https://beyond-borders.app",
        description="Value of the HTTP-Referer header sent to OpenRouter.",
    )
    app_title: str = Field(
        default="Beyond Borders Travel App",
        description="Value of the X-Title header sent to OpenRouter.",
    )

    # --- Generation Parameters ---
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature.",
    )
    max_tokens: int = Field(
        default=800,
        description="Maximum number of tokens in a reply.",
    )
    top_p: float = Field(
        default=1.0,
        description="Nucleus sampling parameter.",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Log level for the application loggers.",
    )

    # pydantic v2 style configuration
    model_config = {
        "env_prefix": "WANDERBOT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def has_credential(self) -> bool:
        """True when a non-blank provider key is configured."""
        return bool(self.openrouter_api_key and self.openrouter_api_key.strip())

# --------------------------------------------------------------------------- #
# global instance
# --------------------------------------------------------------------------- #
# Create a single, cached instance of the configuration that can be
# imported by any other module in the application.
settings = AppConfig()
