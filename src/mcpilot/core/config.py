"""Configuration for mcpilot using environment variables."""

import logging
from dataclasses import dataclass, field
import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

SOURCE_CONTROL = "source-control"
CONTAINER_RUNTIME = "container-runtime"


@dataclass(frozen=True)
class BackendConfig:
    """Where a capability backend lives and which endpoints it exposes."""

    capability: str
    """Backend identifier (e.g. 'source-control')."""

    base_url: str
    """Base address, without trailing slash."""

    status_path: str = "/status"
    """Liveness probe endpoint."""

    endpoints: dict[str, str] = field(default_factory=dict)
    """Dispatch endpoints keyed by operation name."""

    def url_for(self, path: str) -> str:
        """Join an endpoint path onto the base address."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment Variables:
        LLM_API_KEY: API key for the LLM provider (required for /ask)
        LLM_BASE_URL: Base URL for the LLM API (default: Gemini OpenAI-compatible endpoint)
        LLM_MODEL: Model name to use (default: gemini-2.5-flash)
        SOURCE_CONTROL_URL: Base address of the source-control backend
        CONTAINER_RUNTIME_URL: Base address of the container-runtime backend
        MCPILOT_LOG_LEVEL: Logging level (default: INFO)
        CORS_ORIGINS: Allowed origins, comma-separated or a JSON list
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM Configuration
    llm_api_key: str = Field(
        default="",
        validation_alias="LLM_API_KEY",
        description="API key for the LLM provider",
    )
    llm_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        validation_alias="LLM_BASE_URL",
        description="Base URL for the LLM API (Gemini, OpenAI, or compatible)",
    )
    llm_model: str = Field(
        default="gemini-2.5-flash",
        validation_alias="LLM_MODEL",
        description="Model name to use",
    )
    llm_temperature: float = Field(
        default=0.1,
        validation_alias="LLM_TEMPERATURE",
        description="Sampling temperature for intent requests (keep low)",
    )
    llm_timeout: float = Field(
        default=30.0,
        validation_alias="LLM_TIMEOUT",
        description="Seconds before a model call is abandoned",
    )

    # Capability backends
    source_control_url: str = Field(
        default="http://localhost:4001",
        validation_alias="SOURCE_CONTROL_URL",
        description="Base address of the source-control backend",
    )
    container_runtime_url: str = Field(
        default="http://localhost:4002",
        validation_alias="CONTAINER_RUNTIME_URL",
        description="Base address of the container-runtime backend",
    )
    probe_timeout: float = Field(
        default=2.0,
        validation_alias="PROBE_TIMEOUT",
        description="Seconds before a liveness probe counts as failed",
    )
    dispatch_timeout: float = Field(
        default=60.0,
        validation_alias="DISPATCH_TIMEOUT",
        description="Seconds before a backend dispatch is abandoned",
    )
    clone_directory: str = Field(
        default="./repos",
        validation_alias="CLONE_DIRECTORY",
        description="Default target directory for cloneRepo",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias="MCPILOT_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    # HTTP surface
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:5173"],
        validation_alias="CORS_ORIGINS",
        description="Origins allowed to call the API (comma-separated or JSON list)",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        """Accept "a,b", a single origin, or a JSON list."""
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return [origin.strip() for origin in text.split(",") if origin.strip()]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def backend_configs(self) -> tuple[BackendConfig, ...]:
        """Materialize the backend table handed to the registry and router."""
        return (
            BackendConfig(
                capability=SOURCE_CONTROL,
                base_url=self.source_control_url,
                endpoints={
                    "listRepos": "/listRepos",
                    "createRepo": "/createRepo",
                    "cloneRepo": "/cloneRepo",
                },
            ),
            BackendConfig(
                capability=CONTAINER_RUNTIME,
                base_url=self.container_runtime_url,
                endpoints={
                    "dockerExec": "/docker/exec",
                },
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_llm_client(require_key: bool = True):
    """Get configured async OpenAI client for LLM access.

    Args:
        require_key: Raise instead of building a client without an API key

    Returns:
        AsyncOpenAI client configured for the current provider

    Raises:
        ValueError: If LLM_API_KEY is not set and require_key is True
    """
    from openai import AsyncOpenAI

    settings = get_settings()
    if require_key and not settings.llm_api_key:
        raise ValueError(
            "LLM_API_KEY environment variable is required. "
            "Set it to your API key for Gemini, OpenAI, or compatible provider."
        )

    return AsyncOpenAI(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout,
    )
