"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from toolchat_ai.agent_core.service import AgentRuntimeConfig

# =====================================================================
# LLM Provider Configuration Models
# =====================================================================


class ProviderConfig(BaseModel):
    """API credentials for one LLM provider."""

    api_key: Optional[str] = Field(default=None, description="Provider API key for authentication")


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(default=True, description="Allow credentials in CORS requests")
    allow_methods: list[str] = Field(default=["*"], description="Allowed HTTP methods (use * for all)")
    allow_headers: list[str] = Field(default=["*"], description="Allowed HTTP headers (use * for all)")


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="ToolChat-AI server host address to bind to",
        alias="TOOLCHAT_AI_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="ToolChat-AI server port number",
        alias="TOOLCHAT_AI_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="TOOLCHAT_AI_LOG_LEVEL",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./toolchat_ai.db",
        description="Async SQLAlchemy URL for threads, tool servers and checkpoints",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Agent Runtime Configuration
    # =====================================================================
    default_model: str = Field(
        default="openai:gpt-4o",
        description="pydantic-ai model identifier used when a request does not pick one",
        alias="TOOLCHAT_AI_DEFAULT_MODEL",
    )
    tool_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single tool execution",
        alias="TOOLCHAT_AI_TOOL_TIMEOUT_SECONDS",
    )
    tool_discovery_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for listing the tools of one tool server",
        alias="TOOLCHAT_AI_TOOL_DISCOVERY_TIMEOUT_SECONDS",
    )
    max_steps: int = Field(
        default=50,
        ge=1,
        description="Maximum number of graph steps in one stream invocation",
        alias="TOOLCHAT_AI_MAX_STEPS",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        description="Overrides the built-in system prompt",
        alias="TOOLCHAT_AI_SYSTEM_PROMPT",
    )

    # =====================================================================
    # LLM Provider Keys
    # =====================================================================
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")

    # =====================================================================
    # CORS
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def openai(self) -> ProviderConfig:
        return ProviderConfig(api_key=self.openai_api_key)

    @property
    def anthropic(self) -> ProviderConfig:
        return ProviderConfig(api_key=self.anthropic_api_key)

    @property
    def google(self) -> ProviderConfig:
        return ProviderConfig(api_key=self.google_api_key)

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig(origins=self.cors_origins, allow_credentials=self.cors_allow_credentials)

    @property
    def api_keys(self) -> Dict[str, str]:
        """Configured provider keys, keyed by pydantic-ai provider prefix."""
        keys = {"openai": self.openai.api_key, "anthropic": self.anthropic.api_key, "google": self.google.api_key}
        return {provider: key for provider, key in keys.items() if key}

    def runtime_config(self) -> AgentRuntimeConfig:
        """The explicit agent runtime configuration handed to the chat service."""
        return AgentRuntimeConfig(
            default_model=self.default_model,
            system_prompt=self.system_prompt,
            tool_timeout_seconds=self.tool_timeout_seconds,
            tool_discovery_timeout_seconds=self.tool_discovery_timeout_seconds,
            max_steps=self.max_steps,
        )


settings = Settings()
