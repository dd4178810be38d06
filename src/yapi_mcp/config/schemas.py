"""
YApi MCP — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration must be defined here and validated at startup.

- MCP stdio protocol (no HTTP server config needed)
- Config via environment variables, .env file, or command-line flags
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CacheConfig(BaseModel):
    """Cache configuration. Immutable once the store is built."""

    ttl_seconds: float = Field(default=300.0, gt=0, description="Entry time-to-live in seconds")
    max_size: int = Field(default=100, ge=0, description="Max cache entries (0 = store nothing)")
    enabled: bool = Field(default=True, description="Enable caching (False = pass-through)")

    model_config = ConfigDict(frozen=True)


class YapiConfig(BaseModel):
    """Connection settings for the YApi server."""

    base_url: str = Field(..., description="YApi base URL, e.g. https://yapi.example.com")
    cookie: str = Field(..., min_length=1, description="Authentication cookie string")
    request_params: dict[str, str] = Field(
        default_factory=dict,
        description="Extra query parameters sent with every request",
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("cookie")
    @classmethod
    def validate_cookie_not_blank(cls, v: str) -> str:
        """Ensure cookie is not just whitespace."""
        if not v.strip():
            raise ValueError("cookie cannot be empty or only whitespace")
        return v


class BatchConfig(BaseModel):
    """Batch fetch configuration."""

    chunk_size: int = Field(default=5, ge=1, description="Concurrent fetches per round")


class AppConfig(BaseModel):
    """Root configuration for YApi MCP."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    yapi: YapiConfig
    cache: CacheConfig = Field(default_factory=CacheConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)

    model_config = ConfigDict(use_enum_values=True)
