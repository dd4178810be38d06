"""
YApi MCP — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Command-line overrides are merged on top of the environment.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import AppConfig

logger = logging.getLogger(__name__)

_config_instance: AppConfig | None = None


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def parse_request_params(raw: str | None) -> dict[str, str]:
    """
    Parse ``key=value`` pairs separated by commas.

    Entries without ``=`` or with an empty key are ignored.
    """
    params: dict[str, str] = {}
    if not raw:
        return params
    for item in raw.split(","):
        key, sep, value = item.partition("=")
        key = key.strip()
        if sep and key:
            params[key] = value.strip()
    return params


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _build_config_dict() -> dict[str, Any]:
    try:
        return {
            "environment": os.getenv("ENVIRONMENT", "development"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "yapi": {
                "base_url": os.getenv("YAPI_BASE_URL", ""),
                "cookie": os.getenv("YAPI_COOKIE", ""),
                "request_params": parse_request_params(os.getenv("YAPI_REQUEST_PARAMS")),
                "timeout": float(os.getenv("YAPI_TIMEOUT", "30.0")),
            },
            "cache": {
                "ttl_seconds": float(os.getenv("CACHE_TTL_SECONDS", "300")),
                "max_size": int(os.getenv("CACHE_MAX_SIZE", "100")),
                "enabled": _env_bool("CACHE_ENABLED", "true"),
            },
            "batch": {
                "chunk_size": int(os.getenv("BATCH_CHUNK_SIZE", "5")),
            },
        }
    except ValueError as e:
        raise ConfigurationError(
            f"Malformed numeric environment variable: {e}",
            details={"error": str(e)},
        ) from e


def load_config(
    env_file: str | None = None,
    reload: bool = False,
    overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in working directory)
        reload: Force reload even if config already loaded
        overrides: Nested values that take precedence over the environment

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = _build_config_dict()
    if overrides:
        config_dict = _merge(config_dict, overrides)

    try:
        _config_instance = AppConfig(**config_dict)
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(include_url=False)},
        )
        raise ConfigurationError(
            "Configuration validation failed. Set YAPI_BASE_URL and YAPI_COOKIE "
            "(or pass --base-url/--cookie) and check cache settings.",
            details={"validation_errors": e.errors(include_url=False, include_context=False)},
        ) from e

    logger.info(
        f"Configuration loaded successfully (environment: {_config_instance.environment})",
        extra={
            "environment": _config_instance.environment,
            "base_url": _config_instance.yapi.base_url,
            "cache_enabled": _config_instance.cache.enabled,
            "cache_ttl_seconds": _config_instance.cache.ttl_seconds,
            "cache_max_size": _config_instance.cache.max_size,
        },
    )
    return _config_instance


def reset_config() -> None:
    """Drop the loaded configuration. Used by tests."""
    global _config_instance
    _config_instance = None
