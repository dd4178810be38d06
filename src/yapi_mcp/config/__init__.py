"""
YApi MCP — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import load_config, parse_request_params, reset_config
from .schemas import (
    AppConfig,
    BatchConfig,
    CacheConfig,
    Environment,
    LogLevel,
    YapiConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "reset_config",
    "parse_request_params",
    # Main config
    "AppConfig",
    # Enums
    "Environment",
    "LogLevel",
    # Config sections
    "CacheConfig",
    "YapiConfig",
    "BatchConfig",
]
