"""
YApi MCP — Observability Module

Single observability adapter for the entire runtime.
All metrics, traces, and structured logs go through this module.

Usage:
    from yapi_mcp.observability import get_observability

    obs = get_observability()
    obs.increment("cache.hits")
    obs.gauge("cache.size", 100)

    with obs.trace("operation"):
        # traced code here
        pass
"""

from .monitoring import (
    JSONFormatter,
    ObservabilityAdapter,
    get_observability,
    initialize_observability,
    reset_observability,
)

__all__ = [
    "ObservabilityAdapter",
    "JSONFormatter",
    "get_observability",
    "initialize_observability",
    "reset_observability",
]
