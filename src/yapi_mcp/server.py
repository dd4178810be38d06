"""
YApi MCP — Server

FastMCP server using stdio transport (Model Context Protocol).
This is the only server entrypoint.

- MCP stdio protocol (not HTTP); logs go to stderr
- One CatalogService per server lifespan, closed on shutdown
- Configuration via typed Pydantic models (env, .env, command line)
"""

import argparse
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from .config import load_config, parse_request_params
from .errors import ConfigurationError
from .observability import get_observability, initialize_observability
from .tools import CatalogTools
from .yapi import CatalogService

logger = logging.getLogger(__name__)

# Global state, owned by the server lifespan
_initialized = False
_catalog: CatalogService | None = None
_tools: CatalogTools | None = None
_cli_overrides: dict[str, Any] = {}


@asynccontextmanager
async def server_lifespan(server: Any) -> AsyncIterator[None]:
    """Server lifespan manager (startup/shutdown)."""
    await initialize_server()
    try:
        yield
    finally:
        await cleanup_server()


mcp = FastMCP("YApi-MCP-Server", lifespan=server_lifespan)


def _get_tools() -> CatalogTools:
    if _tools is None:
        raise RuntimeError("Server is not initialized")
    return _tools


async def initialize_server() -> None:
    """Load configuration and build the catalog service."""
    global _initialized, _catalog, _tools

    if _initialized:
        return

    config = load_config(overrides=_cli_overrides or None)

    obs = initialize_observability(log_level=config.log_level)
    logger.info("Initializing YApi MCP server...")

    _catalog = CatalogService.from_config(config)
    _tools = CatalogTools(_catalog)

    obs.increment("server.startup")
    obs.event(
        "server_started",
        {
            "environment": config.environment,
            "base_url": config.yapi.base_url,
            "cookie_length": len(config.yapi.cookie),
            "cache": {
                "enabled": config.cache.enabled,
                "ttl_minutes": config.cache.ttl_seconds / 60,
                "max_size": config.cache.max_size,
            },
            "request_params": config.yapi.request_params,
        },
    )

    _initialized = True
    logger.info("YApi MCP server initialized successfully")


async def cleanup_server() -> None:
    """Release the HTTP client and drop server state."""
    global _initialized, _catalog, _tools

    if not _initialized:
        return

    logger.info("Cleaning up YApi MCP server...")

    try:
        if _catalog is not None:
            await _catalog.close()
    except Exception as e:
        logger.error(f"Error during cleanup: {e}", exc_info=True)
    finally:
        _catalog = None
        _tools = None
        _initialized = False

    get_observability().event("server_stopped", {})


# ============================================================================
# Catalog Tools
# ============================================================================


@mcp.tool()
async def get_interface_list(project_id: int) -> dict[str, Any]:
    """
    Get interface list for a given project ID from YApi.

    Args:
        project_id: YApi project ID

    Returns:
        Categories with their interfaces (id, title, method, path, status, tags)
    """
    return await _get_tools().get_interface_list(project_id=project_id)


@mcp.tool()
async def get_interface_detail(interface_id: int) -> dict[str, Any]:
    """
    Get detailed information for a specific interface by ID from YApi.

    Args:
        interface_id: YApi interface ID

    Returns:
        Interface definition including request and response bodies
    """
    return await _get_tools().get_interface_detail(interface_id=interface_id)


@mcp.tool()
async def batch_get_interface_details(interface_ids: list[int]) -> dict[str, Any]:
    """
    Batch get detailed information for multiple interfaces by IDs from YApi.

    Args:
        interface_ids: YApi interface IDs

    Returns:
        Fetched interfaces plus the IDs that failed and why
    """
    return await _get_tools().batch_get_interface_details(interface_ids=interface_ids)


@mcp.tool()
async def preload_interface_data(project_id: int) -> dict[str, Any]:
    """
    Preload all interface data for a given project ID to cache.

    Args:
        project_id: YApi project ID

    Returns:
        Preload summary with per-interface failures
    """
    return await _get_tools().preload_interface_data(project_id=project_id)


@mcp.tool()
async def search_interfaces(project_id: int, query: str, method: str | None = None) -> dict[str, Any]:
    """
    Search interfaces by title, path, or method within a project.

    Args:
        project_id: YApi project ID
        query: Search query (title, path, or method)
        method: Filter by HTTP method (GET, POST, etc.)

    Returns:
        Matching interfaces with their category
    """
    return await _get_tools().search_interfaces(project_id=project_id, query=query, method=method)


@mcp.tool()
async def get_interfaces_by_category(project_id: int, category_name: str) -> dict[str, Any]:
    """
    Get all interfaces of the category whose name matches category_name.

    Args:
        project_id: YApi project ID
        category_name: Category (directory) name, matched case-insensitively

    Returns:
        The matched category and its interfaces
    """
    return await _get_tools().get_interfaces_by_category(project_id=project_id, category_name=category_name)


# ============================================================================
# Cache Tools
# ============================================================================


@mcp.tool()
async def get_cache_stats() -> dict[str, Any]:
    """
    Get cache statistics including size, hit rate, and configuration.

    Returns:
        Cache size, usage, TTL, cached keys and hit statistics
    """
    return await _get_tools().get_cache_stats()


@mcp.tool()
async def clear_project_cache(project_id: int) -> dict[str, Any]:
    """
    Clear cache for a specific project.

    Args:
        project_id: YApi project ID
    """
    return await _get_tools().clear_project_cache(project_id=project_id)


@mcp.tool()
async def clear_interface_cache(interface_id: int) -> dict[str, Any]:
    """
    Clear cache for a specific interface.

    Args:
        interface_id: YApi interface ID
    """
    return await _get_tools().clear_interface_cache(interface_id=interface_id)


@mcp.tool()
async def clear_all_cache() -> dict[str, Any]:
    """Clear all cached data."""
    return await _get_tools().clear_all_cache()


@mcp.tool()
async def get_metrics() -> dict[str, Any]:
    """
    Get observability metrics.

    Returns:
        Current metrics snapshot (counters, gauges, latency summaries)
    """
    return await _get_tools().get_metrics()


# ============================================================================
# Command line
# ============================================================================


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yapi-mcp",
        description="YApi MCP server (stdio). Values default to YAPI_* / CACHE_* environment variables.",
        epilog=(
            "examples:\n"
            "  yapi-mcp --base-url https://yapi.example.com --cookie 'session=abc123'\n"
            "  yapi-mcp -u https://yapi.example.com -c 'session=abc123' --cache-ttl 10 --cache-size 200\n"
            "  yapi-mcp -u https://yapi.example.com -c 'session=abc123' --no-cache\n"
            "  yapi-mcp -u https://yapi.example.com -c 'session=abc123' --token t1 --env dev"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("-u", "--base-url", "--baseURL", dest="base_url", help="YApi base URL")
    parser.add_argument("-c", "--cookie", help="Authentication cookie")
    parser.add_argument("-t", "--cache-ttl", type=int, metavar="MINUTES", help="Cache TTL in minutes (default 5)")
    parser.add_argument("-s", "--cache-size", type=int, metavar="N", help="Max cache entries (default 100)")
    cache_toggle = parser.add_mutually_exclusive_group()
    cache_toggle.add_argument("--no-cache", dest="cache_enabled", action="store_false", default=None)
    cache_toggle.add_argument("--enable-cache", dest="cache_enabled", action="store_true", default=None)
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra query parameter sent with every request (repeatable)",
    )
    return parser


def _passthrough_params(parser: argparse.ArgumentParser, extras: Sequence[str]) -> dict[str, str]:
    """
    Collect unrecognized ``--key value`` pairs as request parameters.

    ``--key=value`` is accepted too. Anything else is a usage error.
    """
    params: dict[str, str] = {}
    i = 0
    while i < len(extras):
        arg = extras[i]
        if arg.startswith("--") and "=" in arg:
            key, _, value = arg[2:].partition("=")
            i += 1
        elif arg.startswith("--") and i + 1 < len(extras) and not extras[i + 1].startswith("--"):
            key, value = arg[2:], extras[i + 1]
            i += 2
        else:
            parser.error(f"unrecognized arguments: {' '.join(extras[i:])}")
        if not key:
            parser.error(f"invalid request parameter: {arg}")
        params[key] = value
    return params


def parse_cli_overrides(argv: Sequence[str] | None = None) -> dict[str, Any]:
    """
    Translate command-line flags into configuration overrides.

    Non-positive TTL and size values are ignored, keeping the configured ones.
    Any other `--key value` pair is sent to YApi as a query parameter, like
    `--param key=value`.
    """
    parser = build_arg_parser()
    args, extras = parser.parse_known_args(argv)
    request_params = _passthrough_params(parser, extras)
    yapi: dict[str, Any] = {}
    cache: dict[str, Any] = {}

    if args.base_url:
        yapi["base_url"] = args.base_url
    if args.cookie:
        yapi["cookie"] = args.cookie
    if args.param:
        request_params.update(parse_request_params(",".join(args.param)))
    if request_params:
        yapi["request_params"] = request_params

    if args.cache_ttl is not None and args.cache_ttl > 0:
        cache["ttl_seconds"] = args.cache_ttl * 60
    if args.cache_size is not None and args.cache_size > 0:
        cache["max_size"] = args.cache_size
    if args.cache_enabled is not None:
        cache["enabled"] = args.cache_enabled

    overrides: dict[str, Any] = {}
    if yapi:
        overrides["yapi"] = yapi
    if cache:
        overrides["cache"] = cache
    return overrides


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for the yapi-mcp command."""
    global _cli_overrides

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    _cli_overrides = parse_cli_overrides(argv)

    # Fail before starting the transport when required settings are missing
    try:
        load_config(overrides=_cli_overrides or None)
    except ConfigurationError as e:
        logger.error(f"{e.message}", extra={"details": e.details})
        build_arg_parser().print_usage()
        raise SystemExit(1) from e

    mcp.run()


if __name__ == "__main__":
    main()
