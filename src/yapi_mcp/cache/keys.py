"""
YApi MCP — Cache Key Generation

Keys read as ``<operation>:<json args>``, e.g. ``getGroupInfo:[42]``, so the
key list returned by cache stats stays human readable.
"""

import json
from typing import Any


def generate_key(operation: str, *args: Any) -> str:
    """
    Build a deterministic cache key from an operation name and its arguments.

    Arguments keep their positional order. Mappings are serialized with
    sorted keys, so structurally equal arguments always give the same key.

    Args:
        operation: Operation identifier (e.g. "getInterfaceList")
        *args: Positional arguments of the call being cached

    Returns:
        Cache key string

    Raises:
        TypeError: If an argument is not JSON serializable
    """
    encoded = json.dumps(list(args), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return f"{operation}:{encoded}"
