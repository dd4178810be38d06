"""
YApi MCP — YApi Integration

HTTP client, payload models, and the cached catalog service.
"""

from .catalog import CatalogService, interface_ids
from .client import YapiClient, check_api_response
from .models import CategoryChild, CategoryItem, InterfaceDetail

__all__ = [
    "CatalogService",
    "YapiClient",
    "check_api_response",
    "interface_ids",
    "CategoryChild",
    "CategoryItem",
    "InterfaceDetail",
]
