"""
YApi MCP Tools

Tool bodies exposed by the MCP server. Every tool validates its input,
delegates to the CatalogService and returns a JSON-ready dict. Failures are
returned as structured error responses, never raised to the MCP client.
"""

import logging
from typing import Any

from .errors import YapiMCPError, error_response_from_exception
from .observability import get_observability
from .validation import (
    BatchInterfaceDetailsInput,
    CategoryInterfacesInput,
    InterfaceIdInput,
    NoInput,
    ProjectIdInput,
    SearchInterfacesInput,
    validate_input,
)
from .yapi import CatalogService
from .yapi.formatting import (
    format_cache_stats,
    format_category_list,
    format_interface_brief,
    format_interface_detail,
    format_interface_summary,
    format_search_hit,
)

logger = logging.getLogger(__name__)


class CatalogTools:
    """
    MCP tools over a YApi project catalog.

    Catalog tools: get_interface_list, get_interface_detail,
    batch_get_interface_details, preload_interface_data, search_interfaces,
    get_interfaces_by_category.
    Cache tools: get_cache_stats, clear_project_cache, clear_interface_cache,
    clear_all_cache. Diagnostics: get_metrics.
    """

    def __init__(self, catalog: CatalogService) -> None:
        self.catalog = catalog
        self.obs = get_observability()

    def _start(self, tool: str) -> None:
        # Each call gets its own trace id, carried by every log line it emits
        self.obs.increment(f"tools.{tool}")
        self.obs.generate_trace_id()

    def _failure(self, tool: str, error: Exception) -> dict[str, Any]:
        if isinstance(error, YapiMCPError):
            logger.warning(f"{tool} failed: {error.message}", extra={"tool": tool, "details": error.details})
        else:
            logger.error(f"Error in {tool}: {error}", extra={"tool": tool}, exc_info=True)
        self.obs.increment("tools.errors", tags={"tool": tool})
        return error_response_from_exception(error)

    @validate_input(ProjectIdInput)
    async def get_interface_list(self, project_id: int) -> dict[str, Any]:
        """Categories and interfaces of a project."""
        self._start("get_interface_list")
        try:
            with self.obs.trace("tools.get_interface_list", tags={"project_id": str(project_id)}):
                categories = await self.catalog.get_interface_list(project_id)
        except Exception as e:
            return self._failure("get_interface_list", e)

        return {"success": True, "project_id": project_id, "categories": format_category_list(categories)}

    @validate_input(InterfaceIdInput)
    async def get_interface_detail(self, interface_id: int) -> dict[str, Any]:
        """Full definition of one interface."""
        self._start("get_interface_detail")
        try:
            with self.obs.trace("tools.get_interface_detail", tags={"interface_id": str(interface_id)}):
                detail = await self.catalog.get_interface_detail(interface_id)
        except Exception as e:
            return self._failure("get_interface_detail", e)

        return {"success": True, "interface": format_interface_detail(detail)}

    @validate_input(BatchInterfaceDetailsInput)
    async def batch_get_interface_details(self, interface_ids: list[int]) -> dict[str, Any]:
        """
        Details of many interfaces.

        Partial failure is not an error: inspect ``failures`` in the result.
        """
        self._start("batch_get_interface_details")
        try:
            result = await self.catalog.batch_get_interface_details(interface_ids)
        except Exception as e:
            return self._failure("batch_get_interface_details", e)

        return {
            "success": True,
            "total": result.total,
            "succeeded": len(result.successes),
            "failed": len(result.failures),
            "rounds": result.rounds,
            "interfaces": [format_interface_brief(detail) for detail in result.successes],
            "failures": [failure.to_dict() for failure in result.failures],
            "summary": result.summary(),
        }

    @validate_input(ProjectIdInput)
    async def preload_interface_data(self, project_id: int) -> dict[str, Any]:
        """Warm the cache with every interface of a project."""
        self._start("preload_interface_data")
        try:
            summary = await self.catalog.preload_project(project_id)
        except Exception as e:
            return self._failure("preload_interface_data", e)

        return {
            "success": True,
            "message": f"Preloaded interface data for project {project_id}",
            **summary.to_dict(),
        }

    @validate_input(SearchInterfacesInput)
    async def search_interfaces(self, project_id: int, query: str, method: str | None = None) -> dict[str, Any]:
        """Search interfaces by title, path or method."""
        self._start("search_interfaces")
        try:
            hits = await self.catalog.search_interfaces(project_id, query, method)
        except Exception as e:
            return self._failure("search_interfaces", e)

        return {
            "success": True,
            "total": len(hits),
            "results": [format_search_hit(category, item) for category, item in hits],
        }

    @validate_input(CategoryInterfacesInput)
    async def get_interfaces_by_category(self, project_id: int, category_name: str) -> dict[str, Any]:
        """Interfaces of the first category matching ``category_name``."""
        self._start("get_interfaces_by_category")
        try:
            category = await self.catalog.get_interfaces_by_category(project_id, category_name)
        except Exception as e:
            return self._failure("get_interfaces_by_category", e)

        return {
            "success": True,
            "category_id": category.id,
            "category_name": category.name,
            "total": len(category.interfaces),
            "interfaces": [format_interface_summary(item) for item in category.interfaces],
        }

    @validate_input(NoInput)
    async def get_cache_stats(self) -> dict[str, Any]:
        """Cache size, configuration and hit statistics."""
        self._start("get_cache_stats")
        stats = self.catalog.cache_stats()
        self.obs.gauge("cache.size", stats.size)
        return {"success": True, **format_cache_stats(stats)}

    @validate_input(ProjectIdInput)
    async def clear_project_cache(self, project_id: int) -> dict[str, Any]:
        self._start("clear_project_cache")
        removed = self.catalog.clear_project_cache(project_id)
        return {
            "success": True,
            "removed": removed,
            "message": f"Cleared cache for project {project_id}",
        }

    @validate_input(InterfaceIdInput)
    async def clear_interface_cache(self, interface_id: int) -> dict[str, Any]:
        self._start("clear_interface_cache")
        removed = self.catalog.clear_interface_cache(interface_id)
        return {
            "success": True,
            "removed": removed,
            "message": f"Cleared cache for interface {interface_id}",
        }

    @validate_input(NoInput)
    async def clear_all_cache(self) -> dict[str, Any]:
        self._start("clear_all_cache")
        self.catalog.clear_all_cache()
        return {"success": True, "message": "Cleared all cache data"}

    @validate_input(NoInput)
    async def get_metrics(self) -> dict[str, Any]:
        """Observability metrics snapshot."""
        self._start("get_metrics")
        return {"success": True, **self.obs.get_metrics()}
