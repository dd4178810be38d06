"""
YApi Catalog Service

Cached access to a YApi project's interface catalog. One service instance
owns the HTTP client, the cache store and the batch orchestrator; it is
built once by the server lifespan and handed to the tools.
"""

import logging

from ..batch import BatchOrchestrator, BatchResult, PreloadSummary
from ..cache import CachedFetcher, CacheStats, CacheStore, generate_key
from ..config import AppConfig
from ..errors import NotFoundError
from .client import YapiClient
from .models import CategoryChild, CategoryItem, InterfaceDetail

logger = logging.getLogger(__name__)

LIST_OPERATION = "getInterfaceList"
DETAIL_OPERATION = "getGroupInfo"


def interface_ids(categories: list[CategoryItem]) -> list[int]:
    """Flatten every interface ID of a project, in catalog order."""
    return [child.id for category in categories for child in category.interfaces]


def _matches(item: CategoryChild, query: str, method: str | None) -> bool:
    needle = query.lower()
    matches_query = needle in item.title.lower() or needle in item.path.lower() or needle in item.method.lower()
    matches_method = not method or item.method.lower() == method.lower()
    return matches_query and matches_method


class CatalogService:
    """
    Interface catalog backed by a short-lived cache.

    Provides:
    - Cached interface lists and details
    - Batch detail fetches and project preload
    - Search and category lookup over the cached list
    - Targeted cache invalidation
    """

    def __init__(
        self,
        client: YapiClient,
        store: CacheStore[object],
        chunk_size: int = 5,
        coalesce: bool = True,
    ) -> None:
        self.client = client
        self.store = store
        self.fetcher = CachedFetcher(store, coalesce=coalesce)

        self._get_interface_list = self.fetcher.with_cache(LIST_OPERATION, client.get_interface_list)
        self._get_interface_detail = self.fetcher.with_cache(DETAIL_OPERATION, client.get_interface_detail)

        self.orchestrator: BatchOrchestrator[int, InterfaceDetail, int] = BatchOrchestrator(
            fetch=self.get_interface_detail,
            discover=self._discover_interface_ids,
            chunk_size=chunk_size,
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> "CatalogService":
        """Build a service with its own client and cache from configuration."""
        return cls(
            client=YapiClient(config.yapi),
            store=CacheStore(config.cache),
            chunk_size=config.batch.chunk_size,
        )

    async def get_interface_list(self, project_id: int) -> list[CategoryItem]:
        """Categories and interface summaries of a project (cached)."""
        return await self._get_interface_list(project_id)

    async def get_interface_detail(self, interface_id: int) -> InterfaceDetail:
        """Full definition of one interface (cached)."""
        return await self._get_interface_detail(interface_id)

    async def batch_get_interface_details(
        self,
        ids: list[int],
        chunk_size: int | None = None,
    ) -> BatchResult[int, InterfaceDetail]:
        """Fetch many interface details; failures are collected, not raised."""
        return await self.orchestrator.run_batch(ids, chunk_size=chunk_size)

    async def _discover_interface_ids(self, project_id: int) -> list[int]:
        return interface_ids(await self.get_interface_list(project_id))

    async def preload_project(self, project_id: int) -> PreloadSummary[int, int]:
        """
        Warm the cache with the list and every interface detail of a project.

        Raises:
            PreloadError: The interface list could not be fetched
        """
        return await self.orchestrator.preload(project_id)

    async def search_interfaces(
        self,
        project_id: int,
        query: str,
        method: str | None = None,
    ) -> list[tuple[CategoryItem, CategoryChild]]:
        """
        Case-insensitive search over title, path and method.

        ``method`` additionally restricts hits to one HTTP method.
        """
        categories = await self.get_interface_list(project_id)
        return [
            (category, item)
            for category in categories
            for item in category.interfaces
            if _matches(item, query, method)
        ]

    async def get_interfaces_by_category(self, project_id: int, category_name: str) -> CategoryItem:
        """
        First category whose name contains ``category_name`` or is contained by it.

        Raises:
            NotFoundError: No category name matches
        """
        needle = category_name.lower()
        for category in await self.get_interface_list(project_id):
            name = category.name.lower()
            if needle in name or (name and name in needle):
                logger.info(
                    f"Matched category {category.name} with {len(category.interfaces)} interface(s)",
                    extra={"project_id": project_id, "category_id": category.id},
                )
                return category
        raise NotFoundError("Category", category_name)

    def clear_project_cache(self, project_id: int) -> bool:
        """Drop the cached interface list of a project."""
        removed = self.store.delete(generate_key(LIST_OPERATION, project_id))
        logger.info(f"Cleared interface list cache for project {project_id}", extra={"removed": removed})
        return removed

    def clear_interface_cache(self, interface_id: int) -> bool:
        """Drop the cached detail of one interface."""
        removed = self.store.delete(generate_key(DETAIL_OPERATION, interface_id))
        logger.info(f"Cleared detail cache for interface {interface_id}", extra={"removed": removed})
        return removed

    def clear_all_cache(self) -> None:
        self.store.clear()

    def cache_stats(self) -> CacheStats:
        return self.store.stats()

    async def close(self) -> None:
        await self.client.close()
