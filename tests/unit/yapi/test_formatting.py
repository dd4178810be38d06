"""
YApi MCP — Output Formatting Tests
"""

from yapi_mcp.cache import CacheStats
from yapi_mcp.yapi.formatting import (
    format_cache_stats,
    format_category_list,
    format_interface_detail,
    format_search_hit,
    iso_time,
    try_parse_json,
)
from yapi_mcp.yapi.models import CategoryItem, InterfaceDetail


def test_try_parse_json() -> None:
    assert try_parse_json('{"a": 1}') == {"a": 1}
    assert try_parse_json("not json {") == "not json {"
    assert try_parse_json("") == ""
    assert try_parse_json(None) is None


def test_iso_time() -> None:
    assert iso_time(0) == "1970-01-01T00:00:00Z"
    assert iso_time(None) is None


def test_category_list(sample_categories) -> None:
    categories = [CategoryItem.model_validate(c) for c in sample_categories]

    formatted = format_category_list(categories)

    assert formatted[0]["category_id"] == 1
    assert formatted[0]["category_name"] == "User Management"
    assert formatted[0]["interfaces"][0] == {
        "id": 101,
        "title": "Get User",
        "method": "GET",
        "path": "/api/user/get",
        "status": "done",
        "tags": [],
    }
    assert len(formatted[1]["interfaces"]) == 2


def test_interface_detail_decodes_json_bodies(detail_payload) -> None:
    detail = InterfaceDetail.model_validate(detail_payload(42))

    formatted = format_interface_detail(detail)

    assert formatted["id"] == 42
    assert formatted["request"]["body_other"]["type"] == "object"
    # Bodies that are not JSON are returned as text
    assert formatted["response"]["body"] == "not json {"
    assert formatted["request"]["headers"][0]["name"] == "Content-Type"
    assert formatted["add_time"] == "2023-11-14T22:13:20Z"


def test_search_hit_carries_category(sample_categories) -> None:
    category = CategoryItem.model_validate(sample_categories[1])
    hit = format_search_hit(category, category.interfaces[1])
    assert hit["id"] == 202
    assert hit["category_name"] == "Orders"
    assert hit["category_id"] == 2


def test_cache_stats() -> None:
    stats = CacheStats(
        size=25,
        max_size=100,
        ttl_seconds=300,
        enabled=True,
        keys=["getGroupInfo:[1]"],
        hits=3,
        misses=1,
        evictions=0,
    )

    formatted = format_cache_stats(stats)

    assert formatted["usage_percentage"] == "25.00%"
    assert formatted["ttl_minutes"] == 5
    assert formatted["cached_keys"] == ["getGroupInfo:[1]"]
    assert formatted["hit_rate"] == 75.0


def test_cache_stats_zero_capacity() -> None:
    stats = CacheStats(size=0, max_size=0, ttl_seconds=60, enabled=True, keys=[], hits=0, misses=0, evictions=0)
    assert format_cache_stats(stats)["usage_percentage"] == "0.00%"
