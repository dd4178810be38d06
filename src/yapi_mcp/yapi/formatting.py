"""
Tool output shaping for catalog data.
"""

import json
from datetime import UTC, datetime
from typing import Any

from ..cache import CacheStats
from .models import CategoryChild, CategoryItem, InterfaceDetail


def try_parse_json(raw: Any) -> Any:
    """Parse a JSON string body; anything else is returned untouched."""
    if not raw or not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def iso_time(epoch_seconds: int | None) -> str | None:
    if epoch_seconds is None:
        return None
    return datetime.fromtimestamp(epoch_seconds, UTC).isoformat().replace("+00:00", "Z")


def format_interface_summary(item: CategoryChild) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "method": item.method,
        "path": item.path,
        "status": item.status,
        "tags": item.tag,
    }


def format_category_list(categories: list[CategoryItem]) -> list[dict[str, Any]]:
    return [
        {
            "category_id": category.id,
            "category_name": category.name,
            "description": category.desc,
            "interfaces": [format_interface_summary(item) for item in category.interfaces],
        }
        for category in categories
    ]


def format_interface_brief(detail: InterfaceDetail) -> dict[str, Any]:
    """Detail without request/response bodies, used for batch output."""
    return {
        "id": detail.id,
        "title": detail.title,
        "method": detail.method,
        "path": detail.path,
        "status": detail.status,
        "description": detail.desc,
        "project_id": detail.project_id,
        "category_id": detail.catid,
        "tags": detail.tag,
        "username": detail.username,
        "add_time": iso_time(detail.add_time),
        "update_time": iso_time(detail.up_time),
    }


def format_interface_detail(detail: InterfaceDetail) -> dict[str, Any]:
    """Full interface definition with JSON bodies decoded where possible."""
    data = format_interface_brief(detail)
    data.update(
        {
            "markdown": detail.markdown,
            "request": {
                "headers": [header.model_dump() for header in detail.req_headers],
                "query": detail.req_query,
                "params": detail.req_params,
                "body_type": detail.req_body_type,
                "body_form": detail.req_body_form,
                "body_other": try_parse_json(detail.req_body_other),
            },
            "response": {
                "body_type": detail.res_body_type,
                "body": try_parse_json(detail.res_body),
            },
        }
    )
    return data


def format_search_hit(category: CategoryItem, item: CategoryChild) -> dict[str, Any]:
    hit = format_interface_summary(item)
    hit["category_name"] = category.name
    hit["category_id"] = category.id
    return hit


def format_cache_stats(stats: CacheStats) -> dict[str, Any]:
    usage = (stats.size / stats.max_size * 100) if stats.max_size else 0.0
    return {
        "cache_enabled": stats.enabled,
        "current_size": stats.size,
        "max_size": stats.max_size,
        "ttl_minutes": round(stats.ttl_seconds / 60, 2),
        "cached_keys": stats.keys,
        "usage_percentage": f"{usage:.2f}%",
        "hits": stats.hits,
        "misses": stats.misses,
        "hit_rate": stats.hit_rate,
        "evictions": stats.evictions,
    }
