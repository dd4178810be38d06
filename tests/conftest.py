"""
YApi MCP — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import json
import logging
import os
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


class FakeClock:
    """Manually advanced clock (seconds) for deterministic TTL tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_globals() -> Generator[None, None, None]:
    """Reset config and observability singletons after each test to prevent state leakage."""
    yield
    from yapi_mcp.config import reset_config
    from yapi_mcp.observability import reset_observability

    reset_config()
    reset_observability()

    package_logger = logging.getLogger("yapi_mcp")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


def envelope(data: Any, errcode: int = 0, errmsg: str = "成功！") -> dict[str, Any]:
    """Wrap data in a YApi response envelope."""
    return {"errcode": errcode, "errmsg": errmsg, "data": data}


def make_child(interface_id: int, title: str, method: str = "GET", path: str | None = None, catid: int = 1) -> dict[str, Any]:
    return {
        "_id": interface_id,
        "title": title,
        "method": method,
        "path": path or f"/api/{title.lower().replace(' ', '/')}",
        "status": "done",
        "tag": [],
        "catid": catid,
        "project_id": 11,
        "uid": 7,
        "edit_uid": 0,
        "index": 0,
        "add_time": 1700000000,
        "up_time": 1700003600,
    }


@pytest.fixture
def sample_categories() -> list[dict[str, Any]]:
    """Interface list payload of project 11: two categories, five interfaces."""
    return [
        {
            "_id": 1,
            "name": "User Management",
            "desc": "Accounts and sessions",
            "project_id": 11,
            "parent_id": 0,
            "index": 0,
            "uid": 7,
            "add_time": 1700000000,
            "up_time": 1700000000,
            "__v": 0,
            "list": [
                make_child(101, "Get User", "GET", "/api/user/get"),
                make_child(102, "Create User", "POST", "/api/user/create"),
                make_child(103, "Delete User", "DELETE", "/api/user/delete"),
            ],
        },
        {
            "_id": 2,
            "name": "Orders",
            "desc": "",
            "project_id": 11,
            "parent_id": 0,
            "index": 1,
            "uid": 7,
            "add_time": 1700000000,
            "up_time": 1700000000,
            "__v": 0,
            "list": [
                make_child(201, "List Orders", "GET", "/api/order/list", catid=2),
                make_child(202, "Pay Order", "POST", "/api/order/pay", catid=2),
            ],
        },
    ]


def make_detail(interface_id: int) -> dict[str, Any]:
    return {
        "_id": interface_id,
        "title": f"Interface {interface_id}",
        "method": "POST",
        "path": f"/api/item/{interface_id}",
        "status": "done",
        "desc": "<p>desc</p>",
        "markdown": "desc",
        "project_id": 11,
        "catid": 1,
        "tag": ["v1"],
        "username": "alice",
        "add_time": 1700000000,
        "up_time": 1700003600,
        "req_headers": [{"required": "1", "_id": "h1", "name": "Content-Type", "value": "application/json"}],
        "req_query": [],
        "req_params": [],
        "req_body_type": "json",
        "req_body_form": [],
        "req_body_other": json.dumps({"type": "object", "properties": {"id": {"type": "integer"}}}),
        "req_body_is_json_schema": True,
        "res_body_type": "json",
        "res_body": "not json {",
        "res_body_is_json_schema": False,
        "query_path": {"path": f"/api/item/{interface_id}", "params": []},
        "__v": 0,
    }


@pytest.fixture
def detail_payload() -> Callable[[int], dict[str, Any]]:
    return make_detail


class FakeYapiServer:
    """
    In-process YApi server for httpx.MockTransport.

    Records every request; ``fail_ids`` maps interface IDs to origin errors,
    ``missing_projects`` makes the list endpoint fail.
    """

    def __init__(self, categories: list[dict[str, Any]]) -> None:
        self.categories = categories
        self.requests: list[httpx.Request] = []
        self.fail_ids: dict[int, tuple[int, str]] = {}
        self.http_error_ids: set[int] = set()
        self.missing_projects: set[int] = set()

    def count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/interface/list_menu":
            project_id = int(request.url.params["project_id"])
            if project_id in self.missing_projects:
                return httpx.Response(200, json=envelope(None, 40011, "不存在的项目"))
            return httpx.Response(200, json=envelope(self.categories))
        if request.url.path == "/api/interface/get":
            interface_id = int(request.url.params["id"])
            if interface_id in self.http_error_ids:
                return httpx.Response(500, text="Internal Server Error")
            if interface_id in self.fail_ids:
                code, msg = self.fail_ids[interface_id]
                return httpx.Response(200, json=envelope(None, code, msg))
            return httpx.Response(200, json=envelope(make_detail(interface_id)))
        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def yapi_server(sample_categories: list[dict[str, Any]]) -> FakeYapiServer:
    return FakeYapiServer(sample_categories)


@pytest.fixture
def make_yapi_config() -> Callable[..., Any]:
    from yapi_mcp.config import YapiConfig

    def _make(**kwargs: Any) -> YapiConfig:
        values: dict[str, Any] = {"base_url": "https://yapi.example.com", "cookie": "_yapi_token=abc; _yapi_uid=7"}
        values.update(kwargs)
        return YapiConfig(**values)

    return _make
