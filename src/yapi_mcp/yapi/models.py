"""
YApi Catalog Models

Pydantic models for the payloads returned by the YApi HTTP API.
Unknown fields are kept so nothing the server sends is lost.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _YapiModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CategoryChild(_YapiModel):
    """Interface summary as listed inside a category."""

    id: int = Field(..., alias="_id", description="Interface ID")
    title: str = Field("", description="Interface title")
    method: str = Field("", description="HTTP method")
    path: str = Field("", description="Request path")
    status: str = Field("", description="Completion status (done/undone)")
    tag: list[str] = Field(default_factory=list, description="Tags")
    catid: int | None = Field(None, description="Category ID")
    project_id: int | None = Field(None, description="Project ID")
    uid: int | None = Field(None, description="Creator user ID")
    add_time: int | None = Field(None, description="Creation time (epoch seconds)")
    up_time: int | None = Field(None, description="Last update time (epoch seconds)")


class CategoryItem(_YapiModel):
    """A category (directory) of interfaces in a project."""

    id: int = Field(..., alias="_id", description="Category ID")
    name: str = Field("", description="Category name")
    desc: str | None = Field(None, description="Category description")
    project_id: int | None = Field(None, description="Project ID")
    parent_id: int | None = Field(None, description="Parent category ID")
    add_time: int | None = Field(None, description="Creation time (epoch seconds)")
    up_time: int | None = Field(None, description="Last update time (epoch seconds)")
    interfaces: list[CategoryChild] = Field(default_factory=list, alias="list", description="Interfaces")


class ReqHeader(_YapiModel):
    """A declared request header."""

    name: str = ""
    value: str | None = None
    required: str | None = None
    example: str | None = None


class InterfaceDetail(_YapiModel):
    """Full definition of a single interface."""

    id: int = Field(..., alias="_id", description="Interface ID")
    title: str = Field("", description="Interface title")
    method: str = Field("", description="HTTP method")
    path: str = Field("", description="Request path")
    status: str = Field("", description="Completion status")
    desc: str | None = Field(None, description="Description (HTML)")
    markdown: str | None = Field(None, description="Description (markdown)")
    project_id: int | None = Field(None, description="Project ID")
    catid: int | None = Field(None, description="Category ID")
    tag: list[str] = Field(default_factory=list, description="Tags")
    username: str | None = Field(None, description="Last editor")
    add_time: int | None = Field(None, description="Creation time (epoch seconds)")
    up_time: int | None = Field(None, description="Last update time (epoch seconds)")

    req_headers: list[ReqHeader] = Field(default_factory=list)
    req_query: list[dict[str, Any]] = Field(default_factory=list)
    req_params: list[dict[str, Any]] = Field(default_factory=list)
    req_body_type: str | None = None
    req_body_form: list[dict[str, Any]] = Field(default_factory=list)
    req_body_other: str | None = None
    req_body_is_json_schema: bool = False

    res_body_type: str | None = None
    res_body: str | None = None
    res_body_is_json_schema: bool = False
