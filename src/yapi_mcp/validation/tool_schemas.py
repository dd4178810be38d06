"""
YApi MCP - Tool Input Validation Schemas

Pydantic models for validating all MCP tool inputs.
"""

from pydantic import BaseModel, Field, field_validator

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


class ProjectIdInput(BaseModel):
    """Input validation for project-scoped tools (list, preload, clear project cache)."""

    project_id: int = Field(..., ge=1, description="YApi project ID")


class InterfaceIdInput(BaseModel):
    """Input validation for interface-scoped tools (detail, clear interface cache)."""

    interface_id: int = Field(..., ge=1, description="YApi interface ID")


class BatchInterfaceDetailsInput(BaseModel):
    """Input validation for batch_get_interface_details tool."""

    interface_ids: list[int] = Field(
        ...,
        min_length=1,
        max_length=500,
        description="YApi interface IDs (1-500)",
    )

    @field_validator("interface_ids")
    @classmethod
    def validate_positive_ids(cls, v: list[int]) -> list[int]:
        """Ensure every ID is positive."""
        if any(i < 1 for i in v):
            raise ValueError("Interface IDs must be positive integers")
        return v


class SearchInterfacesInput(BaseModel):
    """Input validation for search_interfaces tool."""

    project_id: int = Field(..., ge=1, description="YApi project ID")
    query: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Search text matched against title, path and method",
    )
    method: str | None = Field(default=None, description="Filter by HTTP method (GET, POST, ...)")

    @field_validator("query")
    @classmethod
    def validate_query_not_empty(cls, v: str) -> str:
        """Ensure query is not just whitespace."""
        if not v.strip():
            raise ValueError("Query cannot be empty or only whitespace")
        return v.strip()

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str | None) -> str | None:
        """Normalize and check the HTTP method filter."""
        if v is None or not v.strip():
            return None
        method = v.strip().upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {v}. Must be one of {', '.join(HTTP_METHODS)}")
        return method


class CategoryInterfacesInput(BaseModel):
    """Input validation for get_interfaces_by_category tool."""

    project_id: int = Field(..., ge=1, description="YApi project ID")
    category_name: str = Field(..., min_length=1, max_length=200, description="Category (directory) name")

    @field_validator("category_name")
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        """Ensure category name is not just whitespace."""
        if not v.strip():
            raise ValueError("Category name cannot be empty or only whitespace")
        return v.strip()


class NoInput(BaseModel):
    """Input validation for tools without parameters (stats, clear all, metrics)."""

    pass
