"""
YApi MCP - Input Validation Module

Provides Pydantic-based validation for all MCP tool inputs.
"""

from .decorators import validate_input
from .tool_schemas import (
    BatchInterfaceDetailsInput,
    CategoryInterfacesInput,
    InterfaceIdInput,
    NoInput,
    ProjectIdInput,
    SearchInterfacesInput,
)

__all__ = [
    # Decorator
    "validate_input",
    # Tool input schemas
    "ProjectIdInput",
    "InterfaceIdInput",
    "BatchInterfaceDetailsInput",
    "SearchInterfacesInput",
    "CategoryInterfacesInput",
    "NoInput",
]
