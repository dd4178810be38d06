"""
YApi MCP - Validation Decorators

Provides decorators for applying Pydantic validation to MCP tools.

- validate_input decorator for automatic input validation
- Structured error responses with ErrorCode
- Validation failures counted through observability
"""

import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from ..errors import ErrorCode, make_error_response
from ..observability import get_observability

logger = logging.getLogger(__name__)


def _validation_failure(func_name: str, error: ValidationError, kwargs: dict[str, Any]) -> dict[str, Any]:
    validation_errors = []
    for err in error.errors():
        field_path = " -> ".join(str(loc) for loc in err["loc"])
        validation_errors.append(
            {
                "field": field_path,
                "message": err["msg"],
                "type": err["type"],
            }
        )

    logger.warning(
        f"Input validation failed for {func_name}",
        extra={
            "tool_function": func_name,
            "validation_errors": validation_errors,
            "input_kwargs": kwargs,
        },
    )

    get_observability().increment(
        "validation.failed",
        tags={"function": func_name, "error_count": str(len(validation_errors))},
    )

    return make_error_response(
        error_code=ErrorCode.INVALID_INPUT,
        message="Input validation failed",
        context={
            "validation_errors": validation_errors,
            "function": func_name,
        },
    )


def validate_input(schema: type[BaseModel]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to validate tool inputs using Pydantic schema.

    Keyword arguments are validated against ``schema`` and the validated
    values (defaults included) are passed on. Positional arguments such as
    ``self`` are passed through untouched.

    Example:
        >>> @validate_input(ProjectIdInput)
        ... async def get_interface_list(project_id: int):
        ...     pass

    Error Response:
        {
            "success": False,
            "error_code": "INVALID_INPUT",
            "message": "Input validation failed",
            "details": {
                "validation_errors": [
                    {
                        "field": "project_id",
                        "message": "Input should be greater than or equal to 1",
                        "type": "greater_than_equal"
                    }
                ],
                "function": "get_interface_list"
            }
        }
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    validated = schema(**kwargs)
                except ValidationError as e:
                    return _validation_failure(func.__name__, e, kwargs)
                return await func(*args, **validated.model_dump(exclude_unset=False))

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                validated = schema(**kwargs)
            except ValidationError as e:
                return _validation_failure(func.__name__, e, kwargs)
            return func(*args, **validated.model_dump(exclude_unset=False))

        return sync_wrapper

    return decorator
