"""
Decorator-based error handling for MCP entry points.

This module provides consistent error handling across all MCP tools and resources.
Supports both synchronous and asynchronous functions.
"""

import inspect
import functools
import json
import logging
from typing import Any, Callable, Dict, Union

from ..scopes.errors import ScopeError

logger = logging.getLogger(__name__)


def _format_error(error: Exception, return_type: str) -> Union[str, Dict[str, Any], list]:
    """Render an exception in the shape the entry point is expected to return."""
    error_message = str(error)
    if isinstance(error, ScopeError):
        # Keep the error kind visible so clients can tell corrupt data from a missing tagger
        error_message = f"{type(error).__name__}: {error_message}"

    if return_type == "dict":
        return {"error": f"Operation failed: {error_message}"}
    elif return_type == "json":
        return json.dumps({"error": f"Operation failed: {error_message}"})
    elif return_type == "list":
        return [{"error": f"Operation failed: {error_message}"}]
    else:  # return_type == 'str' (default)
        return f"Error: {error_message}"


def handle_mcp_errors(return_type: str = "str") -> Callable:
    """
    Decorator to handle exceptions in MCP entry points consistently.

    Args:
        return_type: The expected return type format
            - 'str': Returns error as string format "Error: {message}"
            - 'dict': Returns error as dict format {"error": "Operation failed: {message}"}
            - 'json': Returns error as JSON string with dict format
            - 'list': Returns error as list format [{"error": "Operation failed: {message}"}]

    Returns:
        Decorator function that wraps MCP entry points with error handling

    Example:
        @mcp.tool()
        @handle_mcp_errors(return_type='dict')
        def get_scope_at_line(file_path: str, line: int, ctx: Context) -> Dict[str, Any]:
            return ScopeService(ctx).get_scope_at_line(file_path, line)
    """

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    logger.warning(f"{func.__name__} failed: {e}")
                    return _format_error(e, return_type)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"{func.__name__} failed: {e}")
                return _format_error(e, return_type)

        return sync_wrapper

    return decorator


def handle_mcp_resource_errors(func: Callable) -> Callable:
    """
    Specialized error handler for MCP resources that always return strings.

    Args:
        func: The MCP resource function to wrap

    Returns:
        Wrapped function with error handling
    """
    return handle_mcp_errors(return_type="str")(func)


def handle_mcp_tool_errors(return_type: str = "str") -> Callable:
    """
    Specialized error handler for MCP tools with flexible return types.

    Args:
        return_type: The expected return type ('str', 'dict', 'json' or 'list')

    Returns:
        Decorator function for MCP tools
    """
    return handle_mcp_errors(return_type=return_type)
