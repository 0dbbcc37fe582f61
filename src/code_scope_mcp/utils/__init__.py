"""
Utility modules for the Code Scope MCP server.

This package contains shared utilities used across services:
- error_handler: Decorator-based error handling for MCP entry points
- context_helper: Context access helpers
- validation: Common validation logic
- statistics: Duration reporting for long-running tasks
"""

from .context_helper import ContextHelper
from .error_handler import handle_mcp_errors, handle_mcp_resource_errors, handle_mcp_tool_errors
from .statistics import Statistics, get_readable_time
from .validation import ValidationHelper

__all__ = [
    "handle_mcp_errors",
    "handle_mcp_resource_errors",
    "handle_mcp_tool_errors",
    "ContextHelper",
    "ValidationHelper",
    "Statistics",
    "get_readable_time",
]
