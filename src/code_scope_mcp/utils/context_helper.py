"""
Context access utilities and helpers.

This module provides convenient access to the lifespan state that the server
hands to every request through the MCP Context.
"""

from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

if TYPE_CHECKING:
    from ..services.indexer_context import ScopeIndexerContext


class ContextHelper:
    """
    Helper class for convenient access to MCP Context data.
    """

    def __init__(self, ctx: Context):
        """
        Initialize the context helper.

        Args:
            ctx: The MCP Context object
        """
        self.ctx = ctx

    @property
    def state(self) -> "ScopeIndexerContext":
        """
        Get the lifespan state from the context.

        Raises:
            RuntimeError: If the server lifespan did not provide a state
        """
        try:
            return self.ctx.request_context.lifespan_context
        except AttributeError as e:
            raise RuntimeError("Scope indexer context is not available") from e

    @property
    def base_path(self) -> str:
        """The project root, or empty string if not set."""
        return getattr(self.state, "base_path", "") or ""

    def update_base_path(self, new_base_path: str) -> None:
        self.state.base_path = new_base_path
