"""
Service layer for the Code Scope MCP server.

MCP tools in server.py stay thin and delegate to these services.
"""

from .base_service import BaseService
from .indexer_context import ScopeIndexerContext, create_indexer_context
from .scope_service import ScopeService

__all__ = ["BaseService", "ScopeIndexerContext", "ScopeService", "create_indexer_context"]
