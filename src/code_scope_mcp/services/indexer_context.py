"""
Lifespan state of the Code Scope MCP server.

Wires the tagging tool, analyzer, pipeline and optional store from settings.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..analyzers.scope_analyzer import ScopeAnalyzer
from ..indexing.pipeline import ScopeIndexingPipeline
from ..indexing.scope_store import ScopeStore
from ..settings import ScopeSettings
from ..tagging.base import TaggingTool
from ..tagging.ctags import CtagsTool

logger = logging.getLogger(__name__)


@dataclass
class ScopeIndexerContext:
    """Context for the Code Scope MCP server."""

    settings: ScopeSettings
    analyzer: ScopeAnalyzer
    pipeline: ScopeIndexingPipeline
    tagging_tool: Optional[TaggingTool] = None
    store: Optional[ScopeStore] = None
    base_path: str = ""

    def close(self) -> None:
        if self.tagging_tool is not None:
            self.tagging_tool.close()
        if self.store is not None:
            self.store.close()


def create_indexer_context(
    settings: ScopeSettings,
    tagging_tool: Optional[TaggingTool] = None,
    store: Optional[ScopeStore] = None,
) -> ScopeIndexerContext:
    """
    Build the server state from settings.

    Args:
        settings: Scope settings
        tagging_tool: Tool to use instead of ctags from settings
        store: Store to use instead of one built from settings.database_url

    Returns:
        A ScopeIndexerContext with no project path set
    """
    if tagging_tool is None and settings.enabled:
        tagging_tool = CtagsTool(binary=settings.ctags_binary, timeout=settings.ctags_timeout)
        if not tagging_tool.is_available():
            logger.warning(
                f"{settings.ctags_binary} not found; files will get only the global scope"
            )

    if store is None and settings.database_url:
        store = ScopeStore(settings.database_url, project_name=settings.project_name)

    analyzer = ScopeAnalyzer(
        tagging_tool,
        scopes_enabled=settings.enabled,
        emit_containers=settings.emit_containers,
    )
    pipeline = ScopeIndexingPipeline(analyzer, store=store, max_workers=settings.max_workers)
    return ScopeIndexerContext(
        settings=settings,
        analyzer=analyzer,
        pipeline=pipeline,
        tagging_tool=tagging_tool,
        store=store,
    )
