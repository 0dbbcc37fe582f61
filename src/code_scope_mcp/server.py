"""
Code Scope MCP Server

This MCP server lets LLMs ask which function or method encloses a given line
of a source file. Files are tagged with ctags, turned into compact scope tables
and kept as binary index fields (optionally persisted in PostgreSQL).

MCP decorators delegate to the service layer for business logic.
"""

import json
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from mcp.server.fastmcp import Context, FastMCP

from .scopes.errors import TaggingToolUnavailable
from .services import ScopeIndexerContext, ScopeService, create_indexer_context
from .settings import ScopeSettings
from .utils import handle_mcp_resource_errors, handle_mcp_tool_errors


# Setup logging without writing to files
def setup_logging():
    """Setup logging (stdout for INFO+, stderr for ERROR+)."""

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.setLevel(logging.INFO)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.ERROR)

    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)
    root_logger.setLevel(logging.INFO)


setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def scope_lifespan(_server: FastMCP) -> AsyncIterator[ScopeIndexerContext]:
    """Manage the lifecycle of the Code Scope MCP server."""
    settings = ScopeSettings.load()
    context = create_indexer_context(settings)

    if context.tagging_tool is not None:
        try:
            context.tagging_tool.start()
        except TaggingToolUnavailable as e:
            # Files still get the global scope; tag_file() reports the failure per file
            logger.warning(f"⚠️  Tagging tool not usable: {e}")

    if context.store is not None:
        context.store.ensure_schema()

    try:
        yield context
    finally:
        context.close()


mcp = FastMCP("CodeScope", lifespan=scope_lifespan)

# ----- RESOURCES -----


@mcp.resource("config://code-scope")
@handle_mcp_resource_errors
def get_config() -> str:
    """Get the current configuration of the scope indexer."""
    ctx = mcp.get_context()
    return json.dumps(ScopeService(ctx).get_settings_info(), indent=2)


# ----- TOOLS -----


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def set_project_path(path: str, ctx: Context) -> Dict[str, Any]:
    """Set the project directory that file paths are relative to."""
    return ScopeService(ctx).set_project_path(path)


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def index_file_scopes(file_path: str, ctx: Context) -> Dict[str, Any]:
    """
    Build the scope table of a single file.

    Args:
        file_path: Path relative to the project root
    """
    return ScopeService(ctx).index_file(file_path)


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def index_directory_scopes(ctx: Context, directory: Optional[str] = None) -> Dict[str, Any]:
    """
    Build scope tables for every supported file below a directory.

    Args:
        directory: Directory relative to the project root; the whole project when omitted
    """
    return ScopeService(ctx).index_directory(directory)


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def get_scope_at_line(file_path: str, line: int, ctx: Context) -> Dict[str, Any]:
    """
    Get the function or method enclosing a line.

    Args:
        file_path: Path relative to the project root
        line: Line number; -1 and lines outside any function give the global scope
    """
    return ScopeService(ctx).get_scope_at_line(file_path, line)


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def list_file_scopes(file_path: str, ctx: Context) -> Dict[str, Any]:
    """List the named scopes of an indexed file."""
    return ScopeService(ctx).list_file_scopes(file_path)


@mcp.tool()
@handle_mcp_tool_errors(return_type="list")
def list_indexed_files(ctx: Context) -> List[str]:
    """List the files that have scope data."""
    return ScopeService(ctx).list_indexed_files()


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def get_scope_settings(ctx: Context) -> Dict[str, Any]:
    """Show the scope indexer configuration and tagging tool status."""
    return ScopeService(ctx).get_settings_info()


def main():
    """Main function to run the MCP server."""
    transport_mode = os.getenv("MCP_TRANSPORT", "stdio")

    if transport_mode == "http":
        # nosec B104: binding to 0.0.0.0 is needed inside containers
        host = os.getenv("HOST", "0.0.0.0")  # nosec B104
        port = int(os.getenv("PORT", 8080))

        mcp.settings.host = host
        mcp.settings.port = port

        logging.info(f"Starting MCP server in HTTP/SSE mode on {host}:{port}")
        mcp.run(transport="sse")
    else:
        logging.info("Starting MCP server in stdio mode")
        mcp.run()


if __name__ == "__main__":
    main()
