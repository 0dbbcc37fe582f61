"""Code Scope MCP package.

Builds per-file scope tables (which function encloses which line) from ctags
output and serves them through an MCP server.
"""

__version__ = "0.1.0"
