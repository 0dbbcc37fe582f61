"""
Index documents and storage of the binary scopes field.

The concurrent pipeline lives in ``code_scope_mcp.indexing.pipeline`` and is
imported from there directly.
"""

from .document import Document
from .field_adapter import ScopeFieldAdapter
from .scope_store import ScopeStore, ScopeStoreError

__all__ = [
    'Document',
    'ScopeFieldAdapter',
    'ScopeStore',
    'ScopeStoreError',
]
