"""
Scope extraction core.

Builds per-file ScopeTables from tagging tool output and encodes them into a
versioned binary form that can be stored as a document field.
"""

from .builder import ScopeBuilder, build_scope_table
from .codec import deserialize, serialize
from .errors import (
    CodecDecodeError,
    CodecVersionMismatch,
    ScopeError,
    TaggingToolUnavailable,
    TagStreamMalformed,
)
from .models import GLOBAL_SCOPE, GLOBAL_SCOPE_NAME, ScopeEntry, ScopeTable, TagRecord

__all__ = [
    'ScopeBuilder',
    'build_scope_table',
    'serialize',
    'deserialize',
    'ScopeError',
    'TagStreamMalformed',
    'TaggingToolUnavailable',
    'CodecDecodeError',
    'CodecVersionMismatch',
    'GLOBAL_SCOPE',
    'GLOBAL_SCOPE_NAME',
    'ScopeEntry',
    'ScopeTable',
    'TagRecord',
]
