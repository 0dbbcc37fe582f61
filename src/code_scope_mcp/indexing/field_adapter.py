"""
Index field adapter for scope data.

Stores the codec output as the opaque binary "scopes" field of a file's
document and hands the bytes back to the codec on the read side. It knows
nothing about scope semantics.
"""

import logging
from typing import Optional

from ..constants import SCOPES_FIELD
from ..scopes.codec import deserialize, serialize
from ..scopes.errors import CodecDecodeError
from ..scopes.models import ScopeTable
from .document import Document

logger = logging.getLogger(__name__)


class ScopeFieldAdapter:
    """Reads and writes the binary scopes field of index documents."""

    def __init__(self, field_name: str = SCOPES_FIELD):
        self.field_name = field_name

    def write(self, document: Document, table: ScopeTable) -> bytes:
        """
        Serialize a table into the document.

        Returns:
            The stored bytes
        """
        data = serialize(table)
        document.add_binary_field(self.field_name, data)
        return data

    def read_bytes(self, document: Document) -> Optional[bytes]:
        """Return the stored bytes, or None when the document has no scopes."""
        return document.get_binary_field(self.field_name)

    def read_strict(self, document: Document) -> Optional[ScopeTable]:
        """
        Decode the stored table.

        Raises:
            CodecDecodeError: If the stored bytes are corrupt
        """
        data = self.read_bytes(document)
        if data is None:
            return None
        return deserialize(data)

    def read(self, document: Document) -> Optional[ScopeTable]:
        """Decode the stored table, treating corrupt data as absent."""
        try:
            return self.read_strict(document)
        except CodecDecodeError as e:
            logger.warning(f"Ignoring unreadable scopes of {document.path}: {e}")
            return None
