"""
Index document model.

A Document is the index record of one source file: its path plus named fields.
Binary fields hold opaque bytes that only their producers know how to read.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Document:
    """Index record of a single file."""
    path: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def add_field(self, name: str, value: Any) -> None:
        """Set a field, replacing any previous value."""
        self.fields[name] = value

    def get_field(self, name: str) -> Optional[Any]:
        return self.fields.get(name)

    def add_binary_field(self, name: str, value: bytes) -> None:
        """Set a binary field; the bytes are stored as an immutable copy."""
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Binary field {name!r} needs bytes, got {type(value).__name__}")
        self.fields[name] = bytes(value)

    def get_binary_field(self, name: str) -> Optional[bytes]:
        value = self.fields.get(name)
        if value is None:
            return None
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Field {name!r} is not binary")
        return bytes(value)

    def remove_field(self, name: str) -> None:
        self.fields.pop(name, None)

    def has_field(self, name: str) -> bool:
        return name in self.fields
