"""
Binary codec for ScopeTable.

Layout (big-endian, varints are unsigned LEB128 as in protobuf)::

    [format_version:uint8][entry_count:varint]
    entry_count x [start_line:int32]
                  [name_len:varint][name_bytes]
                  [scope_present:uint8][scope_len:varint?][scope_bytes?]
                  [end_line:int32]

scope_present is 0 for a missing enclosing scope, 1 otherwise. end_line is -1
for entries that stay open until the next entry. The global entry is implicit
and never stored, so the byte sequence is fully self-contained.
"""

import struct
from typing import List, Optional, Tuple

from ..constants import SCOPE_FORMAT_VERSION
from .errors import CodecDecodeError, CodecVersionMismatch
from .models import ScopeEntry, ScopeTable

_INT32 = struct.Struct('>i')
_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1
_MAX_VARINT_BYTES = 5  # lengths and counts fit in 32 bits
_OPEN_END = -1

SCOPE_ABSENT = 0
SCOPE_PRESENT = 1


def _write_varint(out: bytearray, value: int) -> None:
    if value < 0:
        raise ValueError(f"varint cannot encode negative value {value}")
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return


def _write_int32(out: bytearray, value: int) -> None:
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"line number {value} does not fit in int32")
    out += _INT32.pack(value)


def _write_string(out: bytearray, value: str) -> None:
    data = value.encode('utf-8')
    _write_varint(out, len(data))
    out += data


def serialize(table: ScopeTable) -> bytes:
    """
    Encode a ScopeTable.

    Args:
        table: The table to encode

    Returns:
        Self-contained byte sequence

    Raises:
        ValueError: If a line number does not fit in int32
    """
    out = bytearray()
    out.append(SCOPE_FORMAT_VERSION)
    _write_varint(out, table.size())
    for entry in table:
        _write_int32(out, entry.start_line)
        _write_string(out, entry.name)
        if entry.enclosing_scope is None:
            out.append(SCOPE_ABSENT)
        else:
            out.append(SCOPE_PRESENT)
            _write_string(out, entry.enclosing_scope)
        _write_int32(out, _OPEN_END if entry.end_line is None else entry.end_line)
    return bytes(out)


class _Reader:
    """Bounds-checked cursor over the encoded bytes."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def _require(self, count: int, what: str) -> None:
        if self.pos + count > len(self.data):
            raise CodecDecodeError(
                f"Truncated scope data: need {count} byte(s) for {what} at offset {self.pos}, "
                f"have {len(self.data) - self.pos}"
            )

    def uint8(self, what: str) -> int:
        self._require(1, what)
        value = self.data[self.pos]
        self.pos += 1
        return value

    def int32(self, what: str) -> int:
        self._require(_INT32.size, what)
        (value,) = _INT32.unpack_from(self.data, self.pos)
        self.pos += _INT32.size
        return value

    def varint(self, what: str) -> int:
        value = 0
        for shift in range(0, 7 * _MAX_VARINT_BYTES, 7):
            byte = self.uint8(what)
            value |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return value
        raise CodecDecodeError(f"Invalid varint for {what} at offset {self.pos}")

    def string(self, what: str) -> str:
        length = self.varint(f"{what} length")
        self._require(length, what)
        raw = self.data[self.pos:self.pos + length]
        self.pos += length
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise CodecDecodeError(f"Invalid UTF-8 in {what}: {e}") from e

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos


def _read_entry(reader: _Reader, index: int) -> Tuple[int, str, Optional[str], Optional[int]]:
    start_line = reader.int32(f"entry {index} start line")
    name = reader.string(f"entry {index} name")

    marker = reader.uint8(f"entry {index} scope marker")
    if marker == SCOPE_ABSENT:
        scope = None
    elif marker == SCOPE_PRESENT:
        scope = reader.string(f"entry {index} scope")
    else:
        raise CodecDecodeError(f"Invalid scope marker {marker} in entry {index}")

    end_line = reader.int32(f"entry {index} end line")
    return start_line, name, scope, (None if end_line == _OPEN_END else end_line)


def deserialize(data: bytes) -> ScopeTable:
    """
    Decode bytes produced by serialize().

    Raises:
        CodecVersionMismatch: If the format version is unknown
        CodecDecodeError: If the bytes are truncated or corrupt
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise CodecDecodeError(f"Scope data must be bytes, got {type(data).__name__}")

    reader = _Reader(bytes(data))
    version = reader.uint8("format version")
    if version != SCOPE_FORMAT_VERSION:
        raise CodecVersionMismatch(version, SCOPE_FORMAT_VERSION)

    count = reader.varint("entry count")
    entries: List[ScopeEntry] = []
    previous = -1
    previous_end = None
    for index in range(count):
        start_line, name, scope, end_line = _read_entry(reader, index)
        if start_line <= previous:
            raise CodecDecodeError(
                f"Entry {index} starts at line {start_line}, not after line {previous}"
            )
        if end_line is not None and end_line < start_line:
            raise CodecDecodeError(f"Entry {index} ends at line {end_line} before it starts")
        if previous_end is not None and previous_end >= start_line:
            raise CodecDecodeError(
                f"Entry {index} starts at line {start_line} inside the previous range ending at {previous_end}"
            )
        entries.append(ScopeEntry(start_line, name, scope, end_line))
        previous = start_line
        previous_end = end_line

    if reader.remaining:
        raise CodecDecodeError(f"{reader.remaining} trailing byte(s) after scope data")

    return ScopeTable(entries)
