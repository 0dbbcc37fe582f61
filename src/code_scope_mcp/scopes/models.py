"""
Data models for scope extraction.

This module defines the tag records consumed from the tagging tool, the
immutable scope entries produced from them, and the ScopeTable that answers
"which symbol owns line N" for a single file.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

GLOBAL_SCOPE_NAME = "<global>"


@dataclass(frozen=True)
class TagRecord:
    """
    One symbol definition reported by the tagging tool.

    Records are deliberately lenient: fields may be missing or carry the wrong
    type when the tool output is damaged. ScopeBuilder validates them.

    Attributes:
        name: Symbol name, verbatim (e.g. "operator ++", "~SomeClass")
        kind: Symbol kind as reported by the tool ("class", "function", "f", ...)
        line: 1-based line where the definition starts
        scope: Raw enclosing-path hint, e.g. "class:SomeClass" or "namespace:ns1"
        end_line: Last line of the definition when the tool declares it
        signature: Signature text, for diagnostics only
    """
    name: Any
    kind: Any
    line: Any
    scope: Optional[str] = None
    end_line: Optional[int] = None
    signature: Optional[str] = None


@dataclass(frozen=True)
class ScopeEntry:
    """
    A flat scope range owned by one symbol.

    Attributes:
        start_line: First line of the range (-1 only for the global entry)
        name: Owning symbol name
        enclosing_scope: Descriptor of the enclosing type chain, e.g.
            "class:ns1::NamespacedClass", or None
        end_line: Last line of the range, or None when the range stays open
            until the next entry starts
    """
    start_line: int
    name: str
    enclosing_scope: Optional[str] = None
    end_line: Optional[int] = None

    @property
    def is_global(self) -> bool:
        return self.start_line < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "name": self.name,
            "scope": self.enclosing_scope,
        }


GLOBAL_SCOPE = ScopeEntry(start_line=-1, name=GLOBAL_SCOPE_NAME)


class ScopeTable:
    """
    Immutable line -> scope lookup table for one file.

    Named entries are flat ranges kept strictly increasing by start_line; a
    declared end never reaches the next entry's start. Lines that no named
    entry covers resolve to GLOBAL_SCOPE, which is always present but not
    counted by size().
    """

    __slots__ = ("_entries", "_starts")

    def __init__(self, entries: Iterable[ScopeEntry] = ()):
        ordered = tuple(entries)
        starts: List[int] = []
        previous: Optional[ScopeEntry] = None
        for entry in ordered:
            if entry.start_line < 0:
                raise ValueError(f"Named scope entry must start at line >= 0: {entry!r}")
            if starts and entry.start_line <= starts[-1]:
                raise ValueError(
                    f"Scope entries must be strictly increasing by start line, "
                    f"got {entry.start_line} after {starts[-1]}"
                )
            if entry.end_line is not None and entry.end_line < entry.start_line:
                raise ValueError(f"Scope entry ends before it starts: {entry!r}")
            if previous is not None and previous.end_line is not None \
                    and previous.end_line >= entry.start_line:
                raise ValueError(
                    f"Scope entry {previous.name!r} ends at line {previous.end_line}, "
                    f"overlapping {entry.name!r} at line {entry.start_line}"
                )
            starts.append(entry.start_line)
            previous = entry

        self._entries: Tuple[ScopeEntry, ...] = ordered
        self._starts: Tuple[int, ...] = tuple(starts)

    @property
    def global_scope(self) -> ScopeEntry:
        return GLOBAL_SCOPE

    @property
    def entries(self) -> Tuple[ScopeEntry, ...]:
        """Named entries in ascending start_line order."""
        return self._entries

    @property
    def max_line(self) -> int:
        """Highest line mentioned by any entry, or -1 for an empty table."""
        highest = -1
        for entry in self._entries:
            highest = max(highest, entry.start_line, entry.end_line or -1)
        return highest

    def lookup(self, line: int) -> ScopeEntry:
        """
        Find the scope entry that owns a line.

        Args:
            line: Line number as reported by the tagging tool

        Returns:
            The active entry for the line, or GLOBAL_SCOPE
        """
        if line < 0:
            return GLOBAL_SCOPE

        index = bisect_right(self._starts, line) - 1
        if index < 0:
            return GLOBAL_SCOPE

        entry = self._entries[index]
        if entry.end_line is not None and line > entry.end_line:
            return GLOBAL_SCOPE
        return entry

    def size(self) -> int:
        """Number of named entries (the global entry is not counted)."""
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view of the table."""
        return {
            "size": self.size(),
            "scopes": [entry.to_dict() for entry in self._entries],
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ScopeEntry]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScopeTable):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"ScopeTable(size={self.size()})"
