"""
Scope Builder - turns a flat, line-ordered tag stream into a ScopeTable.

The builder keeps a stack of open containers (classes, namespaces, structs)
so that member definitions can be attributed to their enclosing type, and
emits one flat scope entry per function/method definition.

Container closure is best-effort. When the tagging tool declares an end line
the builder trusts it; otherwise a container is closed by the first later tag
whose enclosing path is as shallow as, or shallower than, the container
itself. Without a real parser this cannot be exact.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..constants import (
    CALLABLE_KINDS,
    CONTAINER_KINDS,
    DEFAULT_SCOPE_SEPARATOR,
    KIND_ALIASES,
    KIND_PRIORITY,
)
from .errors import TagStreamMalformed
from .models import ScopeEntry, ScopeTable, TagRecord

logger = logging.getLogger(__name__)


def normalize_kind(kind: str) -> str:
    """Map a tagging tool kind spelling to its canonical name."""
    lowered = kind.strip().lower()
    return KIND_ALIASES.get(lowered, lowered)


def split_scope_hint(hint: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Split an enclosing-path hint into (kind, qualified name).

    "class:ns1::NamespacedClass" -> ("class", "ns1::NamespacedClass")

    Returns None for an empty or unqualified hint.
    """
    if not hint or not isinstance(hint, str):
        return None
    kind, sep, name = hint.partition(':')
    if not sep or not kind or not name:
        return None
    return normalize_kind(kind), name


@dataclass
class _OpenContainer:
    kind: str
    qualified_name: str
    depth: int
    end_line: Optional[int]

    @property
    def descriptor(self) -> str:
        return f"{self.kind}:{self.qualified_name}"


@dataclass
class _Candidate:
    entry: ScopeEntry
    priority: int
    is_container: bool


class ScopeBuilder:
    """
    Transient single-pass builder for one file.

    Feed records with add()/add_all() in non-decreasing line order, then call
    build() once to obtain the frozen ScopeTable. Problems with individual
    records are collected in ``warnings`` and never abort the build.
    """

    def __init__(
        self,
        separator: str = DEFAULT_SCOPE_SEPARATOR,
        emit_containers: bool = False,
        extra_callable_kinds: FrozenSet[str] = frozenset(),
    ):
        """
        Args:
            separator: Qualified-name separator of the file's language
            emit_containers: Also emit entries for container header lines
            extra_callable_kinds: Language-specific kinds that also define
                callables, e.g. "member" for Python methods
        """
        self.separator = separator
        self.emit_containers = emit_containers
        self.extra_callable_kinds = frozenset(normalize_kind(kind) for kind in extra_callable_kinds)
        self.warnings: List[str] = []
        self._stack: List[_OpenContainer] = []
        self._candidates: Dict[int, _Candidate] = {}
        self._last_line = -1
        self._built = False

    def add_all(self, records: Iterable[TagRecord]) -> "ScopeBuilder":
        for record in records:
            self.add(record)
        return self

    def add(self, record: TagRecord) -> None:
        """Consume one tag record; malformed records are skipped with a warning."""
        if self._built:
            raise RuntimeError("ScopeBuilder.build() was already called")
        try:
            self._add(record)
        except TagStreamMalformed as e:
            self.warnings.append(str(e))
            logger.warning(f"Skipping tag record: {e}")

    def _add(self, record: TagRecord) -> None:
        line, kind, name = self._validate(record)

        if kind in CONTAINER_KINDS:
            category = 'container'
        elif kind in CALLABLE_KINDS or kind in self.extra_callable_kinds:
            category = 'callable'
        else:
            logger.debug(f"Ignoring tag {name!r} of kind {kind!r} at line {line}")
            return

        self._last_line = line
        hint = split_scope_hint(record.scope)
        self._close_containers(line, self._hint_depth(hint))
        end_line = self._valid_end(record.end_line, line)

        if category == 'container':
            self._push_container(kind, name, hint, end_line)
            if self.emit_containers:
                entry = ScopeEntry(line, name, self._parent_descriptor(hint), end_line)
                self._offer(_Candidate(entry, KIND_PRIORITY['container'], True))
            return

        entry = ScopeEntry(line, name, self._enclosing_descriptor(hint), end_line)
        self._offer(_Candidate(entry, KIND_PRIORITY['callable'], False))

    def _validate(self, record: TagRecord) -> Tuple[int, str, str]:
        name = record.name
        if not isinstance(name, str) or not name:
            raise TagStreamMalformed(f"tag record without a name: {record!r}", record)

        kind = record.kind
        if not isinstance(kind, str) or not kind.strip():
            raise TagStreamMalformed(f"tag {name!r} has no parsable kind", record)

        line = record.line
        if isinstance(line, bool) or not isinstance(line, int):
            raise TagStreamMalformed(f"tag {name!r} has no line number", record)
        if line < 0:
            raise TagStreamMalformed(f"tag {name!r} has negative line {line}", record)
        if line < self._last_line:
            raise TagStreamMalformed(
                f"tag {name!r} at line {line} is out of order (previous line {self._last_line})",
                record,
            )
        return line, normalize_kind(kind), name

    def _valid_end(self, end_line, start_line: int) -> Optional[int]:
        if end_line is None:
            return None
        if isinstance(end_line, bool) or not isinstance(end_line, int) or end_line < start_line:
            self.warnings.append(f"ignoring invalid end line {end_line!r} for tag at line {start_line}")
            return None
        return end_line

    def _hint_depth(self, hint: Optional[Tuple[str, str]]) -> int:
        if hint is None:
            return 0
        return len([part for part in hint[1].split(self.separator) if part])

    def _close_containers(self, line: int, depth: int) -> None:
        while self._stack:
            top = self._stack[-1]
            if top.end_line is not None:
                if top.end_line >= line:
                    break
            elif depth > top.depth:
                break
            self._stack.pop()

    def _push_container(self, kind: str, name: str, hint, end_line: Optional[int]) -> _OpenContainer:
        if hint is not None:
            qualified = f"{hint[1]}{self.separator}{name}"
        elif self._stack:
            qualified = f"{self._stack[-1].qualified_name}{self.separator}{name}"
        else:
            qualified = name
        container = _OpenContainer(kind, qualified, len(self._stack), end_line)
        self._stack.append(container)
        return container

    def _enclosing_descriptor(self, hint) -> Optional[str]:
        if hint is not None and hint[0] in CONTAINER_KINDS:
            return f"{hint[0]}:{hint[1]}"
        if hint is None and self._stack:
            return self._stack[-1].descriptor
        return None

    def _parent_descriptor(self, hint) -> Optional[str]:
        # The container was just pushed; its parent sits one below it.
        if hint is not None and hint[0] in CONTAINER_KINDS:
            return f"{hint[0]}:{hint[1]}"
        if hint is None and len(self._stack) > 1:
            return self._stack[-2].descriptor
        return None

    def _offer(self, candidate: _Candidate) -> bool:
        line = candidate.entry.start_line
        current = self._candidates.get(line)
        if current is None:
            self._candidates[line] = candidate
            return True

        if candidate.priority > current.priority:
            winner, loser = candidate, current
        else:
            winner, loser = current, candidate
        self._candidates[line] = winner
        self.warnings.append(
            f"line {line}: kept {winner.entry.name!r}, merged duplicate {loser.entry.name!r}"
        )
        return winner is candidate

    def build(self) -> ScopeTable:
        """Freeze the accumulated entries into a ScopeTable."""
        if self._built:
            raise RuntimeError("ScopeBuilder.build() was already called")
        self._built = True

        lines = sorted(self._candidates)
        entries: List[ScopeEntry] = []
        for position, line in enumerate(lines):
            candidate = self._candidates[line]
            entry = candidate.entry
            next_start = lines[position + 1] if position + 1 < len(lines) else None
            end = entry.end_line
            if next_start is not None:
                # Ranges stay flat: every entry stops where the next one starts.
                # Container entries only own their header lines.
                if end is not None and end >= next_start:
                    end = next_start - 1
                elif end is None and candidate.is_container:
                    end = next_start - 1
            if end != entry.end_line:
                entry = ScopeEntry(entry.start_line, entry.name, entry.enclosing_scope, end)
            entries.append(entry)

        self._stack.clear()
        self._candidates = {}
        return ScopeTable(entries)


def build_scope_table(
    records: Iterable[TagRecord],
    separator: str = DEFAULT_SCOPE_SEPARATOR,
    emit_containers: bool = False,
    extra_callable_kinds: FrozenSet[str] = frozenset(),
) -> Tuple[ScopeTable, List[str]]:
    """
    Build a ScopeTable from a complete tag stream.

    Returns:
        Tuple of (table, warnings)
    """
    builder = ScopeBuilder(
        separator=separator,
        emit_containers=emit_containers,
        extra_callable_kinds=extra_callable_kinds,
    )
    builder.add_all(records)
    return builder.build(), builder.warnings
