"""Shared fixtures for the scope indexer tests."""
import sys
from pathlib import Path as _TestPath

import pytest

ROOT = _TestPath(__file__).resolve().parents[1]
SRC_PATH = ROOT / 'src'
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from code_scope_mcp.scopes.models import TagRecord
from code_scope_mcp.tagging.base import TaggingTool, TagStreamResult


def _reference_records(with_end_lines: bool):
    """Tags of the C++ sample: members of SomeClass, an out-of-line member and free functions."""
    def tag(name, kind, line, end, scope=None):
        return TagRecord(name=name, kind=kind, line=line, scope=scope,
                         end_line=end if with_end_lines else None)

    return [
        tag("SomeClass", "class", 9, 35),
        tag("SomeClass", "function", 11, 15, "class:SomeClass"),
        tag("~SomeClass", "function", 17, 20, "class:SomeClass"),
        tag("MemberFunc", "function", 22, 25, "class:SomeClass"),
        tag("operator ++", "function", 27, 29, "class:SomeClass"),
        tag("TemplateMember", "function", 32, 34, "class:SomeClass"),
        tag("ns1", "namespace", 38, 42),
        tag("NamespacedClass", "class", 39, 41, "namespace:ns1"),
        tag("SomeFunc", "prototype", 40, 40, "class:ns1::NamespacedClass"),
        tag("SomeFunc", "function", 44, 46, "class:ns1::NamespacedClass"),
        tag("counter", "variable", 49, 49),
        tag("foo", "function", 51, 54),
        tag("bar", "function", 59, 73),
        tag("main", "function", 76, 87),
    ]


@pytest.fixture
def reference_records():
    """Universal Ctags style stream (declared end lines)."""
    return _reference_records(with_end_lines=True)


@pytest.fixture
def reference_records_without_ends():
    """Exuberant Ctags style stream (start lines only)."""
    return _reference_records(with_end_lines=False)


class FakeTaggingTool(TaggingTool):
    """In-memory tagging tool: maps file paths to tag records or to an exception."""

    def __init__(self, streams=None, failures=None, warnings=None):
        self.streams = streams or {}
        self.failures = failures or {}
        self.warnings = warnings or {}
        self.calls = []
        self.closed = False

    @property
    def name(self):
        return "fake"

    def is_available(self):
        return True

    def start(self):
        pass

    def tag_file(self, file_path, language=None):
        self.calls.append((file_path, language))
        if file_path in self.failures:
            raise self.failures[file_path]
        return TagStreamResult(
            file_path=file_path,
            records=list(self.streams.get(file_path, [])),
            warnings=list(self.warnings.get(file_path, [])),
        )

    def close(self):
        self.closed = True


@pytest.fixture
def fake_tool():
    return FakeTaggingTool()


@pytest.fixture
def tool_factory():
    """Build FakeTaggingTool instances with canned streams."""
    return FakeTaggingTool
