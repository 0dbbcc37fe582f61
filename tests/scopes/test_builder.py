"""Tests for ScopeBuilder: container tracking, closure and record validation."""
import pytest

from code_scope_mcp.scopes.builder import (
    ScopeBuilder,
    build_scope_table,
    normalize_kind,
    split_scope_hint,
)
from code_scope_mcp.scopes.models import GLOBAL_SCOPE, TagRecord

REFERENCE_RANGES = [
    (11, 15, "SomeClass", "class:SomeClass"),
    (17, 20, "~SomeClass", "class:SomeClass"),
    (22, 25, "MemberFunc", "class:SomeClass"),
    (27, 29, "operator ++", "class:SomeClass"),
    (32, 34, "TemplateMember", "class:SomeClass"),
    (44, 46, "SomeFunc", "class:ns1::NamespacedClass"),
    (51, 54, "foo", None),
    (59, 73, "bar", None),
    (76, 87, "main", None),
]


def _expected_at(line):
    for start, end, name, scope in REFERENCE_RANGES:
        if start <= line <= end:
            return name, scope
    return None


def test_reference_sample_has_nine_named_entries(reference_records):
    table, warnings = build_scope_table(reference_records)

    assert table.size() == 9
    assert warnings == []
    assert [entry.name for entry in table] == [r[2] for r in REFERENCE_RANGES]


def test_reference_sample_lookup_matches_every_line(reference_records):
    table, _ = build_scope_table(reference_records)

    for line in range(0, 100):
        entry = table.lookup(line)
        expected = _expected_at(line)
        if expected is None:
            assert entry == GLOBAL_SCOPE, f"line {line} should be global, got {entry}"
            assert entry.enclosing_scope is None
        else:
            assert (entry.name, entry.enclosing_scope) == expected, f"line {line}"


def test_reference_sample_spot_checks(reference_records):
    table, _ = build_scope_table(reference_records)

    assert table.lookup(12).name == "SomeClass"
    assert table.lookup(12).enclosing_scope == "class:SomeClass"
    assert table.lookup(18).name == "~SomeClass"
    assert table.lookup(28).name == "operator ++"
    assert table.lookup(45).enclosing_scope == "class:ns1::NamespacedClass"
    assert table.lookup(0) is GLOBAL_SCOPE
    assert table.lookup(16) is GLOBAL_SCOPE
    assert table.lookup(36) is GLOBAL_SCOPE
    assert table.lookup(-1) is GLOBAL_SCOPE


def test_start_only_stream_infers_container_closure(reference_records_without_ends):
    table, warnings = build_scope_table(reference_records_without_ends)

    assert table.size() == 9
    assert warnings == []
    for start, _end, name, scope in REFERENCE_RANGES:
        entry = table.lookup(start)
        assert entry.name == name
        assert entry.enclosing_scope == scope
        assert entry.end_line is None
    # Without end lines a range stays open until the next entry
    assert table.lookup(16).name == "SomeClass"
    assert table.lookup(10) is GLOBAL_SCOPE


def test_record_without_hint_closes_open_ended_container():
    records = [
        TagRecord("Widget", "class", 1),
        TagRecord("draw", "method", 3),
    ]
    table, _ = build_scope_table(records)

    # Same depth as the class, so the class is considered closed
    assert table.lookup(3).enclosing_scope is None


def test_record_without_hint_inside_declared_container_uses_stack():
    records = [
        TagRecord("Widget", "class", 1, end_line=20),
        TagRecord("draw", "method", 3, end_line=8),
        TagRecord("helper", "function", 25),
    ]
    table, _ = build_scope_table(records)

    assert table.lookup(3).enclosing_scope == "class:Widget"
    assert table.lookup(25).enclosing_scope is None


def test_shallower_hint_closes_nested_container():
    records = [
        TagRecord("outer", "namespace", 1),
        TagRecord("Inner", "class", 2, scope="namespace:outer"),
        TagRecord("run", "function", 3, scope="class:outer::Inner"),
        TagRecord("after", "function", 20, scope="namespace:outer"),
        TagRecord("free", "function", 30),
    ]
    table, _ = build_scope_table(records)

    assert table.lookup(3).enclosing_scope == "class:outer::Inner"
    # Hint kind is a namespace, which still counts as an enclosing container
    assert table.lookup(20).enclosing_scope == "namespace:outer"
    assert table.lookup(30).enclosing_scope is None


def test_language_separator_qualifies_nested_types():
    records = [
        TagRecord("Outer", "class", 1),
        TagRecord("Inner", "class", 2, scope="class:Outer"),
        TagRecord("run", "method", 3, scope="class:Outer.Inner"),
    ]
    table, _ = build_scope_table(records, separator=".")

    assert table.size() == 1
    assert table.lookup(3).enclosing_scope == "class:Outer.Inner"


def test_function_hint_is_not_an_enclosing_type():
    records = [
        TagRecord("outer", "function", 1, end_line=10),
        TagRecord("inner", "function", 3, scope="function:outer", end_line=5),
    ]
    table, _ = build_scope_table(records)

    assert table.lookup(4).name == "inner"
    assert table.lookup(4).enclosing_scope is None


def test_nested_declared_end_is_cut_at_next_start():
    records = [
        TagRecord("outer", "function", 1, end_line=10),
        TagRecord("inner", "function", 3, scope="function:outer", end_line=5),
    ]
    table, _ = build_scope_table(records)

    assert [(e.start_line, e.end_line) for e in table] == [(1, 2), (3, 5)]
    assert table.lookup(2).name == "outer"
    # Flat ranges: the rest of the outer body is not attributed to it again
    assert table.lookup(7) is GLOBAL_SCOPE
    starts = [table.lookup(line).start_line for line in range(-1, 12)]
    assert starts == [-1, -1, 1, 1, 3, 3, 3, -1, -1, -1, -1, -1, -1]


def test_python_member_kind_is_callable_when_requested():
    records = [
        TagRecord("Foo", "class", 1, end_line=10),
        TagRecord("run", "member", 2, scope="class:Foo", end_line=5),
    ]
    table, _ = build_scope_table(records, separator=".", extra_callable_kinds=frozenset({"member"}))

    assert table.lookup(3).name == "run"
    assert table.lookup(3).enclosing_scope == "class:Foo"
    assert table.lookup(6) is GLOBAL_SCOPE


def test_member_kind_is_ignored_by_default():
    # In C and C++ a member is a data field, not a function
    records = [
        TagRecord("Point", "struct", 1, end_line=4),
        TagRecord("x", "member", 2, scope="struct:Point"),
    ]
    table, _ = build_scope_table(records)

    assert table.size() == 0
    assert table.lookup(2) is GLOBAL_SCOPE


def test_emit_containers_adds_header_entries(reference_records):
    table, _ = build_scope_table(reference_records, emit_containers=True)

    assert table.size() == 12
    header = table.lookup(9)
    assert header.name == "SomeClass"
    assert header.enclosing_scope is None
    # Container entries own only the lines before their first member
    assert header.end_line == 10
    assert table.lookup(38).name == "ns1"
    assert table.lookup(39).name == "NamespacedClass"
    assert table.lookup(39).enclosing_scope == "namespace:ns1"
    assert table.lookup(43) is GLOBAL_SCOPE


def test_duplicate_start_line_prefers_callable_over_container():
    records = [
        TagRecord("Point", "struct", 5),
        TagRecord("Point", "function", 5, scope="struct:Point"),
    ]
    builder = ScopeBuilder(emit_containers=True)
    builder.add_all(records)
    table = builder.build()

    assert table.size() == 1
    assert table.lookup(5).enclosing_scope == "struct:Point"
    assert any("merged duplicate" in w for w in builder.warnings)


def test_duplicate_start_line_of_equal_priority_keeps_first():
    records = [
        TagRecord("first", "function", 7),
        TagRecord("second", "function", 7),
    ]
    table, warnings = build_scope_table(records)

    assert table.size() == 1
    assert table.lookup(7).name == "first"
    assert len(warnings) == 1
    assert "second" in warnings[0]


@pytest.mark.parametrize("record", [
    TagRecord(None, "function", 3),
    TagRecord("", "function", 3),
    TagRecord("f", None, 3),
    TagRecord("f", "  ", 3),
    TagRecord("f", "function", None),
    TagRecord("f", "function", "12"),
    TagRecord("f", "function", True),
    TagRecord("f", "function", -4),
])
def test_malformed_records_are_skipped_with_warning(record):
    records = [
        TagRecord("before", "function", 1),
        record,
        TagRecord("after", "function", 20),
    ]
    table, warnings = build_scope_table(records)

    assert [entry.name for entry in table] == ["before", "after"]
    assert len(warnings) == 1


def test_out_of_order_record_is_skipped():
    records = [
        TagRecord("late", "function", 10),
        TagRecord("early", "function", 5),
        TagRecord("later", "function", 12),
    ]
    table, warnings = build_scope_table(records)

    assert [entry.name for entry in table] == ["late", "later"]
    assert "out of order" in warnings[0]


def test_invalid_end_line_is_dropped():
    table, warnings = build_scope_table([TagRecord("f", "function", 10, end_line=3)])

    assert table.lookup(10).end_line is None
    assert len(warnings) == 1


def test_unknown_kinds_are_ignored_silently():
    records = [
        TagRecord("MAX", "macro", 1),
        TagRecord("count", "variable", 2),
        TagRecord("run", "function", 3),
    ]
    table, warnings = build_scope_table(records)

    assert table.size() == 1
    assert warnings == []


def test_empty_stream_gives_global_only_table():
    table, warnings = build_scope_table([])

    assert table.size() == 0
    assert warnings == []
    for line in range(0, 10):
        assert table.lookup(line) is GLOBAL_SCOPE


def test_builder_is_single_use():
    builder = ScopeBuilder()
    builder.add(TagRecord("f", "function", 1))
    builder.build()

    with pytest.raises(RuntimeError):
        builder.build()
    with pytest.raises(RuntimeError):
        builder.add(TagRecord("g", "function", 2))


def test_single_letter_kinds_are_normalized():
    assert normalize_kind("f") == "function"
    assert normalize_kind("C") == "class"
    assert normalize_kind(" Method ") == "method"


@pytest.mark.parametrize("hint, expected", [
    ("class:ns1::NamespacedClass", ("class", "ns1::NamespacedClass")),
    ("namespace:ns1", ("namespace", "ns1")),
    ("c:Widget", ("class", "Widget")),
    ("Widget", None),
    ("class:", None),
    ("", None),
    (None, None),
])
def test_split_scope_hint(hint, expected):
    assert split_scope_hint(hint) == expected
