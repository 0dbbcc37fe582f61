"""Tests for the ctags output parsers."""
import json

import pytest

from code_scope_mcp.scopes.errors import TagStreamMalformed
from code_scope_mcp.tagging.parser import parse_json_tag, parse_tag_line


def _json_line(**fields):
    data = {"_type": "tag", "path": "sample.cxx"}
    data.update(fields)
    return json.dumps(data)


def test_json_member_tag():
    record = parse_json_tag(_json_line(
        name="MemberFunc", kind="function", line=22, end=25,
        scope="SomeClass", scopeKind="class", signature="()",
    ))

    assert record.name == "MemberFunc"
    assert record.kind == "function"
    assert record.line == 22
    assert record.end_line == 25
    assert record.scope == "class:SomeClass"
    assert record.signature == "()"


def test_json_free_function_has_no_hint():
    record = parse_json_tag(_json_line(name="main", kind="function", line=76))

    assert record.scope is None
    assert record.end_line is None


def test_json_keeps_operator_names_verbatim():
    record = parse_json_tag(_json_line(name="operator ++", kind="function", line=27))

    assert record.name == "operator ++"


def test_json_pseudo_tags_and_blank_lines_are_skipped():
    assert parse_json_tag("") is None
    assert parse_json_tag("   ") is None
    assert parse_json_tag(json.dumps({"_type": "ptag", "name": "JSON_OUTPUT_VERSION"})) is None


@pytest.mark.parametrize("line", [
    "{not json",
    "[1, 2, 3]",
    json.dumps({"_type": "tag", "kind": "function", "line": 3}),
])
def test_json_malformed_lines_raise(line):
    with pytest.raises(TagStreamMalformed):
        parse_json_tag(line)


def test_json_missing_line_is_left_for_the_builder():
    record = parse_json_tag(_json_line(name="f", kind="function"))

    assert record.line is None


def test_extended_line_with_long_kind_and_scope_field():
    line = 'MemberFunc\tsample.cxx\t22;"\tkind:function\tline:22\tclass:SomeClass\tend:25'

    record = parse_tag_line(line)

    assert record.name == "MemberFunc"
    assert record.kind == "function"
    assert record.line == 22
    assert record.end_line == 25
    assert record.scope == "class:SomeClass"


def test_extended_line_from_exuberant_ctags():
    line = ('SomeFunc\tsample.cxx\t44;"\tf\tline:44\t'
            'class:ns1::NamespacedClass\tsignature:(int a)')

    record = parse_tag_line(line)

    assert record.kind == "f"
    assert record.line == 44
    assert record.scope == "class:ns1::NamespacedClass"
    assert record.signature == "(int a)"
    assert record.end_line is None


def test_extended_line_with_z_scope_field():
    line = 'run\tapp.py\t3;"\tkind:member\tline:3\tscope:class:App'

    assert parse_tag_line(line).scope == "class:App"


def test_extended_line_ignores_file_and_access_fields():
    line = 'helper\tapp.c\t9;"\tkind:function\tline:9\tfile:\taccess:private'

    record = parse_tag_line(line)

    assert record.scope is None
    assert record.line == 9


def test_extended_pseudo_tags_are_skipped():
    assert parse_tag_line("!_TAG_FILE_FORMAT\t2\t/extended format/") is None
    assert parse_tag_line("") is None


@pytest.mark.parametrize("line", [
    "garbage without separators",
    '\tsample.cxx\t3;"\tf',
    'name\t3;"\tf',
])
def test_extended_malformed_lines_raise(line):
    with pytest.raises(TagStreamMalformed):
        parse_tag_line(line)
