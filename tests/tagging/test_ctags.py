"""Tests for CtagsTool, with the ctags process mocked out."""
import json
import subprocess
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from code_scope_mcp.scopes.errors import TaggingToolUnavailable
from code_scope_mcp.tagging.ctags import EXUBERANT, UNIVERSAL, CtagsTool

UNIVERSAL_VERSION = "Universal Ctags 6.0.0, Copyright (C) 2015-2022 Universal Ctags Team\n"
UNIVERSAL_FEATURES = "#NAME DESCRIPTION\nwildcards  can use glob matching\njson  supports json format output\n"
EXUBERANT_VERSION = "Exuberant Ctags 5.8, Copyright (C) 1996-2009 Darren Hiebert\n"


def _completed(stdout="", returncode=0, stderr=""):
    return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)


def _json_tags(*tags):
    return "\n".join(json.dumps(dict(_type="tag", path="a.cpp", **tag)) for tag in tags) + "\n"


def _universal_run(tag_output):
    def run(cmd, **kwargs):
        if "--version" in cmd:
            return _completed(UNIVERSAL_VERSION)
        if "--list-features" in cmd:
            return _completed(UNIVERSAL_FEATURES)
        return _completed(tag_output)
    return run


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_start_detects_universal_ctags_with_json(mock_run):
    mock_run.side_effect = _universal_run("")

    tool = CtagsTool()
    tool.start()

    assert tool.flavor == UNIVERSAL
    assert tool.json_output is True


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_start_detects_exuberant_ctags(mock_run):
    mock_run.return_value = _completed(EXUBERANT_VERSION)

    tool = CtagsTool()
    tool.start()

    assert tool.flavor == EXUBERANT
    assert tool.json_output is False
    assert mock_run.call_count == 1


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_start_rejects_unknown_ctags(mock_run):
    mock_run.return_value = _completed("ctags (GNU Emacs 29.1)\n")

    with pytest.raises(TaggingToolUnavailable):
        CtagsTool().start()


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_missing_binary_is_unavailable(mock_run):
    mock_run.side_effect = FileNotFoundError("ctags")

    with pytest.raises(TaggingToolUnavailable):
        CtagsTool(binary="no-such-ctags").start()


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_json_command_line(mock_run):
    mock_run.side_effect = _universal_run("")
    tool = CtagsTool(binary="/opt/ctags", timeout=5)
    tool.start()

    cmd = tool.build_command("-weird.cpp", "C++")

    assert cmd[0] == "/opt/ctags"
    assert "--output-format=json" in cmd
    assert "--fields=+nesKS" in cmd
    assert "--language-force=C++" in cmd
    assert cmd[-2:] == ["--", "-weird.cpp"]


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_exuberant_command_line(mock_run):
    mock_run.return_value = _completed(EXUBERANT_VERSION)
    tool = CtagsTool()
    tool.start()

    cmd = tool.build_command("a.c")

    assert "--excmd=number" in cmd
    assert "--fields=+nsKS" in cmd
    assert not any(arg.startswith("--language-force") for arg in cmd)


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_tag_file_parses_json_and_sorts_by_line(mock_run):
    mock_run.side_effect = _universal_run(_json_tags(
        dict(name="bar", kind="function", line=59, end=73),
        dict(name="foo", kind="function", line=51, end=54),
        dict(name="MemberFunc", kind="function", line=22, scope="SomeClass", scopeKind="class"),
    ))

    result = CtagsTool(timeout=3).tag_file("a.cpp", "C++")

    assert [r.name for r in result.records] == ["MemberFunc", "foo", "bar"]
    assert result.records[0].scope == "class:SomeClass"
    assert result.warnings == []
    assert mock_run.call_args.kwargs["timeout"] == 3


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_tag_file_reports_malformed_lines(mock_run):
    output = _json_tags(dict(name="foo", kind="function", line=5)) + "{broken\n"
    mock_run.side_effect = _universal_run(output)

    result = CtagsTool().tag_file("a.cpp")

    assert [r.name for r in result.records] == ["foo"]
    assert len(result.warnings) == 1
    assert "a.cpp" in result.warnings[0]


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_tag_file_with_exuberant_output(mock_run):
    def run(cmd, **kwargs):
        if "--version" in cmd:
            return _completed(EXUBERANT_VERSION)
        return _completed(
            "!_TAG_FILE_FORMAT\t2\t/extended format/\n"
            'main\ta.c\t76;"\tf\tline:76\n'
        )
    mock_run.side_effect = run

    result = CtagsTool().tag_file("a.c")

    assert len(result.records) == 1
    assert result.records[0].kind == "f"
    assert result.records[0].line == 76


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_tag_file_nonzero_exit_is_unavailable(mock_run):
    def run(cmd, **kwargs):
        if "--version" in cmd:
            return _completed(EXUBERANT_VERSION)
        return _completed(returncode=2, stderr="ctags: cannot open a.c\n")
    mock_run.side_effect = run

    with pytest.raises(TaggingToolUnavailable) as excinfo:
        CtagsTool().tag_file("a.c")
    assert "exit code 2" in str(excinfo.value)


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_tag_file_timeout_is_unavailable(mock_run):
    def run(cmd, **kwargs):
        if "--version" in cmd:
            return _completed(EXUBERANT_VERSION)
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])
    mock_run.side_effect = run

    with pytest.raises(TaggingToolUnavailable) as excinfo:
        CtagsTool(timeout=0.5).tag_file("a.c")
    assert "timed out" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, subprocess.TimeoutExpired)


@patch("code_scope_mcp.tagging.ctags.subprocess.run")
def test_closed_tool_refuses_work(mock_run):
    mock_run.return_value = _completed(EXUBERANT_VERSION)

    with CtagsTool() as tool:
        assert tool.flavor == EXUBERANT

    with pytest.raises(TaggingToolUnavailable):
        tool.tag_file("a.c")


@patch("code_scope_mcp.tagging.ctags.shutil.which")
def test_is_available_uses_path_lookup(mock_which):
    mock_which.return_value = None
    assert CtagsTool(binary="ctags").is_available() is False

    mock_which.return_value = "/usr/bin/ctags"
    assert CtagsTool(binary="ctags").is_available() is True
