"""Tests for the webidl-parse command-line entry point."""

import json

import pytest
import yaml

from webidl.__main__ import main
from webidl.emitter import emit_json
from webidl.parser import parse

from .conftest import DOM_IDL


@pytest.fixture
def idl_file(tmp_path):
    path = tmp_path / "dom.webidl"
    path.write_text(DOM_IDL, encoding="utf-8")
    return path


class TestOutput:
    def test_prints_json_tree(self, idl_file, capsys):
        assert main([str(idl_file)]) == 0
        out = capsys.readouterr().out
        assert out == emit_json(parse(DOM_IDL).unwrap()) + "\n"

    def test_indent_and_spans(self, idl_file, capsys):
        assert main([str(idl_file), "--indent", "2", "--spans"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data[0]["span"]["line"] == 2
        assert data[2] == {"type": "includes", "target": "Node",
                           "includes": "ParentNode", "ext_attrs": [],
                           "span": data[2]["span"]}

    def test_yaml_format(self, idl_file, capsys):
        assert main([str(idl_file), "--format", "yaml"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert [d["type"] for d in data] == ["interface", "interface mixin",
                                            "includes", "interface"]

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.webidl"
        path.write_text("", encoding="utf-8")
        assert main([str(path)]) == 0
        assert capsys.readouterr().out == "[]\n"


class TestFailures:
    def test_syntax_error_diagnostic(self, tmp_path, capsys):
        path = tmp_path / "bad.webidl"
        path.write_text("interface Foo { long; };\n", encoding="utf-8")
        assert main([str(path)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        first, source_line, caret = captured.err.splitlines()
        assert first.startswith(f"{path}:1:21: expected one of:")
        assert source_line == "    interface Foo { long; };"
        assert caret == " " * 24 + "^"

    def test_json_errors(self, tmp_path, capsys):
        path = tmp_path / "bad.webidl"
        path.write_text('enum E { "open };', encoding="utf-8")
        assert main([str(path), "--json-errors"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["type"] == "LexError"
        assert data["column"] == 10
        assert data["source"] == str(path)

    def test_missing_file(self, tmp_path, caplog):
        assert main([str(tmp_path / "nope.webidl")]) == 2
        assert "cannot read" in caplog.text
