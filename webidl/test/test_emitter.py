"""Tests for JSON/YAML serialization and diagnostics rendering."""

import json

import yaml

from webidl.emitter import emit_json, emit_yaml, error_to_data, to_data
from webidl.errors import format_diagnostic
from webidl.parser import parse


class TestToData:
    def test_attribute_interface(self):
        data = to_data(parse("interface A { attribute long x; };").unwrap())
        assert data == [{
            "type": "interface",
            "name": "A",
            "inheritance": None,
            "members": [{
                "type": "attribute",
                "name": "x",
                "idl_type": {"type": "primitive", "name": "long"},
                "readonly": False,
                "special": None,
                "ext_attrs": [],
            }],
            "partial": False,
            "ext_attrs": [],
        }]

    def test_type_key_comes_first(self, feature_defs):
        for node in to_data(feature_defs):
            assert next(iter(node)) == "type"

    def test_nullable_union_shape(self):
        data = to_data(parse("typedef (long or Node)? T;").unwrap())
        assert data[0]["idl_type"] == {
            "type": "nullable",
            "inner": {
                "type": "union",
                "members": [
                    {"type": "primitive", "name": "long"},
                    {"type": "named", "name": "Node"},
                ],
            },
        }

    def test_async_field_name(self):
        data = to_data(parse("interface A { iterable<long>; };").unwrap())
        member = data[0]["members"][0]
        assert member["type"] == "iterable"
        assert member["async"] is False

    def test_spans_optional(self):
        defs = parse("enum E { \"a\" };").unwrap()
        assert "span" not in to_data(defs)[0]
        span = to_data(defs, spans=True)[0]["span"]
        assert span == {"start": 0, "end": 15, "line": 1, "column": 1}

    def test_ext_attr_rhs_list(self):
        data = to_data(parse("[Exposed=(Window,Worker)] interface A {};")
                       .unwrap())
        attr = data[0]["ext_attrs"][0]
        assert attr["rhs"] == {"type": "extended-attribute-rhs",
                               "kind": "identifier-list",
                               "value": ["Window", "Worker"]}
        assert attr["arguments"] is None


class TestSerializers:
    def test_json_round_trips_to_data(self, dom_defs):
        assert json.loads(emit_json(dom_defs)) == to_data(dom_defs)

    def test_json_indent(self):
        text = emit_json(parse("enum E { \"a\" };").unwrap(), indent=2)
        assert text.startswith("[\n  {\n    \"type\": \"enum\"")

    def test_yaml_loads_to_same_data(self, feature_defs):
        assert yaml.safe_load(emit_yaml(feature_defs)) == to_data(feature_defs)

    def test_yaml_keeps_field_order(self):
        text = emit_yaml(parse("enum E { \"a\" };").unwrap())
        assert text.index("type: enum") < text.index("name: E")


class TestErrors:
    def test_error_to_data(self):
        err = parse("interface Foo { long; };", source="foo.webidl").error
        data = error_to_data(err)
        assert data == {
            "type": "SyntaxError",
            "message": "expected one of: identifier, includes but found ';'",
            "line": 1,
            "column": 21,
            "start": 20,
            "end": 21,
            "expected": ["identifier", "includes"],
            "source": "foo.webidl",
        }

    def test_lex_error_to_data(self):
        data = error_to_data(parse('enum E { "a };').error)
        assert data["type"] == "LexError"
        assert data["expected"] is None

    def test_format_diagnostic(self):
        text = "interface A {\n  attribute long;\n};"
        err = parse(text, source="a.webidl").error
        assert format_diagnostic(err, text) == (
            "a.webidl:2:17: expected one of: identifier, async, required "
            "but found ';'\n"
            "      attribute long;\n" +
            " " * 20 + "^")
