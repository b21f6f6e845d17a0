"""
Emitter: turns a parsed syntax tree into plain data, JSON or YAML.

Every node becomes a mapping whose first key is ``"type"`` (the node's tag),
followed by its fields in declaration order, so the output mirrors the
grammar one-to-one.
"""

import dataclasses
import json
from typing import Any, Sequence

import yaml

from .errors import ParseError, Span


def _field_name(name: str) -> str:
    # async_ -> async
    return name[:-1] if name.endswith("_") else name


def to_data(node: Any, spans: bool = False) -> Any:
    """Recursively convert nodes, types and tuples into dicts and lists."""
    if isinstance(node, Span):
        return {"start": node.start, "end": node.end,
                "line": node.line, "column": node.column}
    if dataclasses.is_dataclass(node) and not isinstance(node, type):
        data = {"type": node.tag}
        for f in dataclasses.fields(node):
            if f.name == "span" and not spans:
                continue
            data[_field_name(f.name)] = to_data(getattr(node, f.name), spans)
        return data
    if isinstance(node, (tuple, list)):
        return [to_data(item, spans) for item in node]
    return node


def error_to_data(error: ParseError) -> dict:
    """Structured form of a parse failure."""
    return {
        "type": error.kind,
        "message": error.message,
        "line": error.line,
        "column": error.column,
        "start": error.span.start,
        "end": error.span.end,
        "expected": list(error.expected) if error.expected else None,
        "source": error.source,
    }


def emit_json(definitions: Sequence, indent=None, spans: bool = False) -> str:
    return json.dumps(to_data(definitions, spans), indent=indent)


def emit_yaml(definitions: Sequence, spans: bool = False) -> str:
    return yaml.safe_dump(to_data(definitions, spans), sort_keys=False,
                          default_flow_style=False)
