"""
CLI entry point for webidl-parse.

Usage:
    python3 -m webidl dom.webidl
    python3 -m webidl dom.webidl --format yaml --indent 2
"""

import argparse
import json
import logging
import sys

from .emitter import emit_json, emit_yaml, error_to_data
from .errors import format_diagnostic
from .parser import parse

log = logging.getLogger("webidl")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webidl-parse",
        description="Parse a WebIDL file and print its syntax tree")
    parser.add_argument("idl", help="Input .webidl file")
    parser.add_argument("--format", choices=("json", "yaml"), default="json",
                        help="Output format (default: json)")
    parser.add_argument("--indent", type=int, default=None,
                        help="Indent JSON output by N spaces")
    parser.add_argument("--spans", action="store_true",
                        help="Include source spans in the output")
    parser.add_argument("--json-errors", action="store_true",
                        help="Print parse errors as JSON on stdout")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    try:
        with open(args.idl, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        log.error("cannot read %s: %s", args.idl, e)
        return 2

    result = parse(text, source=args.idl)
    if not result.ok:
        if args.json_errors:
            print(json.dumps(error_to_data(result.error)))
        else:
            print(format_diagnostic(result.error, text), file=sys.stderr)
        return 1

    if args.format == "yaml":
        print(emit_yaml(result.definitions, spans=args.spans), end="")
    else:
        print(emit_json(result.definitions, indent=args.indent,
                        spans=args.spans))
    return 0


if __name__ == "__main__":
    sys.exit(main())
