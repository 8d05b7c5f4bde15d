from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List

from shapefix.core.errors import AcquisitionError, DocumentSyntaxError, RulePackError
from shapefix.core.normalization import normalize_with_actions, resolve_rule_table
from shapefix.core.pipeline import run
from shapefix.core.source import load_document, serialize_document

log = logging.getLogger("shapefix.cli")

DEFAULT_INPUT = "user.json"

EXIT_OK = 0
EXIT_DECODE_FAILED = 1
EXIT_FATAL = 2


def _configure_logging(level: str) -> None:
    # Logs go to stderr; stdout carries the report.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fatal(message: str) -> int:
    print(f"error: {message}", file=sys.stderr)
    return EXIT_FATAL


def cmd_parse(args: argparse.Namespace) -> int:
    """Normalize the input, decode it strictly, and report the outcome.

    Exit codes:
    - 0 for either outcome (1 for a failed decode with --strict-exit)
    - 2 when the input cannot be read, is not JSON, or --rules is invalid
    """

    try:
        rules = resolve_rule_table(args.rules)
    except RulePackError as e:
        return _fatal(str(e))

    print(f"=== Attempting to parse {args.path} with the User model ===\n")
    try:
        outcome = run(args.path, rules=rules)
    except (AcquisitionError, DocumentSyntaxError) as e:
        log.error("input rejected", extra={"path": args.path, "error_type": type(e).__name__})
        return _fatal(str(e))

    if not outcome.ok and args.strict_exit:
        return EXIT_DECODE_FAILED
    return EXIT_OK


def cmd_normalize(args: argparse.Namespace) -> int:
    """Print the normalized document as JSON."""

    try:
        rules = resolve_rule_table(args.rules)
        doc = load_document(args.path)
    except (AcquisitionError, DocumentSyntaxError, RulePackError) as e:
        return _fatal(str(e))

    doc, actions = normalize_with_actions(doc, rules)
    if args.explain:
        if not actions:
            print("no repairs applied", file=sys.stderr)
        for action in actions:
            print(action.describe(), file=sys.stderr)

    print(serialize_document(doc, pretty=not args.compact))
    return EXIT_OK


def cmd_rules(args: argparse.Namespace) -> int:
    """Show the effective repair rule table."""

    try:
        table = resolve_rule_table(args.rules)
    except RulePackError as e:
        return _fatal(str(e))

    if args.json:
        print(json.dumps(table.describe(), indent=2, sort_keys=True))
        return EXIT_OK

    print("Denylist (top level):")
    for name in table.denylist:
        print(f"  - {name}")
    print("Rules:")
    for (container, tag), rule in table.rules.items():
        desc = rule.describe()
        line = f"  {container} / {tag}: {desc['action']} {desc['field']}"
        if "default" in desc:
            line += f" (default={json.dumps(desc['default'])})"
        print(line)
    return EXIT_OK


def _add_rules_arg(sp: argparse.ArgumentParser) -> None:
    sp.add_argument(
        "--rules",
        default=None,
        help="Rule pack path (.json/.yaml); defaults to the built-in repair rules",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="shapefix",
        description="Repair verification shapes in user JSON and decode it strictly",
    )
    p.add_argument("--log-level", default="warning", help="Logging level (default: warning)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("parse", help="Normalize, strictly decode, and report")
    sp.add_argument("path", nargs="?", default=DEFAULT_INPUT, help="Input JSON path ('-' for stdin)")
    _add_rules_arg(sp)
    sp.add_argument(
        "--strict-exit",
        action="store_true",
        help="Exit with status 1 when the document does not decode",
    )
    sp.set_defaults(func=cmd_parse)

    np = sub.add_parser("normalize", help="Print the normalized JSON document")
    np.add_argument("path", nargs="?", default=DEFAULT_INPUT, help="Input JSON path ('-' for stdin)")
    _add_rules_arg(np)
    np.add_argument("--explain", action="store_true", help="List applied repairs on stderr")
    np.add_argument("--compact", action="store_true", help="Print compact JSON")
    np.set_defaults(func=cmd_normalize)

    rp = sub.add_parser("rules", help="Show the effective repair rules")
    _add_rules_arg(rp)
    rp.add_argument("--json", action="store_true", help="Print JSON")
    rp.set_defaults(func=cmd_rules)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
