from __future__ import annotations

from typing import BinaryIO, Optional, TextIO

from shapefix.core.normalization import DEFAULT_RULE_TABLE, RuleTable, normalize
from shapefix.core.report import DecodeOutcome, decode_and_report
from shapefix.core.source import parse_document, read_source


def process_bytes(raw: bytes, *, rules: RuleTable = DEFAULT_RULE_TABLE, out: Optional[TextIO] = None) -> DecodeOutcome:
    """parse -> normalize -> decode -> report on already-acquired bytes.

    Raises DocumentSyntaxError for malformed input. Each call parses its own
    document, so concurrent callers never share state.
    """

    doc = parse_document(raw)
    normalize(doc, rules)
    return decode_and_report(doc, out=out)


def run(
    path: str,
    *,
    rules: RuleTable = DEFAULT_RULE_TABLE,
    out: Optional[TextIO] = None,
    stdin: Optional[BinaryIO] = None,
) -> DecodeOutcome:
    """Full pipeline from a path ("-" for stdin).

    AcquisitionError and DocumentSyntaxError propagate; decode failures come
    back as a Failed outcome.
    """

    return process_bytes(read_source(path, stdin=stdin), rules=rules, out=out)
