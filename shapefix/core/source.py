from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, BinaryIO, Optional

from .errors import AcquisitionError, DocumentSyntaxError

STDIN_MARKER = "-"


def read_source(path: str, *, stdin: Optional[BinaryIO] = None) -> bytes:
    """Read the raw document bytes from a file path, or stdin for "-".

    Raises AcquisitionError for anything the OS refuses (missing file,
    directory, permissions).
    """

    if path == STDIN_MARKER:
        stream = stdin if stdin is not None else sys.stdin.buffer
        try:
            return stream.read()
        except OSError as e:
            raise AcquisitionError(f"could not read stdin: {e}") from e

    p = Path(path)
    try:
        return p.read_bytes()
    except FileNotFoundError as e:
        raise AcquisitionError(f"input not found: {p}") from e
    except IsADirectoryError as e:
        raise AcquisitionError(f"input is a directory: {p}") from e
    except OSError as e:
        raise AcquisitionError(f"could not read {p}: {e}") from e


def parse_document(raw: bytes) -> Any:
    """Parse raw bytes into a generic JSON tree.

    Tolerant of a leading UTF-8 BOM and surrounding whitespace. Objects come
    back as insertion-ordered dicts, so key order survives a round trip.
    """

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentSyntaxError(f"input is not valid UTF-8: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentSyntaxError(
            f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            line=e.lineno,
            column=e.colno,
        ) from e


def serialize_document(doc: Any, *, pretty: bool = True) -> str:
    """Serialize a JSON tree losslessly (non-ASCII text is kept as-is)."""

    if pretty:
        return json.dumps(doc, indent=2, ensure_ascii=False)
    return json.dumps(doc, ensure_ascii=False, separators=(",", ":"))


def load_document(path: str, *, stdin: Optional[BinaryIO] = None) -> Any:
    """Acquire and parse in one step."""
    return parse_document(read_source(path, stdin=stdin))
