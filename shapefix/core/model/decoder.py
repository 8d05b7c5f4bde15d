from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple

from pydantic import ValidationError

from shapefix.core.errors import DecodeError

from .user import User


@dataclass(frozen=True)
class DecodeIssue:
    """One problem reported by the strict decoder."""

    kind: str
    path: str
    message: str

    def describe(self) -> str:
        return f"{self.kind} at {self.path}: {self.message}"


@dataclass(frozen=True)
class DecodeErrorDetail:
    """Structured decode error: what went wrong and where."""

    title: str
    issues: Tuple[DecodeIssue, ...]

    @property
    def count(self) -> int:
        return len(self.issues)


def format_location(loc: Iterable[Any]) -> str:
    """Render a pydantic ``loc`` tuple as ``a.b[0].c``; empty means the root."""

    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        elif out:
            out += f".{part}"
        else:
            out = str(part)
    return out or "<root>"


def detail_from_validation_error(exc: ValidationError) -> DecodeErrorDetail:
    issues: List[DecodeIssue] = [
        DecodeIssue(
            kind=str(err.get("type", "unknown")),
            path=format_location(err.get("loc", ())),
            message=str(err.get("msg", "")),
        )
        for err in exc.errors()
    ]
    return DecodeErrorDetail(title=exc.title, issues=tuple(issues))


def decode_user(text: str) -> User:
    """Strictly decode serialized JSON into a User.

    Raises DecodeError carrying a DecodeErrorDetail on any schema mismatch.
    """

    try:
        return User.model_validate_json(text)
    except ValidationError as e:
        detail = detail_from_validation_error(e)
        raise DecodeError(f"{detail.count} validation error(s) for {detail.title}", detail=detail) from e
