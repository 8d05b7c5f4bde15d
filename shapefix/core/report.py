from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, List, Optional, TextIO, Tuple, Union

from shapefix.core.errors import DecodeError
from shapefix.core.model import DecodeErrorDetail, User, decode_user
from shapefix.core.source import serialize_document

log = logging.getLogger("shapefix.report")

# Printed for optional values the decoded user does not carry.
ABSENT = "<absent>"


@dataclass(frozen=True)
class Decoded:
    """Strict decode succeeded."""

    user: User

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    """Strict decode failed.

    observed_fields are the top-level keys of the normalized document, in
    document order.
    """

    error: DecodeErrorDetail
    observed_fields: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return False


DecodeOutcome = Union[Decoded, Failed]


def _fmt(value: Any) -> str:
    return ABSENT if value is None else str(value)


def summarize_user(user: User) -> List[Tuple[str, str]]:
    """Labeled summary lines for a decoded user, in display order."""

    emails = user.email_addresses or []
    primary_email = emails[0].email_address if emails else None

    return [
        ("ID", _fmt(user.id)),
        ("First Name", _fmt(user.first_name)),
        ("Last Name", _fmt(user.last_name)),
        ("Email", _fmt(primary_email)),
        ("Email Addresses Count", str(len(emails))),
        ("SAML Accounts Count", str(len(user.saml_accounts or []))),
        ("Enterprise Accounts Count", str(len(user.enterprise_accounts or []))),
        ("Created At", _fmt(user.created_at)),
        ("Last Sign In", _fmt(user.last_sign_in_at)),
    ]


def observed_fields(text: str) -> Tuple[str, ...]:
    """Top-level keys of serialized JSON text; empty for non-objects."""

    value = json.loads(text)
    if not isinstance(value, dict):
        return ()
    return tuple(value.keys())


def decode_and_report(doc: Any, out: Optional[TextIO] = None) -> DecodeOutcome:
    """Serialize, strictly decode, and write a human-readable result block.

    A decode failure is reported and returned as Failed; it never raises.
    """

    out = out if out is not None else sys.stdout
    text = serialize_document(doc)

    try:
        user = decode_user(text)
    except DecodeError as e:
        detail: DecodeErrorDetail = e.detail
        fields = observed_fields(text)
        log.warning(
            "decode failed",
            extra={"issue_count": detail.count, "observed_field_count": len(fields)},
        )

        print(f"Failed to parse user after cleanup: {e}", file=out)
        for issue in detail.issues:
            print(f"  {issue.describe()}", file=out)
        print("", file=out)
        print("Fields present in cleaned JSON:", file=out)
        for key in fields:
            print(f"  - {key}", file=out)
        return Failed(error=detail, observed_fields=fields)

    log.info("decode succeeded", extra={"user_id": user.id})
    print("Successfully parsed user after cleanup:", file=out)
    for label, value in summarize_user(user):
        print(f"  {label}: {value}", file=out)
    return Decoded(user=user)
