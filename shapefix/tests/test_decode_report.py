import io
import json
from pathlib import Path

import pytest

from shapefix.core.errors import DecodeError
from shapefix.core.model import (
    EmailSamlVerification,
    SamlAccountVerification,
    TicketVerification,
    decode_user,
    format_location,
)
from shapefix.core.normalization import normalize
from shapefix.core.report import ABSENT, Decoded, Failed, decode_and_report, summarize_user
from shapefix.core.source import serialize_document

FIXTURE = Path(__file__).parent / "fixtures" / "user.json"


def _fixture() -> dict:
    return json.loads(FIXTURE.read_text(encoding="utf-8"))


def test_raw_fixture_fails_strict_decode_with_located_issues() -> None:
    with pytest.raises(DecodeError) as exc:
        decode_user(serialize_document(_fixture()))

    detail = exc.value.detail
    kinds = {(i.kind, i.path) for i in detail.issues}
    assert ("extra_forbidden", "create_organizations_limit") in kinds
    assert any(
        kind == "extra_forbidden" and path.startswith("email_addresses[0].verification")
        for kind, path in kinds
    )
    assert any(kind == "missing" and path.startswith("saml_accounts[0].verification") for kind, path in kinds)
    assert any(kind == "missing" and path.startswith("enterprise_accounts[0].verification") for kind, path in kinds)
    assert detail.title == "User"


def test_normalized_fixture_decodes() -> None:
    user = decode_user(serialize_document(normalize(_fixture())))

    assert user.id == "user_2hXaYq3mBQk"
    assert isinstance(user.email_addresses[0].verification, EmailSamlVerification)
    saml_verification = user.saml_accounts[0].verification
    assert isinstance(saml_verification, SamlAccountVerification)
    assert saml_verification.external_verification_redirect_url is None


def test_repaired_ticket_account_verification_decodes() -> None:
    doc = _fixture()
    doc["enterprise_accounts"][0]["verification"] = {
        "object": "verification_ticket",
        "status": "verified",
        "strategy": "ticket",
    }

    user = decode_user(serialize_document(normalize(doc)))

    verification = user.enterprise_accounts[0].verification
    assert isinstance(verification, TicketVerification)
    assert verification.external_verification_redirect_url is None


def test_success_block_lists_summary_fields_in_order() -> None:
    out = io.StringIO()

    outcome = decode_and_report(normalize(_fixture()), out=out)

    assert isinstance(outcome, Decoded)
    assert outcome.ok is True
    assert out.getvalue().splitlines() == [
        "Successfully parsed user after cleanup:",
        "  ID: user_2hXaYq3mBQk",
        "  First Name: Ada",
        "  Last Name: Lovelace",
        "  Email: ada@example.com",
        "  Email Addresses Count: 1",
        "  SAML Accounts Count: 1",
        "  Enterprise Accounts Count: 1",
        "  Created At: 1717000000000",
        "  Last Sign In: 1717100000000",
    ]


def test_absent_values_use_marker_not_empty_string() -> None:
    out = io.StringIO()

    outcome = decode_and_report({"first_name": ""}, out=out)

    assert isinstance(outcome, Decoded)
    summary = dict(summarize_user(outcome.user))
    assert summary["ID"] == ABSENT
    assert summary["First Name"] == ""
    assert summary["Email"] == ABSENT
    assert summary["Email Addresses Count"] == "0"
    assert summary["Last Sign In"] == ABSENT
    assert f"  ID: {ABSENT}" in out.getvalue().splitlines()


def test_failure_block_reports_issues_and_fields_present() -> None:
    doc = {"id": "user_1", "unexpected": True, "created_at": "yesterday"}
    out = io.StringIO()

    outcome = decode_and_report(doc, out=out)

    assert isinstance(outcome, Failed)
    assert outcome.ok is False
    assert outcome.observed_fields == ("id", "unexpected", "created_at")
    lines = out.getvalue().splitlines()
    assert lines[0] == "Failed to parse user after cleanup: 2 validation error(s) for User"
    assert "  extra_forbidden at unexpected: Extra inputs are not permitted" in lines
    assert any(line.startswith("  int_type at created_at:") for line in lines)
    idx = lines.index("Fields present in cleaned JSON:")
    assert lines[idx + 1 :] == ["  - id", "  - unexpected", "  - created_at"]


def test_failure_fields_equal_top_level_keys_of_normalized_document() -> None:
    doc = _fixture()
    doc["saml_accounts"][0]["verification"]["object"] = "verification_mystery"
    normalize(doc)

    outcome = decode_and_report(doc, out=io.StringIO())

    assert isinstance(outcome, Failed)
    assert list(outcome.observed_fields) == list(doc.keys())
    assert "create_organizations_limit" not in outcome.observed_fields
    assert any(i.kind == "union_tag_invalid" for i in outcome.error.issues)


def test_non_object_document_is_a_soft_failure() -> None:
    out = io.StringIO()

    outcome = decode_and_report([1, 2, 3], out=out)

    assert isinstance(outcome, Failed)
    assert outcome.observed_fields == ()
    assert outcome.error.issues[0].path == "<root>"
    assert out.getvalue().rstrip().endswith("Fields present in cleaned JSON:")


def test_format_location() -> None:
    assert format_location(()) == "<root>"
    assert format_location(("email_addresses", 0, "verification", "verification_saml", "status")) == (
        "email_addresses[0].verification.verification_saml.status"
    )
