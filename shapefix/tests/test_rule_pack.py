from __future__ import annotations

import json
from pathlib import Path

import pytest

from shapefix.core.errors import RulePackError
from shapefix.core.normalization import (
    DEFAULT_RULE_TABLE,
    InsertDefaultRule,
    RemoveFieldRule,
    load_rule_pack,
    normalize,
    parse_yaml_subset,
    resolve_rule_table,
    rule_table_from_mapping,
)

ROOT = Path(__file__).resolve().parents[2]


def test_shipped_default_pack_matches_builtin_table() -> None:
    pack = load_rule_pack(str(ROOT / "rule_packs" / "default.yaml"))

    assert pack.pack_id == "default"
    assert pack.table.describe() == DEFAULT_RULE_TABLE.describe()


def test_shipped_default_pack_inserts_for_every_account_tag() -> None:
    table = load_rule_pack(str(ROOT / "rule_packs" / "default.yaml")).table
    doc = {"enterprise_accounts": [{"verification": {"object": "verification_ticket"}}]}

    normalize(doc, table)

    assert doc["enterprise_accounts"][0]["verification"]["external_verification_redirect_url"] is None


def test_resolve_rule_table_defaults_to_builtin() -> None:
    assert resolve_rule_table(None) is DEFAULT_RULE_TABLE


def test_json_pack_supports_arbitrary_defaults(tmp_path: Path) -> None:
    p = tmp_path / "custom.json"
    p.write_text(
        json.dumps(
            {
                "denylist": ["legacy_flag", "legacy_flag"],
                "rules": {
                    "saml_accounts": {
                        "verification_saml": {
                            "action": "insert_default",
                            "field": "attempts",
                            "default": 0,
                        }
                    }
                },
            }
        ),
        encoding="utf-8",
    )

    pack = load_rule_pack(str(p))

    assert pack.table.denylist == ("legacy_flag",)
    rule = pack.table.lookup("saml_accounts", "verification_saml")
    assert isinstance(rule, InsertDefaultRule)
    assert rule.default == 0


def test_pack_without_suffix_is_sniffed(tmp_path: Path) -> None:
    p = tmp_path / "rules"
    p.write_text('{"rules": {"email_addresses": {"*": {"action": "remove", "field": "x"}}}}', encoding="utf-8")

    table = load_rule_pack(str(p)).table

    assert isinstance(table.lookup("email_addresses", "anything"), RemoveFieldRule)
    assert table.denylist == ()


def test_yaml_subset_parses_nested_mappings_and_lists() -> None:
    text = """
# comment
denylist:
  - a
  - "b"
rules:
  c:
    t:
      action: remove   # trailing comment
      field: 'f'
empty:
none: null
"""
    data = parse_yaml_subset(text)

    assert data == {
        "denylist": ["a", "b"],
        "rules": {"c": {"t": {"action": "remove", "field": "f"}}},
        "empty": None,
        "none": None,
    }


def test_yaml_subset_accepts_list_at_key_indent() -> None:
    data = parse_yaml_subset("denylist:\n- a\n- b\nrules: []\n")

    assert data == {"denylist": ["a", "b"], "rules": []}


@pytest.mark.parametrize(
    "text",
    [
        "- a\n- b\n",
        "key value\n",
        "a:\n  b: 1\n    c: 2\n",
    ],
)
def test_yaml_subset_rejects_unsupported_shapes(text: str) -> None:
    with pytest.raises(RulePackError):
        parse_yaml_subset(text)


@pytest.mark.parametrize(
    "data, message",
    [
        ({"denylist": "nope"}, "denylist"),
        ({"denylist": [1]}, "denylist"),
        ({"rules": ["x"]}, "rules must be a mapping"),
        ({"rules": {"c": "x"}}, "rules.c"),
        ({"rules": {"c": {"t": "x"}}}, "rules.c.t must be a mapping"),
        ({"rules": {"c": {"t": {"action": "remove"}}}}, "rules.c.t.field"),
        ({"rules": {"c": {"t": {"action": "rename", "field": "f"}}}}, "rules.c.t.action"),
        ({"rules": {"c": {"t": {"action": "insert_null", "field": "f"}}}}, "rules.c.t.action"),
    ],
)
def test_invalid_packs_are_rejected(data, message: str) -> None:
    with pytest.raises(RulePackError) as exc:
        rule_table_from_mapping(data)

    assert message in str(exc.value)


def test_missing_or_malformed_pack_file(tmp_path: Path) -> None:
    with pytest.raises(RulePackError):
        load_rule_pack(str(tmp_path / "absent.yaml"))

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(RulePackError):
        load_rule_pack(str(bad))


def test_yaml_pack_rejects_explicit_default(tmp_path: Path) -> None:
    p = tmp_path / "custom.yaml"
    p.write_text(
        "rules:\n"
        "  saml_accounts:\n"
        "    verification_saml:\n"
        "      action: insert_default\n"
        "      field: attempts\n"
        "      default: 5\n",
        encoding="utf-8",
    )

    with pytest.raises(RulePackError) as exc:
        load_rule_pack(str(p))

    assert "rules.saml_accounts.verification_saml.default" in str(exc.value)
