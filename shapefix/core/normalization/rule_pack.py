from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from shapefix.core.errors import RulePackError

from .rules import DEFAULT_RULE_TABLE, InsertDefaultRule, RemoveFieldRule, RepairRule, RuleKey, RuleTable


@dataclass(frozen=True, slots=True)
class RulePack:
    """Repair policy loaded from a file.

    Supported schema (YAML subset or JSON)

    denylist:
      - create_organizations_limit
    rules:
      <container>:
        <tag or "*">:
          action: remove | insert_default
          field: <field name>
          default: <any JSON value; JSON packs only, null when omitted>

    A "default" key in a YAML-subset pack is rejected.

    Treat rule pack files as trusted configuration.
    """

    pack_id: str
    table: RuleTable


def _split_lines(text: str) -> List[Tuple[int, str]]:
    out: List[Tuple[int, str]] = []
    for raw in text.splitlines():
        # Comments start at '#'; the subset has no quoted '#'.
        line = raw.split("#", 1)[0].rstrip()
        if not line.strip():
            continue
        if "\t" in line[: len(line) - len(line.lstrip())]:
            raise RulePackError("tabs are not allowed for indentation")
        out.append((len(line) - len(line.lstrip(" ")), line.strip()))
    return out


def _scalar(text: str) -> Any:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"'}:
        return text[1:-1]
    if text in {"null", "~"}:
        return None
    if text == "[]":
        return []
    return text


def _parse_block(lines: List[Tuple[int, str]], pos: int, indent: int) -> Tuple[Any, int]:
    if lines[pos][1].startswith("-"):
        items: List[Any] = []
        while pos < len(lines) and lines[pos][0] == indent and lines[pos][1].startswith("-"):
            items.append(_scalar(lines[pos][1][1:].strip()))
            pos += 1
        return items, pos

    mapping: Dict[str, Any] = {}
    while pos < len(lines):
        cur_indent, stripped = lines[pos]
        if cur_indent < indent:
            break
        if cur_indent > indent:
            raise RulePackError(f"unexpected indentation: {stripped}")
        if stripped.startswith("-"):
            raise RulePackError(f"list item where a key was expected: {stripped}")
        if ":" not in stripped:
            raise RulePackError(f"invalid line (expected key: value): {stripped}")

        key, rest = stripped.split(":", 1)
        key = str(_scalar(key.strip()))
        rest = rest.strip()
        pos += 1

        if rest:
            mapping[key] = _scalar(rest)
        elif pos < len(lines) and lines[pos][0] > indent:
            mapping[key], pos = _parse_block(lines, pos, lines[pos][0])
        elif pos < len(lines) and lines[pos][0] == indent and lines[pos][1].startswith("-"):
            # "key:" followed by a list at the same indent
            mapping[key], pos = _parse_block(lines, pos, indent)
        else:
            mapping[key] = None
    return mapping, pos


def parse_yaml_subset(text: str) -> Dict[str, Any]:
    """Parse the small YAML subset used by rule packs.

    Supports nested mappings by indentation, lists of scalars, quoted or
    bare string scalars and null. This is not a general YAML parser.
    """

    lines = _split_lines(text)
    if not lines:
        return {}
    if lines[0][1].startswith("-"):
        raise RulePackError("rule pack must be a mapping, not a list")
    data, pos = _parse_block(lines, 0, lines[0][0])
    if pos != len(lines):
        raise RulePackError(f"unexpected indentation: {lines[pos][1]}")
    return data


def _parse_json(text: str) -> Dict[str, Any]:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise RulePackError(f"rule pack is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise RulePackError("rule pack JSON must be an object")
    return obj


def _build_rule(container: str, tag: str, entry: Any, *, allow_default: bool) -> RepairRule:
    where = f"rules.{container}.{tag}"
    if not isinstance(entry, Mapping):
        raise RulePackError(f"{where} must be a mapping")

    target = entry.get("field")
    if not isinstance(target, str) or not target:
        raise RulePackError(f"{where}.field must be a non-empty string")

    action = str(entry.get("action", "")).strip().lower()
    if action == "remove":
        return RemoveFieldRule(field=target)
    if action == "insert_default":
        if "default" in entry and not allow_default:
            raise RulePackError(f"{where}.default is only supported in JSON rule packs")
        return InsertDefaultRule(field=target, default=entry.get("default"))
    raise RulePackError(f"invalid {where}.action: {action!r}")


def rule_table_from_mapping(data: Mapping[str, Any], *, allow_default: bool = True) -> RuleTable:
    """Validate a decoded rule pack and build a RuleTable.

    YAML-subset packs pass allow_default=False: their scalars are always
    strings, so an explicit default could not carry its JSON type.
    """

    denylist = data.get("denylist", [])
    if denylist is None:
        denylist = []
    if not isinstance(denylist, list) or not all(isinstance(x, str) for x in denylist):
        raise RulePackError("denylist must be a list of strings")

    raw_rules = data.get("rules", {})
    if raw_rules is None:
        raw_rules = {}
    if not isinstance(raw_rules, Mapping):
        raise RulePackError("rules must be a mapping of container -> tag -> rule")

    rules: Dict[RuleKey, RepairRule] = {}
    for container, by_tag in raw_rules.items():
        if not isinstance(by_tag, Mapping):
            raise RulePackError(f"rules.{container} must be a mapping of tag -> rule")
        for tag, entry in by_tag.items():
            if not isinstance(tag, str) or not tag:
                raise RulePackError(f"rules.{container} has an empty tag")
            rules[(str(container), tag)] = _build_rule(str(container), tag, entry, allow_default=allow_default)

    return RuleTable.build(denylist=denylist, rules=rules)


def load_rule_pack(path: str) -> RulePack:
    """Load a rule pack from YAML-subset or JSON, chosen by suffix."""

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise RulePackError(f"could not read rule pack {p}: {e}") from e

    suffix = p.suffix.lower()
    if suffix == ".json":
        is_json = True
    elif suffix in {".yaml", ".yml"}:
        is_json = False
    else:
        is_json = text.lstrip().startswith("{")

    data = _parse_json(text) if is_json else parse_yaml_subset(text)
    return RulePack(pack_id=p.stem, table=rule_table_from_mapping(data, allow_default=is_json))


def resolve_rule_table(path: Optional[str]) -> RuleTable:
    """Return the table from ``path``, or the built-in default when None."""
    if path is None:
        return DEFAULT_RULE_TABLE
    return load_rule_pack(path).table
