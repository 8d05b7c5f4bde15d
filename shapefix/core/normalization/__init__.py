"""Shape normalization for verification payloads.

Normalization rewrites a generic JSON tree so nested, tag-discriminated
``verification`` objects match the shape the strict user model decodes.

Notes:
- The repair policy is data (a RuleTable), never per-record logic.
- Normalizing twice gives the same document as normalizing once.
"""

from .normalizer import RepairAction, normalize, normalize_with_actions
from .rule_pack import RulePack, load_rule_pack, parse_yaml_subset, resolve_rule_table, rule_table_from_mapping
from .rules import (
    CONTAINERS,
    DEFAULT_RULE_TABLE,
    EXTERNAL_REDIRECT_URL,
    SAML_TAG,
    WILDCARD_TAG,
    InsertDefaultRule,
    RemoveFieldRule,
    RepairRule,
    RuleTable,
)

__all__ = [
    "normalize",
    "normalize_with_actions",
    "RepairAction",
    "RepairRule",
    "RemoveFieldRule",
    "InsertDefaultRule",
    "RuleTable",
    "DEFAULT_RULE_TABLE",
    "CONTAINERS",
    "SAML_TAG",
    "EXTERNAL_REDIRECT_URL",
    "WILDCARD_TAG",
    "RulePack",
    "load_rule_pack",
    "parse_yaml_subset",
    "resolve_rule_table",
    "rule_table_from_mapping",
]
