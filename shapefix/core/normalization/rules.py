from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Tuple

EMAIL_ADDRESSES = "email_addresses"
SAML_ACCOUNTS = "saml_accounts"
ENTERPRISE_ACCOUNTS = "enterprise_accounts"

CONTAINERS: Tuple[str, ...] = (EMAIL_ADDRESSES, SAML_ACCOUNTS, ENTERPRISE_ACCOUNTS)

SAML_TAG = "verification_saml"
EXTERNAL_REDIRECT_URL = "external_verification_redirect_url"

# Matches any string tag; an exact tag rule for the same container wins.
WILDCARD_TAG = "*"

RuleKey = Tuple[str, str]


class RepairRule:
    """A single field-level edit applied to a ``verification`` object."""

    rule_id: str = "repair-rule"
    field: str

    def apply(self, verification: MutableMapping[str, Any]) -> bool:
        """Apply the edit in place. Return True only if the object changed."""
        raise NotImplementedError

    def describe(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class RemoveFieldRule(RepairRule):
    field: str
    rule_id: str = "remove-field"

    def apply(self, verification: MutableMapping[str, Any]) -> bool:
        if self.field not in verification:
            return False
        del verification[self.field]
        return True

    def describe(self) -> Dict[str, Any]:
        return {"action": "remove", "field": self.field}


@dataclass(frozen=True)
class InsertDefaultRule(RepairRule):
    field: str
    default: Any = None
    rule_id: str = "insert-default"

    def apply(self, verification: MutableMapping[str, Any]) -> bool:
        # Present with any value (null included) counts as present.
        if self.field in verification:
            return False
        verification[self.field] = copy.deepcopy(self.default)
        return True

    def describe(self) -> Dict[str, Any]:
        return {"action": "insert_default", "field": self.field, "default": self.default}


@dataclass(frozen=True)
class RuleTable:
    """Repair policy: a top-level denylist plus (container, tag) -> rule.

    Lookups prefer an exact tag match and fall back to the container's
    wildcard rule, if any.
    """

    denylist: Tuple[str, ...] = ()
    rules: Mapping[RuleKey, RepairRule] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        denylist: Iterable[str] = (),
        rules: Optional[Mapping[RuleKey, RepairRule]] = None,
    ) -> "RuleTable":
        seen: List[str] = []
        for name in denylist:
            if name not in seen:
                seen.append(str(name))
        return cls(denylist=tuple(seen), rules=MappingProxyType(dict(rules or {})))

    def containers(self) -> Tuple[str, ...]:
        """Container names in first-seen rule order."""
        out: List[str] = []
        for container, _tag in self.rules:
            if container not in out:
                out.append(container)
        return tuple(out)

    def lookup(self, container: str, tag: str) -> Optional[RepairRule]:
        rule = self.rules.get((container, tag))
        if rule is not None:
            return rule
        return self.rules.get((container, WILDCARD_TAG))

    def describe(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"denylist": list(self.denylist), "rules": {}}
        for (container, tag), rule in self.rules.items():
            out["rules"].setdefault(container, {})[tag] = rule.describe()
        return out


DEFAULT_RULE_TABLE = RuleTable.build(
    denylist=["create_organizations_limit"],
    rules={
        # Email verifications decode into the narrower email shape, which has
        # no redirect url even for the SAML strategy.
        (EMAIL_ADDRESSES, SAML_TAG): RemoveFieldRule(field=EXTERNAL_REDIRECT_URL),
        # Account verifications of every tag carry the field, null allowed.
        (SAML_ACCOUNTS, WILDCARD_TAG): InsertDefaultRule(field=EXTERNAL_REDIRECT_URL, default=None),
        (ENTERPRISE_ACCOUNTS, WILDCARD_TAG): InsertDefaultRule(field=EXTERNAL_REDIRECT_URL, default=None),
    },
)
