from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Tuple

from .rules import DEFAULT_RULE_TABLE, RuleTable

log = logging.getLogger("shapefix.normalize")

VERIFICATION_KEY = "verification"
TAG_KEY = "object"


@dataclass(frozen=True)
class RepairAction:
    """One edit that actually changed the document.

    container/index/tag are None for top-level denylist removals.
    """

    rule_id: str
    field: str
    container: str | None = None
    index: int | None = None
    tag: str | None = None

    def describe(self) -> str:
        if self.container is None:
            return f"{self.rule_id}: {self.field} (top level)"
        return f"{self.rule_id}: {self.container}[{self.index}].verification.{self.field} (tag={self.tag})"


def normalize_with_actions(doc: Any, rules: RuleTable = DEFAULT_RULE_TABLE) -> Tuple[Any, List[RepairAction]]:
    """Repair known verification shape mismatches in place.

    Returns the same document handle plus the edits that changed it.
    Shape problems (non-dict document, non-list container, record without a
    verification object, missing or non-string tag) are skipped rather than
    raised; the strict decoder reports them later.
    """

    actions: List[RepairAction] = []
    if not isinstance(doc, dict):
        return doc, actions

    for name in rules.denylist:
        if name in doc:
            del doc[name]
            actions.append(RepairAction(rule_id="denylist", field=name))

    for container in rules.containers():
        records = doc.get(container)
        if not isinstance(records, list):
            continue
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                continue
            verification = record.get(VERIFICATION_KEY)
            if not isinstance(verification, dict):
                continue
            tag = verification.get(TAG_KEY)
            if not isinstance(tag, str):
                continue
            rule = rules.lookup(container, tag)
            if rule is None:
                continue
            if rule.apply(verification):
                actions.append(
                    RepairAction(
                        rule_id=rule.rule_id,
                        field=rule.field,
                        container=container,
                        index=index,
                        tag=tag,
                    )
                )

    for action in actions:
        log.debug("repair_applied", extra={"repair": action.describe()})
    log.info("normalized document", extra={"repair_count": len(actions)})
    return doc, actions


def normalize(doc: Any, rules: RuleTable = DEFAULT_RULE_TABLE) -> Any:
    """Normalize in place and return the same document for chaining."""
    normalized, _ = normalize_with_actions(doc, rules)
    return normalized
