"""
Immutable rule registry.

Built once on first use and shared by reference; there is no runtime
registration.  Rules are ordered by id, which is also the execution order.

Usage::

    from protosign.breaking.registry import get_rule_registry

    for rule in get_rule_registry():
        print(rule.rule_id, [c.value for c in rule.categories])
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import NamedTuple, Optional

from protosign.breaking.categories import RULE_CATEGORIES
from protosign.breaking.rules import ALL_RULES, RuleFn
from protosign.breaking.schema import BreakingCategory

logger = logging.getLogger(__name__)


class Rule(NamedTuple):
    """A registered rule: id, static categories and check function."""

    rule_id: str
    categories: tuple[BreakingCategory, ...]
    check: RuleFn


@lru_cache(maxsize=1)
def get_rule_registry() -> tuple[Rule, ...]:
    """Return the full, ordered rule table."""
    missing = sorted(set(ALL_RULES) ^ set(RULE_CATEGORIES))
    if missing:
        raise RuntimeError(f"Rules without categories or implementation: {missing}")
    registry = tuple(
        Rule(rule_id, RULE_CATEGORIES[rule_id], ALL_RULES[rule_id])
        for rule_id in sorted(ALL_RULES)
    )
    logger.debug("Built rule registry with %d rules", len(registry))
    return registry


def get_rule(rule_id: str) -> Optional[Rule]:
    for rule in get_rule_registry():
        if rule.rule_id == rule_id:
            return rule
    return None


def rule_ids() -> list[str]:
    return [rule.rule_id for rule in get_rule_registry()]
