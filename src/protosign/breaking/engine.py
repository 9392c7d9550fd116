"""
Breaking-change rule engine.

Filters the registry through a ``BreakingConfig``, runs the selected rules
in registry order against a ``(current, previous)`` pair of canonical
models, and folds their output into a ``BreakingResult``.  A rule that
raises is logged and listed in ``failed_rules``; the run continues.

Usage::

    from protosign.breaking.engine import BreakingEngine
    from protosign.breaking.schema import BreakingConfig

    engine = BreakingEngine()
    result = engine.check(current, previous, BreakingConfig())
    if result.has_breaking_changes:
        ...
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from protosign.breaking.otel import emit_breaking_change, emit_breaking_check
from protosign.breaking.registry import Rule, get_rule_registry
from protosign.breaking.schema import (
    BreakingChange,
    BreakingConfig,
    BreakingResult,
    RuleContext,
)
from protosign.canonical.model import CanonicalFile

logger = logging.getLogger(__name__)


class BreakingEngine:
    """Runs registered rules over two canonical schema versions."""

    def __init__(self, rules: Optional[Sequence[Rule]] = None) -> None:
        self._rules: tuple[Rule, ...] = (
            tuple(rules) if rules is not None else get_rule_registry()
        )

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def select(self, config: BreakingConfig) -> list[Rule]:
        """Rules ``config`` enables, in registry order."""
        return [r for r in self._rules if config.selects(r.rule_id, r.categories)]

    def check(
        self,
        current: CanonicalFile,
        previous: CanonicalFile,
        config: Optional[BreakingConfig] = None,
        context: Optional[RuleContext] = None,
    ) -> BreakingResult:
        """Compare ``previous`` -> ``current`` and return the aggregated result."""
        config = config or BreakingConfig()
        context = context or RuleContext()

        changes: list[BreakingChange] = []
        executed: list[str] = []
        failed: list[str] = []

        for rule in self.select(config):
            try:
                emitted = rule.check(current, previous, context)
            except Exception:
                logger.exception("Rule %s failed; excluding it from results", rule.rule_id)
                failed.append(rule.rule_id)
                continue
            executed.append(rule.rule_id)
            changes.extend(emitted)

        result = BreakingResult.from_changes(changes, executed, failed)
        for change in result.changes:
            emit_breaking_change(change)
        emit_breaking_check(result, context)
        return result
