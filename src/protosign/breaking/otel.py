"""
OTel span event emission for breaking-change and compatibility checks.

Usage::

    from protosign.breaking.otel import (
        emit_breaking_check,
        emit_breaking_change,
        emit_compatibility_check,
    )

    emit_breaking_check(result, context)
    emit_compatibility_check(Compatibility.YELLOW, old_fp, new_fp)
"""

from __future__ import annotations

import logging
from typing import Optional

from protosign._otel_helpers import AttributeValue, add_span_event
from protosign.breaking.schema import BreakingChange, BreakingResult, RuleContext
from protosign.canonical.compatibility import Compatibility

logger = logging.getLogger(__name__)


def emit_breaking_check(result: BreakingResult, context: RuleContext) -> None:
    """Emit a span event summarising one engine run.

    Event name: ``protosign.breaking.check``
    """
    attrs: dict[str, Optional[AttributeValue]] = {
        "breaking.current_file": context.current_file,
        "breaking.previous_file": context.previous_file,
        "breaking.has_changes": result.has_breaking_changes,
        "breaking.change_count": len(result.changes),
        "breaking.rules_executed": len(result.executed_rules),
        "breaking.rules_failed": len(result.failed_rules),
    }
    for category, count in result.summary.items():
        attrs[f"breaking.category.{category.lower()}"] = count

    if result.has_breaking_changes:
        logger.warning(
            "Breaking check %s -> %s: %d breaking change(s)",
            context.previous_file,
            context.current_file,
            len(result.changes),
        )
    else:
        logger.debug(
            "Breaking check %s -> %s: no breaking changes (%d rules)",
            context.previous_file,
            context.current_file,
            len(result.executed_rules),
        )

    add_span_event("protosign.breaking.check", attrs)


def emit_breaking_change(change: BreakingChange) -> None:
    """Emit a span event for one breaking change.

    Event name: ``protosign.breaking.change``
    """
    attrs: dict[str, Optional[AttributeValue]] = {
        "breaking.rule_id": change.rule_id,
        "breaking.message": change.message,
        "breaking.element_type": change.location.element_type,
        "breaking.element_name": change.location.element_name,
        "breaking.line": change.location.line,
        "breaking.previous_element_name": (
            change.previous_location.element_name if change.previous_location else None
        ),
        "breaking.severity": change.severity,
        "breaking.categories": ",".join(c.value for c in change.categories),
    }
    logger.debug("Breaking change [%s] %s", change.rule_id, change.message)
    add_span_event("protosign.breaking.change", attrs)


def emit_compatibility_check(
    verdict: Compatibility, old_fingerprint: str, new_fingerprint: str
) -> None:
    """Emit a span event for a Green/Yellow/Red verdict.

    Event name: ``protosign.compatibility.check``
    """
    attrs: dict[str, Optional[AttributeValue]] = {
        "compatibility.verdict": verdict,
        "compatibility.old_fingerprint": old_fingerprint,
        "compatibility.new_fingerprint": new_fingerprint,
    }
    if verdict is Compatibility.RED:
        logger.warning("Compatibility check: %s", verdict.description)
    else:
        logger.debug("Compatibility check: %s", verdict.description)
    add_span_event("protosign.compatibility.check", attrs)
