"""
Text and JSON renderings of a ``BreakingResult``.
"""

from __future__ import annotations

from protosign.breaking.schema import BreakingResult


def render_text(result: BreakingResult) -> str:
    """Human-readable report, one block per change plus a summary."""
    if not result.has_breaking_changes:
        lines = [
            "No breaking changes detected.",
            f"Rules executed: {len(result.executed_rules)}",
        ]
    else:
        lines = ["Breaking changes detected:", ""]
        for change in result.changes:
            lines.append(f"  [{change.rule_id}] {change.message}")
            lines.append(f"    Location: {change.location}")
            if change.previous_location is not None:
                lines.append(f"    Previous: {change.previous_location}")
            lines.append(
                f"    Categories: {', '.join(c.value for c in change.categories)}"
            )
            lines.append("")
        lines.append("Summary:")
        for category in sorted(result.summary):
            lines.append(f"  {category}: {result.summary[category]}")
        lines.append(f"Rules executed: {len(result.executed_rules)}")
    if result.failed_rules:
        lines.append(f"Rules failed: {', '.join(result.failed_rules)}")
    return "\n".join(lines)


def render_json(result: BreakingResult) -> str:
    """Machine-readable report (the result model as JSON)."""
    return result.model_dump_json(indent=2)
