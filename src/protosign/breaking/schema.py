"""
Pydantic v2 models for breaking-change detection.

Covers the engine's configuration, the per-rule context, the emitted
changes and the aggregated result.  All models use ``extra="forbid"`` so
that a misspelled configuration key is rejected at parse time.

Usage::

    from protosign.breaking.schema import BreakingConfig, BreakingCategory

    config = BreakingConfig(use_categories=[BreakingCategory.WIRE])
    config.selects("FIELD_WIRE_COMPATIBLE_TYPE", (BreakingCategory.WIRE,))
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class BreakingCategory(str, Enum):
    """Compatibility guarantee protected by a rule."""
    FILE = "FILE"
    PACKAGE = "PACKAGE"
    WIRE = "WIRE"
    WIRE_JSON = "WIRE_JSON"


class BreakingSeverity(str, Enum):
    """Severity of a reported change."""
    ERROR = "error"
    WARNING = "warning"


DEFAULT_CATEGORIES = (BreakingCategory.FILE, BreakingCategory.PACKAGE)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class BreakingConfig(BaseModel):
    """Selects which rules run.

    Precedence per rule: ``except_rules`` always wins, then a non-empty
    ``use_rules`` list, then ``use_categories``.  The ignore and suffix
    fields are carried for callers and do not alter comparison.
    """

    model_config = ConfigDict(extra="forbid")

    use_categories: list[BreakingCategory] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES)
    )
    use_rules: list[str] = Field(
        default_factory=list,
        description="Rule ids to run; bypasses category selection when non-empty",
    )
    except_rules: list[str] = Field(
        default_factory=list, description="Rule ids never run"
    )
    ignore: list[str] = Field(default_factory=list)
    ignore_only: dict[str, list[str]] = Field(default_factory=dict)
    ignore_unstable_packages: bool = False
    service_no_change_suffixes: list[str] = Field(default_factory=list)
    message_no_change_suffixes: list[str] = Field(default_factory=list)
    enum_no_change_suffixes: list[str] = Field(default_factory=list)

    def selects(self, rule_id: str, categories: Iterable[BreakingCategory]) -> bool:
        """Whether a rule with this id and categories should run."""
        if rule_id in self.except_rules:
            return False
        if self.use_rules:
            return rule_id in self.use_rules
        return any(category in self.use_categories for category in categories)


class RuleContext(BaseModel):
    """Per-run context handed to every rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    current_file: str = "current"
    previous_file: str = "previous"


# ---------------------------------------------------------------------------
# Changes and results
# ---------------------------------------------------------------------------


class BreakingLocation(BaseModel):
    """Where a change was observed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    file_path: str
    line: Optional[int] = None
    column: Optional[int] = None
    element_type: str
    element_name: str

    def __str__(self) -> str:
        position = self.file_path
        if self.line is not None:
            position += f":{self.line}"
            if self.column is not None:
                position += f":{self.column}"
        return f"{position} ({self.element_type} {self.element_name})"


class BreakingChange(BaseModel):
    """One rule-attributed breaking change."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule_id: str = Field(..., min_length=1)
    message: str
    location: BreakingLocation
    previous_location: Optional[BreakingLocation] = None
    severity: BreakingSeverity = BreakingSeverity.ERROR
    categories: tuple[BreakingCategory, ...] = ()


class BreakingResult(BaseModel):
    """Aggregated outcome of one engine run."""

    model_config = ConfigDict(extra="forbid")

    changes: list[BreakingChange] = Field(default_factory=list)
    has_breaking_changes: bool = False
    summary: dict[str, int] = Field(
        default_factory=dict, description="Category -> number of changes"
    )
    executed_rules: list[str] = Field(default_factory=list)
    failed_rules: list[str] = Field(default_factory=list)

    @classmethod
    def from_changes(
        cls,
        changes: list[BreakingChange],
        executed_rules: list[str],
        failed_rules: list[str],
    ) -> "BreakingResult":
        summary: dict[str, int] = {}
        for change in changes:
            for category in change.categories:
                summary[category.value] = summary.get(category.value, 0) + 1
        return cls(
            changes=changes,
            has_breaking_changes=bool(changes),
            summary=summary,
            executed_rules=executed_rules,
            failed_rules=failed_rules,
        )

    @property
    def exit_code(self) -> int:
        return 1 if self.has_breaking_changes else 0

    def changes_for(self, rule_id: str) -> list[BreakingChange]:
        return [c for c in self.changes if c.rule_id == rule_id]
