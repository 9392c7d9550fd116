"""
Breaking-change detection between two versions of a schema file.

Public API::

    from protosign.breaking import (
        # Schema models
        BreakingCategory,
        BreakingSeverity,
        BreakingConfig,
        BreakingLocation,
        BreakingChange,
        BreakingResult,
        RuleContext,
        # Registry and engine
        Rule,
        get_rule_registry,
        BreakingEngine,
        # Loader
        BreakingConfigLoader,
        # Rendering
        render_text,
        render_json,
    )
"""

from protosign.breaking.engine import BreakingEngine
from protosign.breaking.loader import BreakingConfigLoader, config_from_mapping
from protosign.breaking.registry import Rule, get_rule, get_rule_registry, rule_ids
from protosign.breaking.report import render_json, render_text
from protosign.breaking.schema import (
    BreakingCategory,
    BreakingChange,
    BreakingConfig,
    BreakingLocation,
    BreakingResult,
    BreakingSeverity,
    RuleContext,
)

__all__ = [
    # Schema
    "BreakingCategory",
    "BreakingSeverity",
    "BreakingConfig",
    "BreakingLocation",
    "BreakingChange",
    "BreakingResult",
    "RuleContext",
    # Registry and engine
    "Rule",
    "get_rule",
    "get_rule_registry",
    "rule_ids",
    "BreakingEngine",
    # Loader
    "BreakingConfigLoader",
    "config_from_mapping",
    # Rendering
    "render_text",
    "render_json",
]
