"""
Rule library: pure ``(current, previous, context) -> list[BreakingChange]``
functions grouped by subject.  ``ALL_RULES`` merges the per-module tables.
"""

from types import MappingProxyType
from typing import Mapping

from protosign.breaking.rules import (
    enums,
    extensions,
    fields,
    files,
    messages,
    packages,
    reserved,
    services,
)
from protosign.breaking.rules._base import RuleFn

ALL_RULES: Mapping[str, RuleFn] = MappingProxyType(
    {
        **enums.RULES,
        **extensions.RULES,
        **fields.RULES,
        **files.RULES,
        **messages.RULES,
        **packages.RULES,
        **reserved.RULES,
        **services.RULES,
    }
)

__all__ = ["ALL_RULES", "RuleFn"]
