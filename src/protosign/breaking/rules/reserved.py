"""
Reserved-range and reserved-name rules for messages and enums.
"""

from __future__ import annotations

from typing import Union

from protosign.breaking.rules._base import RuleFn, make_change, matched_enums, matched_messages
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalEnum, CanonicalFile, CanonicalMessage


def _deleted_reservations(
    rule_id: str,
    kind: str,
    path: str,
    old: Union[CanonicalMessage, CanonicalEnum],
    new: Union[CanonicalMessage, CanonicalEnum],
    context: RuleContext,
) -> list[BreakingChange]:
    changes = []
    for reserved_range in old.reserved_ranges:
        if reserved_range not in new.reserved_ranges:
            changes.append(
                make_change(
                    rule_id,
                    f'Previously present reserved range "{reserved_range}" on {kind} '
                    f'"{path}" was deleted.',
                    context,
                    element_type=kind,
                    element_name=path,
                )
            )
    for name in old.reserved_names:
        if name not in new.reserved_names:
            changes.append(
                make_change(
                    rule_id,
                    f'Previously present reserved name "{name}" on {kind} "{path}" was deleted.',
                    context,
                    element_type=kind,
                    element_name=path,
                )
            )
    return changes


def check_reserved_message_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        changes.extend(
            _deleted_reservations("RESERVED_MESSAGE_NO_DELETE", "message", path, old, new, context)
        )
    return changes


def check_reserved_enum_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_enums(current, previous):
        changes.extend(
            _deleted_reservations("RESERVED_ENUM_NO_DELETE", "enum", path, old, new, context)
        )
    return changes


RULES: dict[str, RuleFn] = {
    "RESERVED_ENUM_NO_DELETE": check_reserved_enum_no_delete,
    "RESERVED_MESSAGE_NO_DELETE": check_reserved_message_no_delete,
}
