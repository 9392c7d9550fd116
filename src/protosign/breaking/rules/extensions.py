"""
Extension rules: extension fields keyed by ``(extendee, number)`` and
extension ranges declared on messages.
"""

from __future__ import annotations

from protosign.breaking.rules._base import (
    RuleFn,
    make_change,
    matched_messages,
    strip_leading_dots,
)
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalFile


def check_extension_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    current_keys = {(strip_leading_dots(e.extendee), e.number) for e in current.extensions}
    changes = []
    for ext in previous.extensions:
        extendee = strip_leading_dots(ext.extendee)
        if (extendee, ext.number) in current_keys:
            continue
        changes.append(
            make_change(
                "EXTENSION_NO_DELETE",
                f'Previously present extension "{ext.name}" ({ext.number}) '
                f'on "{extendee}" was deleted.',
                context,
                element_type="extension",
                element_name=f"{extendee}.{ext.number}",
            )
        )
    return changes


def check_extension_message_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        for old_range in old.extension_ranges:
            if any(r.covers(old_range) for r in new.extension_ranges):
                continue
            changes.append(
                make_change(
                    "EXTENSION_MESSAGE_NO_DELETE",
                    f'Previously present extension range "{old_range}" on message '
                    f'"{path}" was deleted.',
                    context,
                    element_type="message",
                    element_name=path,
                )
            )
    return changes


RULES: dict[str, RuleFn] = {
    "EXTENSION_MESSAGE_NO_DELETE": check_extension_message_no_delete,
    "EXTENSION_NO_DELETE": check_extension_no_delete,
}
