"""
Message rules: deletion, message-level options, required fields, oneofs.
"""

from __future__ import annotations

from protosign.breaking.rules._base import (
    RuleFn,
    as_text,
    deleted_paths,
    make_change,
    matched_messages,
)
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalFile


def check_message_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        make_change(
            "MESSAGE_NO_DELETE",
            f'Previously present message "{path}" was deleted from file.',
            context,
            element_type="message",
            element_name=path,
        )
        for path in deleted_paths(
            previous.all_messages(), current.all_messages(), previous, current
        )
    ]


def check_message_no_remove_standard_descriptor_accessor(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        if not old.no_standard_descriptor_accessor and new.no_standard_descriptor_accessor:
            changes.append(
                make_change(
                    "MESSAGE_NO_REMOVE_STANDARD_DESCRIPTOR_ACCESSOR",
                    f'Message "{path}" changed option "no_standard_descriptor_accessor" '
                    'from "false" to "true".',
                    context,
                    element_type="message",
                    element_name=path,
                )
            )
    return changes


def check_message_same_json_format(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        old_format = old.options.get("json_format", "ALLOW")
        new_format = new.options.get("json_format", "ALLOW")
        if old_format != new_format:
            changes.append(
                make_change(
                    "MESSAGE_SAME_JSON_FORMAT",
                    f'Message "{path}" changed JSON format from "{old_format}" to "{new_format}".',
                    context,
                    element_type="message",
                    element_name=path,
                )
            )
    return changes


def check_message_same_message_set_wire_format(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        old_value = bool(old.message_set_wire_format)
        new_value = bool(new.message_set_wire_format)
        if old_value != new_value:
            changes.append(
                make_change(
                    "MESSAGE_SAME_MESSAGE_SET_WIRE_FORMAT",
                    f'Message "{path}" changed option "message_set_wire_format" '
                    f'from "{as_text(old_value)}" to "{as_text(new_value)}".',
                    context,
                    element_type="message",
                    element_name=path,
                )
            )
    return changes


def check_message_same_required_fields(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        old_required = {f.name for f in old.fields if f.label == "required"}
        new_required = {f.name for f in new.fields if f.label == "required"}
        for name in sorted(new_required - old_required):
            changes.append(
                make_change(
                    "MESSAGE_SAME_REQUIRED_FIELDS",
                    f'Message "{path}" had required field "{name}" added.',
                    context,
                    element_type="message",
                    element_name=path,
                )
            )
        for name in sorted(old_required - new_required):
            changes.append(
                make_change(
                    "MESSAGE_SAME_REQUIRED_FIELDS",
                    f'Message "{path}" had required field "{name}" removed.',
                    context,
                    element_type="message",
                    element_name=path,
                )
            )
    return changes


def check_oneof_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_messages(current, previous):
        for name in old.oneofs:
            if name not in new.oneofs:
                changes.append(
                    make_change(
                        "ONEOF_NO_DELETE",
                        f'Previously present oneof "{name}" on message "{path}" was deleted.',
                        context,
                        element_type="oneof",
                        element_name=f"{path}.{name}",
                    )
                )
    return changes


RULES: dict[str, RuleFn] = {
    "MESSAGE_NO_DELETE": check_message_no_delete,
    "MESSAGE_NO_REMOVE_STANDARD_DESCRIPTOR_ACCESSOR": check_message_no_remove_standard_descriptor_accessor,
    "MESSAGE_SAME_JSON_FORMAT": check_message_same_json_format,
    "MESSAGE_SAME_MESSAGE_SET_WIRE_FORMAT": check_message_same_message_set_wire_format,
    "MESSAGE_SAME_REQUIRED_FIELDS": check_message_same_required_fields,
    "ONEOF_NO_DELETE": check_oneof_no_delete,
}
