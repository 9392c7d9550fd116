"""
Field rules.  Fields are matched by number inside messages matched by
dotted path, so a rename is a name change, never a delete plus an add.
"""

from __future__ import annotations

from typing import Callable, Optional

from protosign.breaking.rules._base import (
    PRIMITIVE_TYPES,
    RuleFn,
    as_text,
    make_change,
    matched_fields,
    matched_messages,
    strip_leading_dots,
    type_changed,
)
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalField, CanonicalFile, CanonicalMessage

# Primitive pairs sharing a wire encoding.
WIRE_COMPATIBLE_TYPES = frozenset(
    frozenset(pair)
    for pair in (
        ("int32", "uint32"),
        ("int64", "uint64"),
        ("sint32", "int32"),
        ("sint64", "int64"),
        ("fixed32", "uint32"),
        ("fixed64", "uint64"),
        ("sfixed32", "int32"),
        ("sfixed64", "int64"),
    )
)

# JSON renders fixed-width and zigzag types differently; only sign flips survive.
WIRE_JSON_COMPATIBLE_TYPES = frozenset(
    frozenset(pair) for pair in (("int32", "uint32"), ("int64", "uint64"))
)

WIRE_COMPATIBLE_CARDINALITY = frozenset({("required", "optional"), ("optional", "repeated")})
WIRE_JSON_COMPATIBLE_CARDINALITY = frozenset({("optional", "repeated")})


def _display_type(type_name: str) -> str:
    return strip_leading_dots(type_name)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


def _deleted_fields(
    current: CanonicalFile, previous: CanonicalFile
) -> list[tuple[str, CanonicalMessage, CanonicalField]]:
    deleted = []
    for path, old_message, new_message in matched_messages(current, previous):
        new_numbers = new_message.field_by_number()
        for old_field in old_message.fields:
            if old_field.number not in new_numbers:
                deleted.append((path, new_message, old_field))
    return deleted


def _field_deleted_change(rule_id: str, path: str, field: CanonicalField, context: RuleContext) -> BreakingChange:
    return make_change(
        rule_id,
        f'Field "{field.name}" with number {field.number} was deleted from message "{path}".',
        context,
        element_type="field",
        element_name=f"{path}.{field.name}",
    )


def check_field_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        _field_deleted_change("FIELD_NO_DELETE", path, field, context)
        for path, _, field in _deleted_fields(current, previous)
    ]


def check_field_no_delete_unless_name_reserved(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        _field_deleted_change("FIELD_NO_DELETE_UNLESS_NAME_RESERVED", path, field, context)
        for path, new_message, field in _deleted_fields(current, previous)
        if not new_message.is_reserved(name=field.name)
    ]


def check_field_no_delete_unless_number_reserved(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        _field_deleted_change("FIELD_NO_DELETE_UNLESS_NUMBER_RESERVED", path, field, context)
        for path, new_message, field in _deleted_fields(current, previous)
        if not new_message.is_reserved(number=field.number)
    ]


# ---------------------------------------------------------------------------
# Attribute comparisons
# ---------------------------------------------------------------------------


def _changed_attribute(
    rule_id: str,
    what: str,
    getter: Callable[[CanonicalFile, CanonicalMessage, CanonicalField], Optional[object]],
    applies: Optional[Callable[[CanonicalField], bool]] = None,
) -> RuleFn:
    """Build a rule flagging fields whose ``getter`` value differs.

    When ``applies`` is given, only pairs where it holds on both sides
    are compared.
    """

    def check(
        current: CanonicalFile, previous: CanonicalFile, context: RuleContext
    ) -> list[BreakingChange]:
        changes = []
        for path, old_msg, old_field, new_msg, new_field in matched_fields(current, previous):
            if applies is not None and not (applies(old_field) and applies(new_field)):
                continue
            old = getter(previous, old_msg, old_field)
            new = getter(current, new_msg, new_field)
            if old == new:
                continue
            changes.append(
                make_change(
                    rule_id,
                    f'Field "{new_field.name}" on message "{path}" changed {what} '
                    f'from "{as_text(old)}" to "{as_text(new)}".',
                    context,
                    element_type="field",
                    element_name=f"{path}.{new_field.name}",
                    previous_element_name=f"{path}.{old_field.name}",
                )
            )
        return changes

    check.__name__ = f"check_{rule_id.lower()}"
    return check


def _with_default(attribute: str, default: str) -> Callable[[CanonicalFile, CanonicalMessage, CanonicalField], str]:
    def getter(file: CanonicalFile, message: CanonicalMessage, field: CanonicalField) -> str:
        value = getattr(field, attribute)
        return default if value is None else value

    return getter


def _is_string(field: CanonicalField) -> bool:
    # UTF-8 validation only applies to string fields.
    return field.type_name == "string"


def _utf8_validation(file: CanonicalFile, message: CanonicalMessage, field: CanonicalField) -> str:
    if field.utf8_validation is not None:
        return field.utf8_validation
    return "NONE" if file.syntax == "proto2" else "VERIFY"


def check_field_same_name(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, _, old_field, _, new_field in matched_fields(current, previous):
        if old_field.name == new_field.name:
            continue
        changes.append(
            make_change(
                "FIELD_SAME_NAME",
                f'Field {new_field.number} name changed from "{old_field.name}" '
                f'to "{new_field.name}" in message "{path}".',
                context,
                element_type="field",
                element_name=f"{path}.{new_field.name}",
                previous_element_name=f"{path}.{old_field.name}",
            )
        )
    return changes


def check_field_same_oneof(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old_msg, old_field, new_msg, new_field in matched_fields(current, previous):
        old = old_msg.oneof_name(old_field)
        new = new_msg.oneof_name(new_field)
        if old == new:
            continue
        if old is None:
            detail = f'moved into oneof "{new}"'
        elif new is None:
            detail = f'moved out of oneof "{old}"'
        else:
            detail = f'moved from oneof "{old}" to oneof "{new}"'
        changes.append(
            make_change(
                "FIELD_SAME_ONEOF",
                f'Field "{new_field.name}" on message "{path}" {detail}.',
                context,
                element_type="field",
                element_name=f"{path}.{new_field.name}",
                previous_element_name=f"{path}.{old_field.name}",
            )
        )
    return changes


# ---------------------------------------------------------------------------
# Types and cardinality
# ---------------------------------------------------------------------------


def _type_rule(rule_id: str, allowed: frozenset) -> RuleFn:
    def check(
        current: CanonicalFile, previous: CanonicalFile, context: RuleContext
    ) -> list[BreakingChange]:
        changes = []
        for path, _, old_field, _, new_field in matched_fields(current, previous):
            old, new = old_field.type_name, new_field.type_name
            if not type_changed(old, new):
                continue
            if frozenset((old, new)) in allowed and {old, new} <= PRIMITIVE_TYPES:
                continue
            changes.append(
                make_change(
                    rule_id,
                    f'Field "{new_field.name}" on message "{path}" changed type '
                    f'from "{_display_type(old)}" to "{_display_type(new)}".',
                    context,
                    element_type="field",
                    element_name=f"{path}.{new_field.name}",
                    previous_element_name=f"{path}.{old_field.name}",
                )
            )
        return changes

    check.__name__ = f"check_{rule_id.lower()}"
    return check


def _cardinality_rule(rule_id: str, allowed: frozenset, what: str = "cardinality") -> RuleFn:
    def check(
        current: CanonicalFile, previous: CanonicalFile, context: RuleContext
    ) -> list[BreakingChange]:
        changes = []
        for path, _, old_field, _, new_field in matched_fields(current, previous):
            old, new = old_field.cardinality, new_field.cardinality
            if old == new or (old, new) in allowed:
                continue
            changes.append(
                make_change(
                    rule_id,
                    f'Field "{new_field.name}" on message "{path}" changed {what} '
                    f'from "{old}" to "{new}".',
                    context,
                    element_type="field",
                    element_name=f"{path}.{new_field.name}",
                    previous_element_name=f"{path}.{old_field.name}",
                )
            )
        return changes

    check.__name__ = f"check_{rule_id.lower()}"
    return check


RULES: dict[str, RuleFn] = {
    "FIELD_NO_DELETE": check_field_no_delete,
    "FIELD_NO_DELETE_UNLESS_NAME_RESERVED": check_field_no_delete_unless_name_reserved,
    "FIELD_NO_DELETE_UNLESS_NUMBER_RESERVED": check_field_no_delete_unless_number_reserved,
    "FIELD_SAME_CARDINALITY": _cardinality_rule("FIELD_SAME_CARDINALITY", frozenset()),
    "FIELD_SAME_CPP_STRING_TYPE": _changed_attribute(
        "FIELD_SAME_CPP_STRING_TYPE", "C++ string type", _with_default("cpp_string_type", "STRING")
    ),
    "FIELD_SAME_CTYPE": _changed_attribute(
        "FIELD_SAME_CTYPE", "ctype", _with_default("ctype", "STRING")
    ),
    "FIELD_SAME_DEFAULT": _changed_attribute(
        "FIELD_SAME_DEFAULT", "default value", lambda file, message, field: field.default
    ),
    "FIELD_SAME_JAVA_UTF8_VALIDATION": _changed_attribute(
        "FIELD_SAME_JAVA_UTF8_VALIDATION",
        "Java UTF-8 validation",
        _with_default("java_utf8_validation", "DEFAULT"),
        applies=_is_string,
    ),
    "FIELD_SAME_JSON_NAME": _changed_attribute(
        "FIELD_SAME_JSON_NAME",
        "JSON name",
        lambda file, message, field: field.effective_json_name,
    ),
    "FIELD_SAME_JSTYPE": _changed_attribute(
        "FIELD_SAME_JSTYPE", "jstype", _with_default("jstype", "JS_NORMAL")
    ),
    "FIELD_SAME_LABEL": _cardinality_rule("FIELD_SAME_LABEL", frozenset(), what="label"),
    "FIELD_SAME_NAME": check_field_same_name,
    "FIELD_SAME_ONEOF": check_field_same_oneof,
    "FIELD_SAME_TYPE": _type_rule("FIELD_SAME_TYPE", frozenset()),
    "FIELD_SAME_UTF8_VALIDATION": _changed_attribute(
        "FIELD_SAME_UTF8_VALIDATION", "UTF-8 validation", _utf8_validation, applies=_is_string
    ),
    "FIELD_WIRE_COMPATIBLE_CARDINALITY": _cardinality_rule(
        "FIELD_WIRE_COMPATIBLE_CARDINALITY", WIRE_COMPATIBLE_CARDINALITY
    ),
    "FIELD_WIRE_COMPATIBLE_TYPE": _type_rule("FIELD_WIRE_COMPATIBLE_TYPE", WIRE_COMPATIBLE_TYPES),
    "FIELD_WIRE_JSON_COMPATIBLE_CARDINALITY": _cardinality_rule(
        "FIELD_WIRE_JSON_COMPATIBLE_CARDINALITY", WIRE_JSON_COMPATIBLE_CARDINALITY
    ),
    "FIELD_WIRE_JSON_COMPATIBLE_TYPE": _type_rule(
        "FIELD_WIRE_JSON_COMPATIBLE_TYPE", WIRE_JSON_COMPATIBLE_TYPES
    ),
}
