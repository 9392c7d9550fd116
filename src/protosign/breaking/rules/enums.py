"""
Enum rules.  Enums are matched by dotted path and values by number; a
number may carry several names when ``allow_alias`` is set.
"""

from __future__ import annotations

from typing import Iterator

from protosign.breaking.rules._base import RuleFn, deleted_paths, make_change, matched_enums
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalEnum, CanonicalFile


def _is_closed(file: CanonicalFile, enum: CanonicalEnum) -> bool:
    if enum.closed_enum is not None:
        return enum.closed_enum
    return file.syntax == "proto2"


def check_enum_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        make_change(
            "ENUM_NO_DELETE",
            f'Previously present enum "{path}" was deleted from file.',
            context,
            element_type="enum",
            element_name=path,
        )
        for path in deleted_paths(previous.all_enums(), current.all_enums(), previous, current)
    ]


def check_enum_same_json_format(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_enums(current, previous):
        old_format = old.options.get("json_format", "ALLOW")
        new_format = new.options.get("json_format", "ALLOW")
        if old_format != new_format:
            changes.append(
                make_change(
                    "ENUM_SAME_JSON_FORMAT",
                    f'Enum "{path}" changed JSON format from "{old_format}" to "{new_format}".',
                    context,
                    element_type="enum",
                    element_name=path,
                )
            )
    return changes


def check_enum_same_type(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_enums(current, previous):
        old_type = "closed" if _is_closed(previous, old) else "open"
        new_type = "closed" if _is_closed(current, new) else "open"
        if old_type != new_type:
            changes.append(
                make_change(
                    "ENUM_SAME_TYPE",
                    f'Enum "{path}" changed from {old_type} to {new_type}.',
                    context,
                    element_type="enum",
                    element_name=path,
                )
            )
    return changes


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


def _deleted_values(
    current: CanonicalFile, previous: CanonicalFile
) -> Iterator[tuple[str, CanonicalEnum, int, tuple[str, ...]]]:
    """Yield ``(path, current_enum, number, previous_names)`` per deleted number."""
    for path, old, new in matched_enums(current, previous):
        new_numbers = new.names_by_number()
        for number, names in old.names_by_number().items():
            if number not in new_numbers:
                yield path, new, number, names


def _value_deleted_change(
    rule_id: str, path: str, number: int, names: tuple[str, ...], context: RuleContext
) -> BreakingChange:
    name = names[0]
    return make_change(
        rule_id,
        f'Enum value "{name}" with number {number} was deleted from enum "{path}".',
        context,
        element_type="enum_value",
        element_name=f"{path}.{name}",
    )


def check_enum_value_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        _value_deleted_change("ENUM_VALUE_NO_DELETE", path, number, names, context)
        for path, _, number, names in _deleted_values(current, previous)
    ]


def check_enum_value_no_delete_unless_name_reserved(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        _value_deleted_change(
            "ENUM_VALUE_NO_DELETE_UNLESS_NAME_RESERVED", path, number, names, context
        )
        for path, enum, number, names in _deleted_values(current, previous)
        if not all(enum.is_reserved(name=name) for name in names)
    ]


def check_enum_value_no_delete_unless_number_reserved(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    return [
        _value_deleted_change(
            "ENUM_VALUE_NO_DELETE_UNLESS_NUMBER_RESERVED", path, number, names, context
        )
        for path, enum, number, names in _deleted_values(current, previous)
        if not enum.is_reserved(number=number)
    ]


def check_enum_value_same_name(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    for path, old, new in matched_enums(current, previous):
        new_numbers = new.names_by_number()
        for number, old_names in old.names_by_number().items():
            new_names = new_numbers.get(number)
            if new_names is None or set(new_names) == set(old_names):
                continue
            changes.append(
                make_change(
                    "ENUM_VALUE_SAME_NAME",
                    f'Enum value {number} on enum "{path}" changed name from '
                    f'"{", ".join(old_names)}" to "{", ".join(new_names)}".',
                    context,
                    element_type="enum_value",
                    element_name=f"{path}.{new_names[0]}",
                    previous_element_name=f"{path}.{old_names[0]}",
                )
            )
    return changes


RULES: dict[str, RuleFn] = {
    "ENUM_NO_DELETE": check_enum_no_delete,
    "ENUM_SAME_JSON_FORMAT": check_enum_same_json_format,
    "ENUM_SAME_TYPE": check_enum_same_type,
    "ENUM_VALUE_NO_DELETE": check_enum_value_no_delete,
    "ENUM_VALUE_NO_DELETE_UNLESS_NAME_RESERVED": check_enum_value_no_delete_unless_name_reserved,
    "ENUM_VALUE_NO_DELETE_UNLESS_NUMBER_RESERVED": check_enum_value_no_delete_unless_number_reserved,
    "ENUM_VALUE_SAME_NAME": check_enum_value_same_name,
}
