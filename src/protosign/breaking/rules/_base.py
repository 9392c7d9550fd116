"""
Shared helpers for the rule library: change construction, entity
matching and type-name handling.

Matching follows one convention everywhere: messages, enums and services
by dotted path, fields and enum values by number, methods by name.
"""

from __future__ import annotations

import re
from typing import Callable, Iterator, Mapping, Optional

from protosign.breaking.categories import RULE_CATEGORIES
from protosign.breaking.schema import (
    BreakingChange,
    BreakingLocation,
    BreakingSeverity,
    RuleContext,
)
from protosign.canonical.model import (
    CanonicalEnum,
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
    CanonicalMethod,
    CanonicalService,
)

RuleFn = Callable[[CanonicalFile, CanonicalFile, RuleContext], "list[BreakingChange]"]

PRIMITIVE_TYPES = frozenset(
    {
        "double",
        "float",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "bool",
        "string",
        "bytes",
    }
)

_LEADING_DOT = re.compile(r"(^|[<,\s])\.")


def make_change(
    rule_id: str,
    message: str,
    context: RuleContext,
    element_type: str,
    element_name: str,
    previous_element_name: Optional[str] = None,
) -> BreakingChange:
    """Build a change tagged with the rule's categories."""
    return BreakingChange(
        rule_id=rule_id,
        message=message,
        location=BreakingLocation(
            file_path=context.current_file,
            element_type=element_type,
            element_name=element_name,
        ),
        previous_location=BreakingLocation(
            file_path=context.previous_file,
            element_type=element_type,
            element_name=previous_element_name or element_name,
        ),
        severity=BreakingSeverity.ERROR,
        categories=RULE_CATEGORIES[rule_id],
    )


def strip_leading_dots(type_name: str) -> str:
    """``.pkg.Msg`` -> ``pkg.Msg``; also inside ``map<K, V>`` spellings."""
    return _LEADING_DOT.sub(r"\1", type_name)


def type_kind(type_name: str) -> str:
    """Coarse type class used before comparing qualified names."""
    if type_name in PRIMITIVE_TYPES:
        return type_name
    if type_name.startswith("map<"):
        return "map"
    if "." in type_name or "<" not in type_name:
        return "message"
    return "enum"


def type_changed(previous: str, current: str) -> bool:
    """True if the field type changed, by kind first, then by name."""
    previous_kind = type_kind(previous)
    if previous_kind != type_kind(current):
        return True
    if previous_kind in ("message", "enum", "map"):
        return strip_leading_dots(previous) != strip_leading_dots(current)
    return False


def as_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def parent_path(path: str) -> Optional[str]:
    return path.rsplit(".", 1)[0] if "." in path else None


def matched_messages(
    current: CanonicalFile, previous: CanonicalFile
) -> Iterator[tuple[str, CanonicalMessage, CanonicalMessage]]:
    """Yield ``(path, previous, current)`` for messages present in both."""
    current_messages = current.all_messages()
    for path, old in previous.all_messages().items():
        new = current_messages.get(path)
        if new is not None:
            yield path, old, new


def matched_fields(
    current: CanonicalFile, previous: CanonicalFile
) -> Iterator[tuple[str, CanonicalMessage, CanonicalField, CanonicalMessage, CanonicalField]]:
    """Yield ``(path, old_msg, old_field, new_msg, new_field)`` matched by number."""
    for path, old_message, new_message in matched_messages(current, previous):
        new_fields = new_message.field_by_number()
        for old_field in old_message.fields:
            new_field = new_fields.get(old_field.number)
            if new_field is not None:
                yield path, old_message, old_field, new_message, new_field


def matched_enums(
    current: CanonicalFile, previous: CanonicalFile
) -> Iterator[tuple[str, CanonicalEnum, CanonicalEnum]]:
    current_enums = current.all_enums()
    for path, old in previous.all_enums().items():
        new = current_enums.get(path)
        if new is not None:
            yield path, old, new


def matched_methods(
    current: CanonicalFile, previous: CanonicalFile
) -> Iterator[tuple[CanonicalService, CanonicalMethod, CanonicalMethod]]:
    current_services = current.service_by_name()
    for old_service in previous.services:
        new_service = current_services.get(old_service.name)
        if new_service is None:
            continue
        new_methods = new_service.method_by_name()
        for old_method in old_service.methods:
            new_method = new_methods.get(old_method.name)
            if new_method is not None:
                yield old_service, old_method, new_method


def deleted_paths(
    previous_items: Mapping[str, object],
    current_items: Mapping[str, object],
    previous: CanonicalFile,
    current: CanonicalFile,
) -> list[str]:
    """Paths missing from ``current_items``, outermost deletion only.

    A nested declaration whose enclosing message was itself deleted is
    reported through that message instead.
    """
    previous_messages = previous.all_messages()
    current_messages = current.all_messages()
    deleted = []
    for path in previous_items:
        if path in current_items:
            continue
        parent = parent_path(path)
        if parent in previous_messages and parent not in current_messages:
            continue
        deleted.append(path)
    return deleted
