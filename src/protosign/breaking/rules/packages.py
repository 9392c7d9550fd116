"""
Package-scoped rules.

Only one file pair is visible, so package-level deletion is approximated
from single-file evidence: the element rules fire only when both versions
declare the same non-empty package.
"""

from __future__ import annotations

from protosign.breaking.rules._base import (
    RuleFn,
    deleted_paths,
    make_change,
    strip_leading_dots,
)
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalFile


def _same_package(current: CanonicalFile, previous: CanonicalFile) -> bool:
    return bool(previous.package) and previous.package == current.package


def check_package_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    if not previous.package or current.package:
        return []
    return [
        make_change(
            "PACKAGE_NO_DELETE",
            f'Previously present package "{previous.package}" was deleted.',
            context,
            element_type="package",
            element_name=previous.package,
        )
    ]


def check_package_message_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    if not _same_package(current, previous):
        return []
    return [
        make_change(
            "PACKAGE_MESSAGE_NO_DELETE",
            f'Previously present message "{path}" was deleted from package "{previous.package}".',
            context,
            element_type="message",
            element_name=f"{previous.package}.{path}",
        )
        for path in deleted_paths(previous.all_messages(), current.all_messages(), previous, current)
    ]


def check_package_enum_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    if not _same_package(current, previous):
        return []
    return [
        make_change(
            "PACKAGE_ENUM_NO_DELETE",
            f'Previously present enum "{path}" was deleted from package "{previous.package}".',
            context,
            element_type="enum",
            element_name=f"{previous.package}.{path}",
        )
        for path in deleted_paths(previous.all_enums(), current.all_enums(), previous, current)
    ]


def check_package_service_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    if not _same_package(current, previous):
        return []
    current_services = current.service_by_name()
    return [
        make_change(
            "PACKAGE_SERVICE_NO_DELETE",
            f'Previously present service "{service.name}" was deleted from package '
            f'"{previous.package}".',
            context,
            element_type="service",
            element_name=f"{previous.package}.{service.name}",
        )
        for service in previous.services
        if service.name not in current_services
    ]


def check_package_extension_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    if not _same_package(current, previous):
        return []
    current_names = {e.name for e in current.extensions}
    return [
        make_change(
            "PACKAGE_EXTENSION_NO_DELETE",
            f'Previously present extension "{ext.name}" on "{strip_leading_dots(ext.extendee)}" '
            f'was deleted from package "{previous.package}".',
            context,
            element_type="extension",
            element_name=f"{previous.package}.{ext.name}",
        )
        for ext in previous.extensions
        if ext.name not in current_names
    ]


RULES: dict[str, RuleFn] = {
    "PACKAGE_ENUM_NO_DELETE": check_package_enum_no_delete,
    "PACKAGE_EXTENSION_NO_DELETE": check_package_extension_no_delete,
    "PACKAGE_MESSAGE_NO_DELETE": check_package_message_no_delete,
    "PACKAGE_NO_DELETE": check_package_no_delete,
    "PACKAGE_SERVICE_NO_DELETE": check_package_service_no_delete,
}
