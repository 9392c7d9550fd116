"""
File-level rules: deletion, package, syntax and the file-option family.

The file options are compared by one generic comparator built per
``(rule id, option, default)`` row of ``FILE_OPTION_RULES``; an absent
option is replaced by its documented default before comparison.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from protosign.breaking.rules._base import RuleFn, as_text, make_change
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import DEFAULT_SYNTAX, CanonicalFile


class FileOptionRule(NamedTuple):
    rule_id: str
    option: str
    default: Any


FILE_OPTION_RULES: tuple[FileOptionRule, ...] = (
    FileOptionRule("FILE_SAME_CC_ENABLE_ARENAS", "cc_enable_arenas", True),
    FileOptionRule("FILE_SAME_CC_GENERIC_SERVICES", "cc_generic_services", False),
    FileOptionRule("FILE_SAME_CSHARP_NAMESPACE", "csharp_namespace", ""),
    FileOptionRule("FILE_SAME_GO_PACKAGE", "go_package", ""),
    FileOptionRule("FILE_SAME_JAVA_GENERIC_SERVICES", "java_generic_services", False),
    FileOptionRule("FILE_SAME_JAVA_MULTIPLE_FILES", "java_multiple_files", False),
    FileOptionRule("FILE_SAME_JAVA_OUTER_CLASSNAME", "java_outer_classname", ""),
    FileOptionRule("FILE_SAME_JAVA_PACKAGE", "java_package", ""),
    FileOptionRule("FILE_SAME_JAVA_STRING_CHECK_UTF8", "java_string_check_utf8", False),
    FileOptionRule("FILE_SAME_OBJC_CLASS_PREFIX", "objc_class_prefix", ""),
    FileOptionRule("FILE_SAME_OPTIMIZE_FOR", "optimize_for", "SPEED"),
    FileOptionRule("FILE_SAME_PHP_CLASS_PREFIX", "php_class_prefix", ""),
    FileOptionRule("FILE_SAME_PHP_GENERIC_SERVICES", "php_generic_services", False),
    FileOptionRule("FILE_SAME_PHP_METADATA_NAMESPACE", "php_metadata_namespace", ""),
    FileOptionRule("FILE_SAME_PHP_NAMESPACE", "php_namespace", ""),
    FileOptionRule("FILE_SAME_PY_GENERIC_SERVICES", "py_generic_services", False),
    FileOptionRule("FILE_SAME_RUBY_PACKAGE", "ruby_package", ""),
    FileOptionRule("FILE_SAME_SWIFT_PREFIX", "swift_prefix", ""),
)


def same_file_option(rule_id: str, option: str, default: Any) -> RuleFn:
    """Build a rule comparing one file option with ``default`` substituted."""

    def check(
        current: CanonicalFile, previous: CanonicalFile, context: RuleContext
    ) -> list[BreakingChange]:
        old = getattr(previous, option)
        new = getattr(current, option)
        old = default if old is None else old
        new = default if new is None else new
        if old == new:
            return []
        return [
            make_change(
                rule_id,
                f'File option "{option}" changed from "{as_text(old)}" to "{as_text(new)}".',
                context,
                element_type="file",
                element_name=current.package or context.current_file,
            )
        ]

    check.__name__ = f"check_{rule_id.lower()}"
    return check


def check_file_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    """Previous file had a package and declarations; current has neither."""
    if not (previous.has_declarations and previous.package):
        return []
    if current.has_declarations or current.package:
        return []
    return [
        make_change(
            "FILE_NO_DELETE",
            f'Previously present file "{context.previous_file}" was deleted.',
            context,
            element_type="file",
            element_name=context.previous_file,
        )
    ]


def check_file_same_package(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    old = previous.package or ""
    new = current.package or ""
    if old == new:
        return []
    return [
        make_change(
            "FILE_SAME_PACKAGE",
            f'File package changed from "{old}" to "{new}".',
            context,
            element_type="package",
            element_name=new,
            previous_element_name=old,
        )
    ]


def _syntax_label(file: CanonicalFile) -> str:
    syntax = file.syntax or DEFAULT_SYNTAX
    return f"{syntax} ({file.edition})" if file.edition else syntax


def check_file_same_syntax(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    old = _syntax_label(previous)
    new = _syntax_label(current)
    if old == new:
        return []
    return [
        make_change(
            "FILE_SAME_SYNTAX",
            f'File syntax changed from "{old}" to "{new}".',
            context,
            element_type="file",
            element_name=current.package or context.current_file,
        )
    ]


RULES: dict[str, RuleFn] = {
    "FILE_NO_DELETE": check_file_no_delete,
    "FILE_SAME_PACKAGE": check_file_same_package,
    "FILE_SAME_SYNTAX": check_file_same_syntax,
    **{row.rule_id: same_file_option(*row) for row in FILE_OPTION_RULES},
}
