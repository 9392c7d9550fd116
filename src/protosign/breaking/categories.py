"""
Static rule id -> categories table.

Rules use it to tag the changes they emit; the registry uses it to build
``Rule`` entries.  The mapping is read-only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from protosign.breaking.schema import BreakingCategory

FILE = BreakingCategory.FILE
PACKAGE = BreakingCategory.PACKAGE
WIRE = BreakingCategory.WIRE
WIRE_JSON = BreakingCategory.WIRE_JSON

_SOURCE = (FILE, PACKAGE)
_WIRE_ALL = (FILE, PACKAGE, WIRE_JSON, WIRE)
_JSON_ALL = (FILE, PACKAGE, WIRE_JSON)

_FILE_OPTION_RULES = (
    "FILE_SAME_CC_ENABLE_ARENAS",
    "FILE_SAME_CC_GENERIC_SERVICES",
    "FILE_SAME_CSHARP_NAMESPACE",
    "FILE_SAME_GO_PACKAGE",
    "FILE_SAME_JAVA_GENERIC_SERVICES",
    "FILE_SAME_JAVA_MULTIPLE_FILES",
    "FILE_SAME_JAVA_OUTER_CLASSNAME",
    "FILE_SAME_JAVA_PACKAGE",
    "FILE_SAME_JAVA_STRING_CHECK_UTF8",
    "FILE_SAME_OBJC_CLASS_PREFIX",
    "FILE_SAME_OPTIMIZE_FOR",
    "FILE_SAME_PHP_CLASS_PREFIX",
    "FILE_SAME_PHP_GENERIC_SERVICES",
    "FILE_SAME_PHP_METADATA_NAMESPACE",
    "FILE_SAME_PHP_NAMESPACE",
    "FILE_SAME_PY_GENERIC_SERVICES",
    "FILE_SAME_RUBY_PACKAGE",
    "FILE_SAME_SWIFT_PREFIX",
)

RULE_CATEGORIES: Mapping[str, tuple[BreakingCategory, ...]] = MappingProxyType(
    {
        # Enums
        "ENUM_NO_DELETE": (FILE,),
        "ENUM_SAME_JSON_FORMAT": _JSON_ALL,
        "ENUM_SAME_TYPE": _WIRE_ALL,
        "ENUM_VALUE_NO_DELETE": _SOURCE,
        "ENUM_VALUE_NO_DELETE_UNLESS_NAME_RESERVED": (WIRE_JSON,),
        "ENUM_VALUE_NO_DELETE_UNLESS_NUMBER_RESERVED": (WIRE_JSON, WIRE),
        "ENUM_VALUE_SAME_NAME": _JSON_ALL,
        # Extensions
        "EXTENSION_MESSAGE_NO_DELETE": _SOURCE,
        "EXTENSION_NO_DELETE": (FILE,),
        # Fields
        "FIELD_NO_DELETE": _SOURCE,
        "FIELD_NO_DELETE_UNLESS_NAME_RESERVED": (WIRE_JSON,),
        "FIELD_NO_DELETE_UNLESS_NUMBER_RESERVED": (WIRE_JSON, WIRE),
        "FIELD_SAME_CARDINALITY": _SOURCE,
        "FIELD_SAME_CPP_STRING_TYPE": _SOURCE,
        "FIELD_SAME_CTYPE": _SOURCE,
        "FIELD_SAME_DEFAULT": _WIRE_ALL,
        "FIELD_SAME_JAVA_UTF8_VALIDATION": _SOURCE,
        "FIELD_SAME_JSON_NAME": _JSON_ALL,
        "FIELD_SAME_JSTYPE": _SOURCE,
        "FIELD_SAME_LABEL": _SOURCE,
        "FIELD_SAME_NAME": _JSON_ALL,
        "FIELD_SAME_ONEOF": _WIRE_ALL,
        "FIELD_SAME_TYPE": _SOURCE,
        "FIELD_SAME_UTF8_VALIDATION": _WIRE_ALL,
        "FIELD_WIRE_COMPATIBLE_CARDINALITY": (WIRE,),
        "FIELD_WIRE_COMPATIBLE_TYPE": (WIRE,),
        "FIELD_WIRE_JSON_COMPATIBLE_CARDINALITY": (WIRE_JSON,),
        "FIELD_WIRE_JSON_COMPATIBLE_TYPE": (WIRE_JSON,),
        # Files
        "FILE_NO_DELETE": (FILE,),
        "FILE_SAME_PACKAGE": (FILE,),
        "FILE_SAME_SYNTAX": _SOURCE,
        **{rule_id: (FILE,) for rule_id in _FILE_OPTION_RULES},
        # Messages
        "MESSAGE_NO_DELETE": (FILE,),
        "MESSAGE_NO_REMOVE_STANDARD_DESCRIPTOR_ACCESSOR": _SOURCE,
        "MESSAGE_SAME_JSON_FORMAT": _JSON_ALL,
        "MESSAGE_SAME_MESSAGE_SET_WIRE_FORMAT": _WIRE_ALL,
        "MESSAGE_SAME_REQUIRED_FIELDS": _WIRE_ALL,
        "ONEOF_NO_DELETE": _SOURCE,
        # Packages
        "PACKAGE_ENUM_NO_DELETE": (PACKAGE,),
        "PACKAGE_EXTENSION_NO_DELETE": (PACKAGE,),
        "PACKAGE_MESSAGE_NO_DELETE": (PACKAGE,),
        "PACKAGE_NO_DELETE": (PACKAGE,),
        "PACKAGE_SERVICE_NO_DELETE": (PACKAGE,),
        # Reserved
        "RESERVED_ENUM_NO_DELETE": _SOURCE,
        "RESERVED_MESSAGE_NO_DELETE": _SOURCE,
        # Services
        "RPC_NO_DELETE": _SOURCE,
        "RPC_SAME_CLIENT_STREAMING": _WIRE_ALL,
        "RPC_SAME_IDEMPOTENCY_LEVEL": _WIRE_ALL,
        "RPC_SAME_REQUEST_TYPE": _WIRE_ALL,
        "RPC_SAME_RESPONSE_TYPE": _WIRE_ALL,
        "RPC_SAME_SERVER_STREAMING": _WIRE_ALL,
        "SERVICE_NO_DELETE": (FILE,),
    }
)


def rules_in_category(category: BreakingCategory) -> list[str]:
    """Sorted rule ids tagged with ``category``."""
    return sorted(rule_id for rule_id, cats in RULE_CATEGORIES.items() if category in cats)
