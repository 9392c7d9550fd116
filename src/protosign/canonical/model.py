"""
Canonical, order-independent representation of one protobuf schema file.

Every container is a tuple kept sorted by a total order, so two descriptor
trees with the same content in a different declaration order produce equal
models.  Fields and enum values sort by ``(number, name)``; named entities
sort by name.  The sort happens in field validators, so any builder (the
normalizer, the fallback extractor, a test helper) gets the invariant for
free.

Options are held once, in typed nullable slots plus an ``extra_options``
bag for anything not modeled.  The ``options`` property is a derived
read-only view merging both.

Usage::

    from protosign.canonical.model import CanonicalField, CanonicalMessage

    msg = CanonicalMessage(
        name="User",
        fields=(
            CanonicalField(name="age", number=2, type_name="int32"),
            CanonicalField(name="name", number=1, type_name="string"),
        ),
    )
    assert [f.number for f in msg.fields] == [1, 2]
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Iterable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SYNTAX = "proto2"

M = TypeVar("M", bound=BaseModel)


def _sorted(items: Iterable[M], key: Callable[[M], Any]) -> tuple[M, ...]:
    # The JSON dump breaks ties so the order is total.
    return tuple(sorted(items, key=lambda item: (key(item), item.model_dump_json())))


def default_json_name(name: str) -> str:
    """lowerCamelCase JSON name the compiler derives for ``name``."""
    parts: list[str] = []
    upper_next = False
    for ch in name:
        if ch == "_":
            upper_next = True
        elif upper_next:
            parts.append(ch.upper())
            upper_next = False
        else:
            parts.append(ch)
    return "".join(parts)


def _option_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _Canonical(BaseModel):
    """Base for all canonical records: immutable, strict keys."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class _WithOptions(_Canonical):
    """Mixin providing the derived ``options`` view."""

    _OPTION_SLOTS: ClassVar[tuple[str, ...]] = ()

    extra_options: tuple[tuple[str, str], ...] = Field(
        default=(), description="Options not modeled by a typed slot"
    )

    @field_validator("extra_options")
    @classmethod
    def _sort_extra_options(cls, v: tuple[tuple[str, str], ...]) -> tuple[tuple[str, str], ...]:
        return tuple(sorted(dict(v).items()))

    @property
    def options(self) -> dict[str, str]:
        """All explicitly set options as strings, typed slots first."""
        view: dict[str, str] = {}
        for slot in self._OPTION_SLOTS:
            value = getattr(self, slot)
            if value is not None:
                view[slot] = _option_text(value)
        view.update(self.extra_options)
        return view


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


class CanonicalRange(_Canonical):
    """Inclusive number range ``start..end``."""

    start: int
    end: int

    def contains(self, number: int) -> bool:
        return self.start <= number <= self.end

    def covers(self, other: "CanonicalRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start} to {self.end}"


def _sort_ranges(v: Iterable[CanonicalRange]) -> tuple[CanonicalRange, ...]:
    return tuple(sorted(v, key=lambda r: (r.start, r.end)))


# ---------------------------------------------------------------------------
# Fields and enums
# ---------------------------------------------------------------------------


class CanonicalField(_WithOptions):
    """A message field.  ``label`` is None for the default (optional)."""

    _OPTION_SLOTS: ClassVar[tuple[str, ...]] = (
        "ctype",
        "jstype",
        "cpp_string_type",
        "utf8_validation",
        "java_utf8_validation",
        "deprecated",
        "weak",
        "default",
        "json_name",
    )

    name: str
    number: int
    label: Optional[str] = None
    type_name: str
    oneof_index: Optional[int] = None
    default: Optional[str] = None
    json_name: Optional[str] = None
    jstype: Optional[str] = None
    ctype: Optional[str] = None
    cpp_string_type: Optional[str] = None
    utf8_validation: Optional[str] = None
    java_utf8_validation: Optional[str] = None
    deprecated: Optional[bool] = None
    weak: Optional[bool] = None

    @property
    def cardinality(self) -> str:
        return self.label or "optional"

    @property
    def effective_json_name(self) -> str:
        """JSON name used on the wire; ``json_name`` only holds overrides."""
        return self.json_name or default_json_name(self.name)


class CanonicalEnumValue(_Canonical):
    name: str
    number: int
    deprecated: Optional[bool] = None


class CanonicalEnum(_WithOptions):
    """An enum with its values sorted by ``(number, name)``."""

    _OPTION_SLOTS: ClassVar[tuple[str, ...]] = ("allow_alias", "deprecated", "closed_enum")

    name: str
    values: tuple[CanonicalEnumValue, ...] = ()
    reserved_ranges: tuple[CanonicalRange, ...] = ()
    reserved_names: tuple[str, ...] = ()
    allow_alias: Optional[bool] = None
    deprecated: Optional[bool] = None
    closed_enum: Optional[bool] = None

    @field_validator("values")
    @classmethod
    def _sort_values(cls, v: tuple[CanonicalEnumValue, ...]) -> tuple[CanonicalEnumValue, ...]:
        return _sorted(v, key=lambda value: (value.number, value.name))

    @field_validator("reserved_ranges")
    @classmethod
    def _sort_reserved_ranges(cls, v: tuple[CanonicalRange, ...]) -> tuple[CanonicalRange, ...]:
        return _sort_ranges(v)

    @field_validator("reserved_names")
    @classmethod
    def _sort_reserved_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(sorted(set(v)))

    def is_reserved(self, name: str = "", number: Optional[int] = None) -> bool:
        """True if the name or the number is retired by this enum."""
        if name and name in self.reserved_names:
            return True
        return number is not None and any(r.contains(number) for r in self.reserved_ranges)

    def names_by_number(self) -> dict[int, tuple[str, ...]]:
        grouped: dict[int, list[str]] = {}
        for value in self.values:
            grouped.setdefault(value.number, []).append(value.name)
        return {number: tuple(names) for number, names in grouped.items()}


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class CanonicalMessage(_WithOptions):
    """A message with its fields, nested declarations and reservations.

    ``oneofs`` is an ordered list: ``CanonicalField.oneof_index`` points
    into it, so builders must hand it over in a deterministic order.
    """

    _OPTION_SLOTS: ClassVar[tuple[str, ...]] = (
        "message_set_wire_format",
        "no_standard_descriptor_accessor",
        "deprecated",
    )

    name: str
    fields: tuple[CanonicalField, ...] = ()
    nested_messages: tuple["CanonicalMessage", ...] = ()
    nested_enums: tuple[CanonicalEnum, ...] = ()
    oneofs: tuple[str, ...] = ()
    reserved_ranges: tuple[CanonicalRange, ...] = ()
    reserved_names: tuple[str, ...] = ()
    extension_ranges: tuple[CanonicalRange, ...] = ()
    message_set_wire_format: Optional[bool] = None
    no_standard_descriptor_accessor: Optional[bool] = None
    deprecated: Optional[bool] = None

    @field_validator("fields")
    @classmethod
    def _sort_fields(cls, v: tuple[CanonicalField, ...]) -> tuple[CanonicalField, ...]:
        return _sorted(v, key=lambda f: (f.number, f.name))

    @field_validator("nested_messages")
    @classmethod
    def _sort_nested_messages(cls, v: tuple["CanonicalMessage", ...]) -> tuple["CanonicalMessage", ...]:
        return _sorted(v, key=lambda m: m.name)

    @field_validator("nested_enums")
    @classmethod
    def _sort_nested_enums(cls, v: tuple[CanonicalEnum, ...]) -> tuple[CanonicalEnum, ...]:
        return _sorted(v, key=lambda e: e.name)

    @field_validator("reserved_ranges", "extension_ranges")
    @classmethod
    def _sort_ranges(cls, v: tuple[CanonicalRange, ...]) -> tuple[CanonicalRange, ...]:
        return _sort_ranges(v)

    @field_validator("reserved_names")
    @classmethod
    def _sort_reserved_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(sorted(set(v)))

    def is_reserved(self, name: str = "", number: Optional[int] = None) -> bool:
        """True if the name or the number is retired by this message."""
        if name and name in self.reserved_names:
            return True
        return number is not None and any(r.contains(number) for r in self.reserved_ranges)

    def field_by_number(self) -> dict[int, CanonicalField]:
        return {f.number: f for f in self.fields}

    def oneof_name(self, field: CanonicalField) -> Optional[str]:
        """Name of the oneof ``field`` belongs to, or None."""
        if field.oneof_index is None or not 0 <= field.oneof_index < len(self.oneofs):
            return None
        return self.oneofs[field.oneof_index]


# ---------------------------------------------------------------------------
# Services and extensions
# ---------------------------------------------------------------------------


class CanonicalMethod(_Canonical):
    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False
    idempotency_level: Optional[str] = None
    deprecated: Optional[bool] = None


class CanonicalService(_Canonical):
    name: str
    methods: tuple[CanonicalMethod, ...] = ()
    deprecated: Optional[bool] = None

    @field_validator("methods")
    @classmethod
    def _sort_methods(cls, v: tuple[CanonicalMethod, ...]) -> tuple[CanonicalMethod, ...]:
        return _sorted(v, key=lambda m: m.name)

    def method_by_name(self) -> dict[str, CanonicalMethod]:
        return {m.name: m for m in self.methods}


class CanonicalExtension(_Canonical):
    """An extension field; ``name`` is qualified by its declaring message."""

    name: str
    number: int
    extendee: str
    type_name: str
    label: Optional[str] = None
    default: Optional[str] = None
    deprecated: Optional[bool] = None


# ---------------------------------------------------------------------------
# File
# ---------------------------------------------------------------------------


class CanonicalFile(_WithOptions):
    """Root of the canonical model for one schema file."""

    _OPTION_SLOTS: ClassVar[tuple[str, ...]] = (
        "java_package",
        "java_outer_classname",
        "java_multiple_files",
        "java_string_check_utf8",
        "java_generic_services",
        "go_package",
        "csharp_namespace",
        "objc_class_prefix",
        "php_class_prefix",
        "php_namespace",
        "php_metadata_namespace",
        "php_generic_services",
        "ruby_package",
        "swift_prefix",
        "optimize_for",
        "cc_generic_services",
        "py_generic_services",
        "cc_enable_arenas",
    )

    package: Optional[str] = None
    syntax: str = DEFAULT_SYNTAX
    edition: Optional[str] = None
    imports: tuple[str, ...] = ()
    messages: tuple[CanonicalMessage, ...] = ()
    enums: tuple[CanonicalEnum, ...] = ()
    services: tuple[CanonicalService, ...] = ()
    extensions: tuple[CanonicalExtension, ...] = ()

    java_package: Optional[str] = None
    java_outer_classname: Optional[str] = None
    java_multiple_files: Optional[bool] = None
    java_string_check_utf8: Optional[bool] = None
    java_generic_services: Optional[bool] = None
    go_package: Optional[str] = None
    csharp_namespace: Optional[str] = None
    objc_class_prefix: Optional[str] = None
    php_class_prefix: Optional[str] = None
    php_namespace: Optional[str] = None
    php_metadata_namespace: Optional[str] = None
    php_generic_services: Optional[bool] = None
    ruby_package: Optional[str] = None
    swift_prefix: Optional[str] = None
    optimize_for: Optional[str] = None
    cc_generic_services: Optional[bool] = None
    py_generic_services: Optional[bool] = None
    cc_enable_arenas: Optional[bool] = None

    @field_validator("imports")
    @classmethod
    def _sort_imports(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(sorted(set(v)))

    @field_validator("messages")
    @classmethod
    def _sort_messages(cls, v: tuple[CanonicalMessage, ...]) -> tuple[CanonicalMessage, ...]:
        return _sorted(v, key=lambda m: m.name)

    @field_validator("enums")
    @classmethod
    def _sort_enums(cls, v: tuple[CanonicalEnum, ...]) -> tuple[CanonicalEnum, ...]:
        return _sorted(v, key=lambda e: e.name)

    @field_validator("services")
    @classmethod
    def _sort_services(cls, v: tuple[CanonicalService, ...]) -> tuple[CanonicalService, ...]:
        return _sorted(v, key=lambda s: s.name)

    @field_validator("extensions")
    @classmethod
    def _sort_extensions(cls, v: tuple[CanonicalExtension, ...]) -> tuple[CanonicalExtension, ...]:
        return _sorted(v, key=lambda e: (e.extendee, e.number, e.name))

    @property
    def has_declarations(self) -> bool:
        return bool(self.messages or self.enums or self.services or self.extensions)

    def all_messages(self) -> dict[str, CanonicalMessage]:
        """Every message, nested ones included, keyed by dotted path."""
        found: dict[str, CanonicalMessage] = {}

        def walk(messages: tuple[CanonicalMessage, ...], prefix: str) -> None:
            for message in messages:
                path = f"{prefix}{message.name}"
                found[path] = message
                walk(message.nested_messages, f"{path}.")

        walk(self.messages, "")
        return found

    def all_enums(self) -> dict[str, CanonicalEnum]:
        """Every enum, nested ones included, keyed by dotted path."""
        found = {e.name: e for e in self.enums}
        for path, message in self.all_messages().items():
            for enum in message.nested_enums:
                found[f"{path}.{enum.name}"] = enum
        return found

    def service_by_name(self) -> dict[str, CanonicalService]:
        return {s.name: s for s in self.services}


CanonicalMessage.model_rebuild()
