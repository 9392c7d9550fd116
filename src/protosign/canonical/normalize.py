"""
Normalizer: ``FileDescriptorProto`` -> ``CanonicalFile``.

Total over well-formed descriptors and order-independent: permuting any
sibling list of the descriptor produces an equal canonical model.  Only
options explicitly present on the descriptor are read, so an absent
option stays distinct from an explicit ``false``.

Option and feature access goes through the descriptor's own field
metadata, so descriptor fields that a given ``protobuf`` release does not
define (e.g. ``php_generic_services`` on newer releases) read as absent
instead of raising.

Usage::

    from google.protobuf import descriptor_pb2
    from protosign.canonical.normalize import normalize_file

    descriptor = descriptor_pb2.FileDescriptorProto.FromString(raw_bytes)
    canonical = normalize_file(descriptor)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from google.protobuf import descriptor_pb2
from google.protobuf.message import Message

from protosign.canonical.model import (
    DEFAULT_SYNTAX,
    CanonicalEnum,
    CanonicalEnumValue,
    CanonicalExtension,
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
    CanonicalMethod,
    CanonicalRange,
    CanonicalService,
    default_json_name,
)

logger = logging.getLogger(__name__)

_FDP = descriptor_pb2.FieldDescriptorProto

PRIMITIVE_KEYWORDS: dict[int, str] = {
    _FDP.TYPE_DOUBLE: "double",
    _FDP.TYPE_FLOAT: "float",
    _FDP.TYPE_INT64: "int64",
    _FDP.TYPE_UINT64: "uint64",
    _FDP.TYPE_INT32: "int32",
    _FDP.TYPE_FIXED64: "fixed64",
    _FDP.TYPE_FIXED32: "fixed32",
    _FDP.TYPE_BOOL: "bool",
    _FDP.TYPE_STRING: "string",
    _FDP.TYPE_BYTES: "bytes",
    _FDP.TYPE_UINT32: "uint32",
    _FDP.TYPE_SFIXED32: "sfixed32",
    _FDP.TYPE_SFIXED64: "sfixed64",
    _FDP.TYPE_SINT32: "sint32",
    _FDP.TYPE_SINT64: "sint64",
}

_NAMED_KEYWORDS: dict[int, str] = {
    _FDP.TYPE_MESSAGE: "message",
    _FDP.TYPE_ENUM: "enum",
    _FDP.TYPE_GROUP: "group",
}

_LABELS: dict[int, Optional[str]] = {
    _FDP.LABEL_OPTIONAL: None,
    _FDP.LABEL_REQUIRED: "required",
    _FDP.LABEL_REPEATED: "repeated",
}

# FieldOptions.CType -> C++ string type
_CPP_STRING_TYPES = {"STRING": "STRING", "CORD": "CORD", "STRING_PIECE": "VIEW"}

# Field-level options mirrored into the option bag as-is
_EXTRA_FIELD_OPTIONS = ("packed", "lazy", "unverified_lazy", "debug_redact")

# Editions features that change the canonical model; each scope inherits
# them from its parent (file -> message -> field or enum).
_INHERITED_FEATURES = ("field_presence", "enum_type", "json_format", "utf8_validation")

_FILE_OPTIONS = (
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


# ---------------------------------------------------------------------------
# Descriptor access helpers
# ---------------------------------------------------------------------------


def _explicit(message: Optional[Message], name: str) -> Any:
    """Return ``message.<name>`` if explicitly set, else None.

    Enum-typed fields come back as their symbolic name.
    """
    if message is None:
        return None
    field = message.DESCRIPTOR.fields_by_name.get(name)
    if field is None or not message.HasField(name):
        return None
    value = getattr(message, name)
    if field.enum_type is not None:
        enum_value = field.enum_type.values_by_number.get(value)
        return enum_value.name if enum_value is not None else str(value)
    return value


def _options(descriptor: Message) -> Optional[Message]:
    return descriptor.options if descriptor.HasField("options") else None


def _feature(options: Optional[Message], name: str) -> Optional[str]:
    """Symbolic value of an explicitly set editions feature."""
    if options is None or "features" not in options.DESCRIPTOR.fields_by_name:
        return None
    if not options.HasField("features"):
        return None
    return _explicit(options.features, name)


def _resolve_features(
    options: Optional[Message], inherited: Mapping[str, str]
) -> dict[str, str]:
    """Effective editions features: ``inherited`` overlaid with explicit ones."""
    resolved = dict(inherited)
    for name in _INHERITED_FEATURES:
        value = _feature(options, name)
        if value is not None:
            resolved[name] = value
    return resolved


def _ranges(ranges: Any, exclusive_end: bool) -> tuple[CanonicalRange, ...]:
    adjust = 1 if exclusive_end else 0
    return tuple(CanonicalRange(start=r.start, end=r.end - adjust) for r in ranges)


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class _Normalizer:
    """Walks one file descriptor; holds the file-level context."""

    def __init__(self, descriptor: descriptor_pb2.FileDescriptorProto) -> None:
        self._descriptor = descriptor
        self._file_options = _options(descriptor)
        self._java_check_utf8 = _explicit(self._file_options, "java_string_check_utf8")
        self._file_features = _resolve_features(self._file_options, {})
        self._extensions: list[CanonicalExtension] = []

    def normalize(self) -> CanonicalFile:
        d = self._descriptor
        package = d.package or None
        scope = f".{package}" if package else ""

        messages = tuple(
            self._message(
                m, path=m.name, scope=f"{scope}.{m.name}", inherited=self._file_features
            )
            for m in d.message_type
            if not self._is_map_entry(m)
        )
        enums = tuple(self._enum(e, self._file_features) for e in d.enum_type)
        services = tuple(self._service(s) for s in d.service)
        for ext in d.extension:
            self._extensions.append(self._extension(ext, prefix=""))

        file_options = {
            name: _explicit(self._file_options, name) for name in _FILE_OPTIONS
        }
        extra: list[tuple[str, str]] = []
        json_format = _feature(self._file_options, "json_format")
        if json_format is not None:
            extra.append(("json_format", json_format))

        syntax = d.syntax or DEFAULT_SYNTAX
        edition = _explicit(d, "edition") if syntax == "editions" else None

        canonical = CanonicalFile(
            package=package,
            syntax=syntax,
            edition=edition,
            imports=tuple(d.dependency),
            messages=messages,
            enums=enums,
            services=services,
            extensions=tuple(self._extensions),
            extra_options=tuple(extra),
            **file_options,
        )
        logger.debug(
            "Normalized %s: package=%s messages=%d enums=%d services=%d",
            d.name or "<unnamed>",
            package,
            len(messages),
            len(enums),
            len(services),
        )
        return canonical

    # -- messages ----------------------------------------------------------

    @staticmethod
    def _is_map_entry(message: descriptor_pb2.DescriptorProto) -> bool:
        return bool(_explicit(_options(message), "map_entry"))

    def _message(
        self,
        message: descriptor_pb2.DescriptorProto,
        path: str,
        scope: str,
        inherited: Mapping[str, str],
    ) -> CanonicalMessage:
        options = _options(message)
        features = _resolve_features(options, inherited)
        map_entries = {
            f"{scope}.{nested.name}": nested
            for nested in message.nested_type
            if self._is_map_entry(nested)
        }

        # Proto3 ``optional`` creates synthetic oneofs; they are not real groups.
        synthetic = {
            f.oneof_index
            for f in message.field
            if f.HasField("oneof_index") and f.proto3_optional
        }
        real_oneofs = {
            index: decl.name
            for index, decl in enumerate(message.oneof_decl)
            if index not in synthetic
        }
        oneof_names = tuple(sorted(real_oneofs.values()))
        oneof_position = {
            index: oneof_names.index(name) for index, name in real_oneofs.items()
        }

        fields = tuple(
            self._field(f, map_entries, oneof_position, features) for f in message.field
        )
        for ext in message.extension:
            self._extensions.append(self._extension(ext, prefix=f"{path}."))

        extra: list[tuple[str, str]] = []
        json_format = features.get("json_format")
        if json_format is not None:
            extra.append(("json_format", json_format))

        return CanonicalMessage(
            name=message.name,
            fields=fields,
            nested_messages=tuple(
                self._message(
                    n,
                    path=f"{path}.{n.name}",
                    scope=f"{scope}.{n.name}",
                    inherited=features,
                )
                for n in message.nested_type
                if not self._is_map_entry(n)
            ),
            nested_enums=tuple(self._enum(e, features) for e in message.enum_type),
            oneofs=oneof_names,
            reserved_ranges=_ranges(message.reserved_range, exclusive_end=True),
            reserved_names=tuple(message.reserved_name),
            extension_ranges=_ranges(message.extension_range, exclusive_end=True),
            message_set_wire_format=_explicit(options, "message_set_wire_format"),
            no_standard_descriptor_accessor=_explicit(
                options, "no_standard_descriptor_accessor"
            ),
            deprecated=_explicit(options, "deprecated"),
            extra_options=tuple(extra),
        )

    # -- fields ------------------------------------------------------------

    @staticmethod
    def _type_name(field: descriptor_pb2.FieldDescriptorProto) -> str:
        if field.type_name:
            return field.type_name
        if field.type in PRIMITIVE_KEYWORDS:
            return PRIMITIVE_KEYWORDS[field.type]
        return _NAMED_KEYWORDS.get(field.type, "message")

    def _field(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        map_entries: dict[str, descriptor_pb2.DescriptorProto],
        oneof_position: dict[int, int],
        inherited: Mapping[str, str],
    ) -> CanonicalField:
        type_name = self._type_name(field)
        entry = map_entries.get(field.type_name) if field.type_name else None
        if entry is not None:
            by_number = {f.number: f for f in entry.field}
            key = self._type_name(by_number[1]) if 1 in by_number else "string"
            value = self._type_name(by_number[2]) if 2 in by_number else "bytes"
            type_name = f"map<{key}, {value}>"

        options = _options(field)
        features = _resolve_features(options, inherited)
        label = _LABELS.get(field.label)
        # Presence does not apply to repeated fields or oneof members.
        if (
            features.get("field_presence") == "LEGACY_REQUIRED"
            and label is None
            and not field.HasField("oneof_index")
        ):
            label = "required"

        json_name = None
        if field.HasField("json_name") and field.json_name != default_json_name(field.name):
            json_name = field.json_name

        oneof_index = None
        if field.HasField("oneof_index"):
            oneof_index = oneof_position.get(field.oneof_index)

        ctype = _explicit(options, "ctype")
        java_utf8 = None
        if type_name == "string" and self._java_check_utf8 is not None:
            java_utf8 = "VERIFY" if self._java_check_utf8 else "DEFAULT"

        extra: list[tuple[str, str]] = []
        for name in _EXTRA_FIELD_OPTIONS:
            value = _explicit(options, name)
            if value is not None:
                extra.append((name, "true" if value else "false"))
        if field.proto3_optional:
            extra.append(("proto3_optional", "true"))

        return CanonicalField(
            name=field.name,
            number=field.number,
            label=label,
            type_name=type_name,
            oneof_index=oneof_index,
            default=field.default_value if field.HasField("default_value") else None,
            json_name=json_name,
            jstype=_explicit(options, "jstype"),
            ctype=ctype,
            cpp_string_type=_CPP_STRING_TYPES.get(ctype) if ctype else None,
            utf8_validation=(
                features.get("utf8_validation") if type_name == "string" else None
            ),
            java_utf8_validation=java_utf8,
            deprecated=_explicit(options, "deprecated"),
            weak=_explicit(options, "weak"),
            extra_options=tuple(extra),
        )

    def _extension(
        self, field: descriptor_pb2.FieldDescriptorProto, prefix: str
    ) -> CanonicalExtension:
        options = _options(field)
        return CanonicalExtension(
            name=f"{prefix}{field.name}",
            number=field.number,
            extendee=field.extendee,
            type_name=self._type_name(field),
            label=_LABELS.get(field.label),
            default=field.default_value if field.HasField("default_value") else None,
            deprecated=_explicit(options, "deprecated"),
        )

    # -- enums and services ------------------------------------------------

    def _enum(
        self, enum: descriptor_pb2.EnumDescriptorProto, inherited: Mapping[str, str]
    ) -> CanonicalEnum:
        options = _options(enum)
        features = _resolve_features(options, inherited)
        closed = None
        enum_type = features.get("enum_type")
        if enum_type is not None:
            closed = enum_type == "CLOSED"
        extra: list[tuple[str, str]] = []
        json_format = features.get("json_format")
        if json_format is not None:
            extra.append(("json_format", json_format))

        return CanonicalEnum(
            name=enum.name,
            values=tuple(
                CanonicalEnumValue(
                    name=v.name,
                    number=v.number,
                    deprecated=_explicit(_options(v), "deprecated"),
                )
                for v in enum.value
            ),
            # Enum reserved ranges are inclusive in the descriptor already.
            reserved_ranges=_ranges(enum.reserved_range, exclusive_end=False),
            reserved_names=tuple(enum.reserved_name),
            allow_alias=_explicit(options, "allow_alias"),
            deprecated=_explicit(options, "deprecated"),
            closed_enum=closed,
            extra_options=tuple(extra),
        )

    def _service(self, service: descriptor_pb2.ServiceDescriptorProto) -> CanonicalService:
        return CanonicalService(
            name=service.name,
            methods=tuple(
                CanonicalMethod(
                    name=m.name,
                    input_type=m.input_type,
                    output_type=m.output_type,
                    client_streaming=m.client_streaming,
                    server_streaming=m.server_streaming,
                    idempotency_level=_explicit(_options(m), "idempotency_level"),
                    deprecated=_explicit(_options(m), "deprecated"),
                )
                for m in service.method
            ),
            deprecated=_explicit(_options(service), "deprecated"),
        )


def normalize_file(descriptor: descriptor_pb2.FileDescriptorProto) -> CanonicalFile:
    """Convert a parsed file descriptor into its canonical model."""
    return _Normalizer(descriptor).normalize()
