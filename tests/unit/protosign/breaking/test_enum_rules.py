"""Tests for enum breaking-change rules."""

from __future__ import annotations

from protosign.breaking.rules import ALL_RULES
from protosign.breaking.schema import RuleContext
from protosign.canonical.model import (
    CanonicalEnum,
    CanonicalEnumValue,
    CanonicalFile,
    CanonicalMessage,
    CanonicalRange,
)


def _make_enum(*values: tuple[str, int], name: str = "Status", **kwargs) -> CanonicalEnum:
    return CanonicalEnum(
        name=name,
        values=tuple(CanonicalEnumValue(name=n, number=v) for n, v in values),
        **kwargs,
    )


def _make_file(*enums: CanonicalEnum, syntax: str = "proto3", messages=()) -> CanonicalFile:
    return CanonicalFile(package="acme.v1", syntax=syntax, enums=enums, messages=messages)


def _run(rule_id: str, current: CanonicalFile, previous: CanonicalFile):
    return ALL_RULES[rule_id](current, previous, RuleContext())


STATUS = (("UNSPECIFIED", 0), ("ACTIVE", 1), ("INACTIVE", 2))


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class TestEnumValueNoDelete:
    def test_deleted_value_reported(self):
        previous = _make_file(_make_enum(*STATUS))
        current = _make_file(_make_enum(*STATUS[:2]))

        changes = _run("ENUM_VALUE_NO_DELETE", current, previous)

        assert len(changes) == 1
        assert "INACTIVE" in changes[0].message
        assert "number 2" in changes[0].message
        assert changes[0].location.element_name == "Status.INACTIVE"

    def test_alias_counts_as_present(self):
        previous = _make_file(
            _make_enum(("STARTED", 1), ("RUNNING", 1), ("UNKNOWN", 0), allow_alias=True)
        )
        current = _make_file(_make_enum(("STARTED", 1), ("UNKNOWN", 0), allow_alias=True))
        assert _run("ENUM_VALUE_NO_DELETE", current, previous) == []

    def test_unless_number_reserved(self):
        previous = _make_file(_make_enum(*STATUS))
        current = _make_file(
            _make_enum(*STATUS[:2], reserved_ranges=(CanonicalRange(start=2, end=2),))
        )
        assert _run("ENUM_VALUE_NO_DELETE_UNLESS_NUMBER_RESERVED", current, previous) == []
        assert len(_run("ENUM_VALUE_NO_DELETE_UNLESS_NAME_RESERVED", current, previous)) == 1

    def test_unless_name_reserved(self):
        previous = _make_file(_make_enum(*STATUS))
        current = _make_file(_make_enum(*STATUS[:2], reserved_names=("INACTIVE",)))
        assert _run("ENUM_VALUE_NO_DELETE_UNLESS_NAME_RESERVED", current, previous) == []
        assert len(_run("ENUM_VALUE_NO_DELETE_UNLESS_NUMBER_RESERVED", current, previous)) == 1

    def test_every_alias_name_must_be_reserved(self):
        previous = _make_file(
            _make_enum(("UNKNOWN", 0), ("STARTED", 1), ("RUNNING", 1), allow_alias=True)
        )
        current = _make_file(_make_enum(("UNKNOWN", 0), reserved_names=("STARTED",)))
        assert len(_run("ENUM_VALUE_NO_DELETE_UNLESS_NAME_RESERVED", current, previous)) == 1


class TestEnumValueSameName:
    def test_rename_reported(self):
        previous = _make_file(_make_enum(*STATUS))
        current = _make_file(_make_enum(("UNSPECIFIED", 0), ("ENABLED", 1), ("INACTIVE", 2)))

        changes = _run("ENUM_VALUE_SAME_NAME", current, previous)

        assert len(changes) == 1
        assert 'from "ACTIVE" to "ENABLED"' in changes[0].message

    def test_alias_order_is_irrelevant(self):
        previous = _make_file(_make_enum(("A", 1), ("B", 1), ("Z", 0), allow_alias=True))
        current = _make_file(_make_enum(("B", 1), ("A", 1), ("Z", 0), allow_alias=True))
        assert _run("ENUM_VALUE_SAME_NAME", current, previous) == []


# ---------------------------------------------------------------------------
# Enum level
# ---------------------------------------------------------------------------


class TestEnumLevel:
    def test_deleted_enum_reported(self):
        previous = _make_file(_make_enum(*STATUS), _make_enum(("X", 0), name="Kind"))
        current = _make_file(_make_enum(*STATUS))
        changes = _run("ENUM_NO_DELETE", current, previous)
        assert [c.location.element_name for c in changes] == ["Kind"]

    def test_nested_enum_reported_through_deleted_message(self):
        holder = CanonicalMessage(name="Holder", nested_enums=(_make_enum(("X", 0), name="Kind"),))
        previous = _make_file(messages=(holder,))
        current = _make_file()
        assert _run("ENUM_NO_DELETE", current, previous) == []

    def test_nested_enum_deleted_from_surviving_message(self):
        holder = CanonicalMessage(name="Holder", nested_enums=(_make_enum(("X", 0), name="Kind"),))
        previous = _make_file(messages=(holder,))
        current = _make_file(messages=(CanonicalMessage(name="Holder"),))
        changes = _run("ENUM_NO_DELETE", current, previous)
        assert [c.location.element_name for c in changes] == ["Holder.Kind"]

    def test_closedness_follows_syntax(self):
        previous = _make_file(_make_enum(*STATUS), syntax="proto2")
        current = _make_file(_make_enum(*STATUS), syntax="proto3")
        changes = _run("ENUM_SAME_TYPE", current, previous)
        assert len(changes) == 1
        assert "closed to open" in changes[0].message

    def test_explicit_closed_feature_wins(self):
        previous = _make_file(_make_enum(*STATUS), syntax="proto2")
        current = _make_file(_make_enum(*STATUS, closed_enum=True), syntax="editions")
        assert _run("ENUM_SAME_TYPE", current, previous) == []

    def test_json_format(self):
        previous = _make_file(_make_enum(*STATUS))
        current = _make_file(
            _make_enum(*STATUS, extra_options=(("json_format", "LEGACY_BEST_EFFORT"),))
        )
        changes = _run("ENUM_SAME_JSON_FORMAT", current, previous)
        assert len(changes) == 1
        assert 'from "ALLOW" to "LEGACY_BEST_EFFORT"' in changes[0].message
