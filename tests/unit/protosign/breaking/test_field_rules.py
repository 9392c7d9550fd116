"""Tests for field breaking-change rules."""

from __future__ import annotations

from protosign.breaking.rules import ALL_RULES
from protosign.breaking.schema import BreakingCategory, RuleContext
from protosign.canonical.model import (
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
    CanonicalRange,
)


def _make_field(name: str, number: int, type_name: str = "string", **kwargs) -> CanonicalField:
    return CanonicalField(name=name, number=number, type_name=type_name, **kwargs)


def _make_file(*fields: CanonicalField, syntax: str = "proto3", **message_kwargs) -> CanonicalFile:
    return CanonicalFile(
        package="acme.users.v1",
        syntax=syntax,
        messages=(CanonicalMessage(name="User", fields=fields, **message_kwargs),),
    )


def _run(rule_id: str, current: CanonicalFile, previous: CanonicalFile):
    return ALL_RULES[rule_id](current, previous, RuleContext())


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


class TestFieldNoDelete:
    def test_deleted_field_reported(self):
        previous = _make_file(_make_field("name", 1), _make_field("age", 2, "int32"))
        current = _make_file(_make_field("name", 1))

        changes = _run("FIELD_NO_DELETE", current, previous)

        assert len(changes) == 1
        change = changes[0]
        assert change.rule_id == "FIELD_NO_DELETE"
        assert '"age"' in change.message
        assert "number 2" in change.message
        assert change.location.element_name == "User.age"
        assert change.previous_location.file_path == "previous"
        assert change.categories == (BreakingCategory.FILE, BreakingCategory.PACKAGE)

    def test_renamed_field_is_not_a_delete(self):
        previous = _make_file(_make_field("name", 1))
        current = _make_file(_make_field("full_name", 1))
        assert _run("FIELD_NO_DELETE", current, previous) == []

    def test_deleted_message_does_not_report_fields(self):
        previous = _make_file(_make_field("name", 1))
        current = CanonicalFile(package="acme.users.v1", syntax="proto3")
        assert _run("FIELD_NO_DELETE", current, previous) == []

    def test_unless_number_reserved(self):
        previous = _make_file(_make_field("name", 1), _make_field("age", 2, "int32"))
        reserved = _make_file(
            _make_field("name", 1), reserved_ranges=(CanonicalRange(start=2, end=2),)
        )
        bare = _make_file(_make_field("name", 1))

        assert _run("FIELD_NO_DELETE_UNLESS_NUMBER_RESERVED", reserved, previous) == []
        assert len(_run("FIELD_NO_DELETE_UNLESS_NUMBER_RESERVED", bare, previous)) == 1

    def test_unless_name_reserved(self):
        previous = _make_file(_make_field("name", 1), _make_field("age", 2, "int32"))
        reserved = _make_file(_make_field("name", 1), reserved_names=("age",))
        wrong_name = _make_file(_make_field("name", 1), reserved_names=("years",))

        assert _run("FIELD_NO_DELETE_UNLESS_NAME_RESERVED", reserved, previous) == []
        assert len(_run("FIELD_NO_DELETE_UNLESS_NAME_RESERVED", wrong_name, previous)) == 1

    def test_number_reservation_does_not_satisfy_name_variant(self):
        previous = _make_file(_make_field("name", 1), _make_field("age", 2, "int32"))
        current = _make_file(
            _make_field("name", 1), reserved_ranges=(CanonicalRange(start=2, end=2),)
        )
        assert len(_run("FIELD_NO_DELETE_UNLESS_NAME_RESERVED", current, previous)) == 1


# ---------------------------------------------------------------------------
# Names and oneofs
# ---------------------------------------------------------------------------


class TestFieldIdentity:
    def test_rename_reported_once(self):
        previous = _make_file(_make_field("name", 1))
        current = _make_file(_make_field("full_name", 1))

        changes = _run("FIELD_SAME_NAME", current, previous)

        assert len(changes) == 1
        assert changes[0].message == (
            'Field 1 name changed from "name" to "full_name" in message "User".'
        )
        assert changes[0].location.element_name == "User.full_name"
        assert changes[0].previous_location.element_name == "User.name"

    def test_json_name_change(self):
        previous = _make_file(_make_field("user_name", 1))
        current = _make_file(_make_field("user_name", 1, json_name="login"))
        changes = _run("FIELD_SAME_JSON_NAME", current, previous)
        assert len(changes) == 1
        assert 'from "userName" to "login"' in changes[0].message

    def test_rename_keeping_explicit_json_name_is_clean(self):
        previous = _make_file(_make_field("foo_bar", 1, json_name="fooBar"))
        current = _make_file(_make_field("foo_baz", 1, json_name="fooBar"))
        assert _run("FIELD_SAME_JSON_NAME", current, previous) == []

    def test_rename_changing_derived_json_name(self):
        previous = _make_file(_make_field("foo_bar", 1))
        current = _make_file(_make_field("foo_baz", 1))
        changes = _run("FIELD_SAME_JSON_NAME", current, previous)
        assert len(changes) == 1
        assert 'from "fooBar" to "fooBaz"' in changes[0].message

    def test_explicit_json_name_matching_derived_is_clean(self):
        previous = _make_file(_make_field("user_name", 1))
        current = _make_file(_make_field("login", 1, json_name="userName"))
        assert _run("FIELD_SAME_JSON_NAME", current, previous) == []

    def test_moved_into_oneof(self):
        previous = _make_file(_make_field("text", 1))
        current = _make_file(_make_field("text", 1, oneof_index=0), oneofs=("payload",))
        changes = _run("FIELD_SAME_ONEOF", current, previous)
        assert len(changes) == 1
        assert 'moved into oneof "payload"' in changes[0].message

    def test_same_oneof_name_is_clean(self):
        previous = _make_file(_make_field("text", 1, oneof_index=0), oneofs=("payload",))
        current = _make_file(
            _make_field("text", 1, oneof_index=1), oneofs=("actor", "payload")
        )
        assert _run("FIELD_SAME_ONEOF", current, previous) == []


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TestFieldTypes:
    def test_int32_to_int64_flagged_under_same_type(self):
        previous = _make_file(_make_field("count", 2, "int32"))
        current = _make_file(_make_field("count", 2, "int64"))

        changes = _run("FIELD_SAME_TYPE", current, previous)

        assert len(changes) == 1
        assert 'from "int32" to "int64"' in changes[0].message

    def test_int32_to_int64_flagged_under_wire_compatible(self):
        previous = _make_file(_make_field("count", 2, "int32"))
        current = _make_file(_make_field("count", 2, "int64"))
        assert len(_run("FIELD_WIRE_COMPATIBLE_TYPE", current, previous)) == 1
        assert len(_run("FIELD_WIRE_JSON_COMPATIBLE_TYPE", current, previous)) == 1

    def test_wire_compatible_pair_allowed(self):
        previous = _make_file(_make_field("count", 2, "int32"))
        current = _make_file(_make_field("count", 2, "sint32"))
        assert _run("FIELD_WIRE_COMPATIBLE_TYPE", current, previous) == []
        assert len(_run("FIELD_SAME_TYPE", current, previous)) == 1

    def test_json_variant_narrower_than_wire(self):
        previous = _make_file(_make_field("count", 2, "int64"))
        current = _make_file(_make_field("count", 2, "fixed64"))
        # fixed64 is wire-compatible with uint64, not int64
        assert len(_run("FIELD_WIRE_COMPATIBLE_TYPE", current, previous)) == 1

        previous = _make_file(_make_field("count", 2, "int64"))
        current = _make_file(_make_field("count", 2, "uint64"))
        assert _run("FIELD_WIRE_JSON_COMPATIBLE_TYPE", current, previous) == []

    def test_leading_dot_ignored_for_named_types(self):
        previous = _make_file(_make_field("owner", 1, ".acme.users.v1.Account"))
        current = _make_file(_make_field("owner", 1, "acme.users.v1.Account"))
        assert _run("FIELD_SAME_TYPE", current, previous) == []

    def test_named_type_change_reported_without_dots(self):
        previous = _make_file(_make_field("owner", 1, ".acme.users.v1.Account"))
        current = _make_file(_make_field("owner", 1, ".acme.users.v1.Team"))
        changes = _run("FIELD_SAME_TYPE", current, previous)
        assert len(changes) == 1
        assert 'from "acme.users.v1.Account" to "acme.users.v1.Team"' in changes[0].message

    def test_map_value_change(self):
        previous = _make_file(_make_field("labels", 1, "map<string, int32>", label="repeated"))
        current = _make_file(_make_field("labels", 1, "map<string, string>", label="repeated"))
        assert len(_run("FIELD_SAME_TYPE", current, previous)) == 1


# ---------------------------------------------------------------------------
# Cardinality
# ---------------------------------------------------------------------------


class TestFieldCardinality:
    def test_optional_to_repeated(self):
        previous = _make_file(_make_field("tag", 1))
        current = _make_file(_make_field("tag", 1, label="repeated"))

        assert len(_run("FIELD_SAME_CARDINALITY", current, previous)) == 1
        assert len(_run("FIELD_SAME_LABEL", current, previous)) == 1
        assert _run("FIELD_WIRE_COMPATIBLE_CARDINALITY", current, previous) == []
        assert _run("FIELD_WIRE_JSON_COMPATIBLE_CARDINALITY", current, previous) == []

    def test_required_to_optional_allowed_on_wire_only(self):
        previous = _make_file(_make_field("id", 1, label="required"), syntax="proto2")
        current = _make_file(_make_field("id", 1), syntax="proto2")

        assert _run("FIELD_WIRE_COMPATIBLE_CARDINALITY", current, previous) == []
        assert len(_run("FIELD_WIRE_JSON_COMPATIBLE_CARDINALITY", current, previous)) == 1

    def test_reverse_directions_always_flagged(self):
        previous = _make_file(_make_field("tag", 1, label="repeated"))
        current = _make_file(_make_field("tag", 1))
        changes = _run("FIELD_WIRE_COMPATIBLE_CARDINALITY", current, previous)
        assert len(changes) == 1
        assert 'from "repeated" to "optional"' in changes[0].message

    def test_required_to_repeated_flagged(self):
        previous = _make_file(_make_field("tag", 1, label="required"), syntax="proto2")
        current = _make_file(_make_field("tag", 1, label="repeated"), syntax="proto2")
        assert len(_run("FIELD_WIRE_COMPATIBLE_CARDINALITY", current, previous)) == 1


# ---------------------------------------------------------------------------
# Option-derived attributes
# ---------------------------------------------------------------------------


class TestFieldAttributes:
    def test_explicit_default_jstype_equals_absent(self):
        previous = _make_file(_make_field("id", 1, "int64"))
        current = _make_file(_make_field("id", 1, "int64", jstype="JS_NORMAL"))
        assert _run("FIELD_SAME_JSTYPE", current, previous) == []

    def test_jstype_change(self):
        previous = _make_file(_make_field("id", 1, "int64"))
        current = _make_file(_make_field("id", 1, "int64", jstype="JS_STRING"))
        changes = _run("FIELD_SAME_JSTYPE", current, previous)
        assert len(changes) == 1
        assert 'from "JS_NORMAL" to "JS_STRING"' in changes[0].message

    def test_ctype_and_cpp_string_type(self):
        previous = _make_file(_make_field("blob", 1))
        current = _make_file(_make_field("blob", 1, ctype="CORD", cpp_string_type="CORD"))
        assert len(_run("FIELD_SAME_CTYPE", current, previous)) == 1
        assert len(_run("FIELD_SAME_CPP_STRING_TYPE", current, previous)) == 1

    def test_default_value_change(self):
        previous = _make_file(_make_field("name", 1, default="anon"), syntax="proto2")
        current = _make_file(_make_field("name", 1, default="guest"), syntax="proto2")
        changes = _run("FIELD_SAME_DEFAULT", current, previous)
        assert len(changes) == 1
        assert 'from "anon" to "guest"' in changes[0].message

    def test_utf8_validation_defaults_follow_syntax(self):
        previous = _make_file(_make_field("name", 1))
        current = _make_file(_make_field("name", 1, utf8_validation="VERIFY"))
        assert _run("FIELD_SAME_UTF8_VALIDATION", current, previous) == []

        current = _make_file(_make_field("name", 1, utf8_validation="NONE"))
        assert len(_run("FIELD_SAME_UTF8_VALIDATION", current, previous)) == 1

    def test_utf8_rules_skip_non_string_fields(self):
        previous = _make_file(_make_field("name", 1))
        current = _make_file(_make_field("name", 1, "bytes"))
        assert _run("FIELD_SAME_UTF8_VALIDATION", current, previous) == []
        assert _run("FIELD_SAME_JAVA_UTF8_VALIDATION", current, previous) == []

    def test_java_utf8_validation(self):
        previous = _make_file(_make_field("name", 1))
        current = _make_file(_make_field("name", 1, java_utf8_validation="VERIFY"))
        assert len(_run("FIELD_SAME_JAVA_UTF8_VALIDATION", current, previous)) == 1
