"""Tests for the compatibility projection and verdicts."""

from protosign.canonical.compatibility import Compatibility, CompatibilityModel, classify
from protosign.canonical.fingerprint import compute_fingerprint
from protosign.canonical.model import (
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
    CanonicalMethod,
    CanonicalService,
)


def _make_file(fields, methods=(), nested=()) -> CanonicalFile:
    return CanonicalFile(
        package="acme.v1",
        syntax="proto3",
        messages=(
            CanonicalMessage(
                name="User",
                fields=tuple(
                    CanonicalField(name=name, number=number, type_name=type_name)
                    for name, number, type_name in fields
                ),
                nested_messages=nested,
            ),
        ),
        services=(CanonicalService(name="UserService", methods=tuple(methods)),),
    )


def _verdict(old: CanonicalFile, new: CanonicalFile) -> Compatibility:
    return classify(
        compute_fingerprint(old),
        CompatibilityModel.from_canonical(old),
        compute_fingerprint(new),
        CompatibilityModel.from_canonical(new),
    )


BASE = [("name", 1, "string"), ("age", 2, "int32")]


class TestProjection:
    def test_numbers_and_types_only(self):
        model = CompatibilityModel.from_canonical(_make_file(BASE))
        assert model.messages["User"] == frozenset({(1, "string"), (2, "int32")})

    def test_nested_messages_included(self):
        inner = CanonicalMessage(
            name="Address", fields=(CanonicalField(name="city", number=1, type_name="string"),)
        )
        model = CompatibilityModel.from_canonical(_make_file(BASE, nested=(inner,)))
        assert model.messages["User.Address"] == frozenset({(1, "string")})

    def test_services_keep_method_triples(self):
        method = CanonicalMethod(name="GetUser", input_type=".acme.v1.User", output_type=".acme.v1.User")
        model = CompatibilityModel.from_canonical(_make_file(BASE, methods=[method]))
        assert model.services["UserService"] == frozenset(
            {("GetUser", ".acme.v1.User", ".acme.v1.User")}
        )


class TestClassify:
    def test_identical_is_green(self):
        assert _verdict(_make_file(BASE), _make_file(list(reversed(BASE)))) is Compatibility.GREEN

    def test_added_field_is_yellow(self):
        new = _make_file(BASE + [("email", 3, "string")])
        assert _verdict(_make_file(BASE), new) is Compatibility.YELLOW

    def test_removed_field_is_red(self):
        new = _make_file(BASE[:1])
        assert _verdict(_make_file(BASE), new) is Compatibility.RED

    def test_type_change_is_red(self):
        new = _make_file([("name", 1, "string"), ("age", 2, "int64")])
        assert _verdict(_make_file(BASE), new) is Compatibility.RED

    def test_rename_is_yellow(self):
        # Names are not part of the projection.
        new = _make_file([("full_name", 1, "string"), ("age", 2, "int32")])
        assert _verdict(_make_file(BASE), new) is Compatibility.YELLOW

    def test_removed_method_is_red(self):
        method = CanonicalMethod(name="GetUser", input_type=".acme.v1.User", output_type=".acme.v1.User")
        old = _make_file(BASE, methods=[method])
        assert _verdict(old, _make_file(BASE)) is Compatibility.RED

    def test_descriptions(self):
        assert Compatibility.GREEN.description == "Files are semantically identical"
        assert Compatibility.YELLOW.description == "New file is backward-compatible with old file"
        assert Compatibility.RED.description == "Breaking change detected"
