"""Tests for the rule registry and the breaking-change engine."""

from __future__ import annotations

import logging

from protosign.breaking.categories import RULE_CATEGORIES, rules_in_category
from protosign.breaking.engine import BreakingEngine
from protosign.breaking.registry import Rule, get_rule, get_rule_registry, rule_ids
from protosign.breaking.schema import BreakingCategory, BreakingConfig, RuleContext
from protosign.canonical.model import (
    CanonicalEnum,
    CanonicalEnumValue,
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
)


def _make_file(*fields: tuple[str, int, str], enum_values=None) -> CanonicalFile:
    enums = ()
    if enum_values is not None:
        enums = (
            CanonicalEnum(
                name="Status",
                values=tuple(CanonicalEnumValue(name=n, number=v) for n, v in enum_values),
            ),
        )
    return CanonicalFile(
        package="acme.users.v1",
        syntax="proto3",
        messages=(
            CanonicalMessage(
                name="User",
                fields=tuple(
                    CanonicalField(name=name, number=number, type_name=type_name)
                    for name, number, type_name in fields
                ),
            ),
        ),
        enums=enums,
    )


V1 = _make_file(("name", 1, "string"), ("age", 2, "int32"))
V2_DROPPED_AGE = _make_file(("name", 1, "string"))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_every_rule_has_categories(self):
        registry = get_rule_registry()
        assert len(registry) == 69
        assert {r.rule_id for r in registry} == set(RULE_CATEGORIES)

    def test_sorted_by_id(self):
        ids = rule_ids()
        assert ids == sorted(ids)

    def test_registry_built_once(self):
        assert get_rule_registry() is get_rule_registry()

    def test_get_rule(self):
        rule = get_rule("FIELD_NO_DELETE")
        assert rule.categories == (BreakingCategory.FILE, BreakingCategory.PACKAGE)
        assert get_rule("NOT_A_RULE") is None

    def test_rules_in_category(self):
        wire = rules_in_category(BreakingCategory.WIRE)
        assert "FIELD_WIRE_COMPATIBLE_TYPE" in wire
        assert "FIELD_NO_DELETE" not in wire


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_default_categories(self):
        selected = BreakingEngine().select(BreakingConfig())
        for rule in selected:
            assert set(rule.categories) & {BreakingCategory.FILE, BreakingCategory.PACKAGE}

    def test_use_rules_runs_exactly_one(self):
        result = BreakingEngine().check(
            V2_DROPPED_AGE, V1, BreakingConfig(use_rules=["FIELD_NO_DELETE"])
        )
        assert result.executed_rules == ["FIELD_NO_DELETE"]
        assert [c.rule_id for c in result.changes] == ["FIELD_NO_DELETE"]

    def test_use_rules_bypasses_categories(self):
        config = BreakingConfig(use_rules=["FIELD_WIRE_COMPATIBLE_TYPE"], use_categories=[])
        assert [r.rule_id for r in BreakingEngine().select(config)] == [
            "FIELD_WIRE_COMPATIBLE_TYPE"
        ]

    def test_except_wins_over_use_rules(self):
        config = BreakingConfig(use_rules=["FIELD_NO_DELETE"], except_rules=["FIELD_NO_DELETE"])
        result = BreakingEngine().check(V2_DROPPED_AGE, V1, config)
        assert result.executed_rules == []
        assert not result.has_breaking_changes

    def test_except_wins_over_categories(self):
        config = BreakingConfig(except_rules=["FIELD_NO_DELETE"])
        result = BreakingEngine().check(V2_DROPPED_AGE, V1, config)
        assert "FIELD_NO_DELETE" not in result.executed_rules
        assert result.changes_for("FIELD_NO_DELETE") == []

    def test_wire_only_skips_source_rules(self):
        config = BreakingConfig(use_categories=[BreakingCategory.WIRE])
        result = BreakingEngine().check(V2_DROPPED_AGE, V1, config)
        assert result.changes_for("FIELD_NO_DELETE") == []
        assert len(result.changes_for("FIELD_NO_DELETE_UNLESS_NUMBER_RESERVED")) == 1


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TestCheck:
    def test_identical_files_clean(self):
        result = BreakingEngine().check(V1, V1)
        assert not result.has_breaking_changes
        assert result.changes == []
        assert result.exit_code == 0
        assert result.executed_rules

    def test_deleted_field(self):
        result = BreakingEngine().check(V2_DROPPED_AGE, V1)
        changes = result.changes_for("FIELD_NO_DELETE")
        assert len(changes) == 1
        assert "age" in changes[0].message
        assert "2" in changes[0].message
        assert result.exit_code == 1

    def test_deleted_enum_value(self):
        previous = _make_file(
            ("name", 1, "string"),
            enum_values=[("UNSPECIFIED", 0), ("ACTIVE", 1), ("INACTIVE", 2)],
        )
        current = _make_file(("name", 1, "string"), enum_values=[("UNSPECIFIED", 0), ("ACTIVE", 1)])
        result = BreakingEngine().check(current, previous)
        changes = result.changes_for("ENUM_VALUE_NO_DELETE")
        assert len(changes) == 1
        assert "INACTIVE" in changes[0].message

    def test_results_equal_union_of_selected_rules(self):
        config = BreakingConfig(use_categories=list(BreakingCategory))
        engine = BreakingEngine()
        context = RuleContext()
        expected = []
        for rule in engine.select(config):
            expected.extend(rule.check(V2_DROPPED_AGE, V1, context))
        result = engine.check(V2_DROPPED_AGE, V1, config, context)
        assert result.changes == expected

    def test_summary_counts_each_category(self):
        result = BreakingEngine().check(
            V2_DROPPED_AGE, V1, BreakingConfig(use_rules=["FIELD_NO_DELETE"])
        )
        assert result.summary == {"FILE": 1, "PACKAGE": 1}

    def test_context_paths_on_locations(self):
        context = RuleContext(current_file="v2/user.proto", previous_file="v1/user.proto")
        result = BreakingEngine().check(
            V2_DROPPED_AGE, V1, BreakingConfig(use_rules=["FIELD_NO_DELETE"]), context
        )
        change = result.changes[0]
        assert change.location.file_path == "v2/user.proto"
        assert change.previous_location.file_path == "v1/user.proto"


class TestFailingRule:
    def _engine(self):
        def explode(current, previous, context):
            raise ValueError("boom")

        good = get_rule("FIELD_NO_DELETE")
        bad = Rule("ZZZ_EXPLODES", (BreakingCategory.FILE,), explode)
        return BreakingEngine(rules=[good, bad])

    def test_failure_isolated(self, caplog):
        with caplog.at_level(logging.ERROR, logger="protosign.breaking.engine"):
            result = self._engine().check(V2_DROPPED_AGE, V1)

        assert result.failed_rules == ["ZZZ_EXPLODES"]
        assert result.executed_rules == ["FIELD_NO_DELETE"]
        assert len(result.changes) == 1
        assert "ZZZ_EXPLODES" in caplog.text

    def test_failure_alone_is_not_breaking(self):
        result = self._engine().check(V1, V1)
        assert result.failed_rules == ["ZZZ_EXPLODES"]
        assert not result.has_breaking_changes
