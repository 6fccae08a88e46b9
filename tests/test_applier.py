"""Tests for applying a schema's top-level rules."""

import pytest

from nestval.predicates import FunctionPredicate
from nestval.rules import Failure, Key, RuleApplier, SchemaResult, check


@pytest.fixture
def applier(registry, compiler):
    return RuleApplier(
        [
            ("email", Key("email", check(registry, "filled?"))),
            ("age", Key("age", check(registry, "int?") & check(registry, "gt?", 18))),
        ],
        compiler,
    )


class TestRuleApplier:
    def test_collects_failures_in_declaration_order(self, applier):
        result = applier(SchemaResult({"email": "", "age": 3}))
        assert [f.path for f in result.failures] == [("email",), ("age",)]

    def test_success(self, applier):
        result = applier(SchemaResult({"email": "a@b.c", "age": 30}))
        assert result.success
        assert result.failures == []

    def test_skips_rules_with_recorded_errors(self, registry, compiler):
        seen = []
        registry.register(FunctionPredicate("seen?", lambda input: seen.append(input) or True))
        applier = RuleApplier({"age": Key("age", check(registry, "seen?"))}, compiler)
        earlier = Failure("predicate", ("age",), "format?", {"args": (("regex", r"\d+"),), "input": "x"})
        result = applier(SchemaResult({"age": "x"}, [earlier]))
        assert seen == []
        assert result.failures == [earlier]

    def test_report(self, applier):
        report = applier.report(SchemaResult({"email": "", "age": 18}))
        assert report == {"email": ["must be filled"], "age": ["must be greater than 18"]}

    def test_report_requires_compiler(self, registry):
        with pytest.raises(RuntimeError):
            RuleApplier([("a", Key("a", check(registry, "filled?")))]).report(SchemaResult({}))

    def test_ast_is_a_set_of_rules(self, applier):
        kind, rules = applier.to_ast()
        assert kind == "set"
        assert [rule[1] for rule in rules] == ["email", "age"]


class TestSchemaResult:
    def test_error_checks_top_level_name(self):
        result = SchemaResult({}, [Failure("predicate", ("age",), "key?")])
        assert result.error("age")
        assert not result.error("email")

    def test_concat_accumulates(self):
        result = SchemaResult({}).concat([Failure("predicate", ("a",), "key?")])
        result.concat([Failure("predicate", ("b",), "key?")])
        assert len(result.failures) == 2
        assert result.failure

    def test_item_access_reads_output(self):
        assert SchemaResult({"age": 18})["age"] == 18
