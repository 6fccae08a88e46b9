"""End-to-end tests: schemas built with the DSL, applied to nested input."""

from datetime import date

import pytest

from nestval import (
    FunctionPredicate,
    PredicateRegistry,
    Schema,
    SchemaError,
    StaticMessages,
    define,
    optional,
    params,
    required,
)
from nestval.core.errors import ErrorCode
from nestval.rules import Set


@pytest.fixture
def nested():
    return define(
        required("meta").schema(
            required("info").schema(
                required("details").filled("string"),
                required("meta").filled("string"),
            ),
        ),
    )


class TestScenarios:
    def test_params_form(self):
        schema = params(
            required("email").filled(),
            required("age").filled("int?", gt=18),
        )
        result = schema({"email": "", "age": "18"})
        assert result.failure
        assert result.messages == {"email": ["must be filled"], "age": ["must be greater than 18"]}
        assert result.output["age"] == 18

    def test_missing_parent_stops_descent(self, nested):
        assert nested({}).messages == {"meta": ["is missing"]}

    def test_missing_nested_keys(self, nested):
        assert nested({"meta": {"info": {}}}).messages == {
            "meta": {"info": {"details": ["is missing"], "meta": ["is missing"]}}
        }

    def test_nested_type_check(self, nested):
        assert nested({"meta": {"info": None}}).messages == {"meta": {"info": ["must be a hash"]}}

    def test_nested_success(self, nested):
        assert nested({"meta": {"info": {"details": "a", "meta": "b"}}}).success

    def test_each_with_nested_schema(self):
        schema = define(
            required("data").each(
                required("info").schema(required("name").filled()),
            ),
        )
        assert schema({"data": [{}]}).messages == {"data": {0: {"info": ["is missing"]}}}

    def test_each_nested_element_details(self):
        schema = define(
            required("data").each(
                required("info").schema(required("name").filled()),
            ),
        )
        result = schema({"data": [{"info": {"name": "ok"}}, {"info": {"name": ""}}, "x"]})
        assert result.messages == {
            "data": {1: {"info": {"name": ["must be filled"]}}, 2: ["must be a hash"]}
        }

    def test_reused_sub_schema(self):
        location = define(
            required("lat").filled("float"),
            required("lng").filled("float"),
        )
        schema = define(required("location").schema(location))
        result = schema({"location": {"lat": None, "lng": "45.6"}})
        assert result.messages == {"location": {"lat": ["must be filled"], "lng": ["must be a float"]}}

    def test_nesting_does_not_change_inner_report(self):
        inner = define(required("c").filled("integer"))
        middle = define(required("b").schema(inner))
        outer = define(required("a").schema(middle))
        for value in ("x", None, 3):
            alone = inner({"c": value}).messages
            nested = outer({"a": {"b": {"c": value}}}).messages
            assert nested.get("a", {}).get("b", {}) == alone
        assert outer({"a": {"b": {"c": "x"}}}).messages["a"]["b"]["c"] == ["must be an integer"]

    def test_reused_sub_schema_in_each(self):
        tag = define(required("name").filled("string"))
        schema = define(required("tags").each(tag))
        assert schema({"tags": [{"name": "a"}, {"name": ""}]}).messages == {
            "tags": {1: {"name": ["must be filled"]}}
        }


class TestDsl:
    def test_optional_key(self):
        schema = define(optional("nickname").filled("string"))
        assert schema({}).success
        assert schema({"nickname": ""}).messages == {"nickname": ["must be filled"]}

    def test_each_of_values(self):
        schema = define(required("tags").each("string"))
        assert schema({"tags": ["a", 1]}).messages == {"tags": {1: ["must be a string"]}}
        assert schema({"tags": []}).success
        assert schema({"tags": "a"}).messages == {"tags": ["must be an array"]}

    def test_keyword_predicates(self):
        schema = define(required("role").value("string", included_in=["admin", "user"]))
        assert schema({"role": "root"}).messages == {"role": ["must be one of: admin, user"]}

    def test_flag_keyword_for_unary_predicate(self):
        schema = define(required("name").value("string", filled=True))
        assert schema({"name": ""}).messages == {"name": ["must be filled"]}

    def test_tuple_spec(self):
        schema = define(required("code").value(("size?", 3)))
        assert schema({"code": "ab"}).messages == {"code": ["length must be 3"]}

    def test_unknown_type_shorthand(self):
        with pytest.raises(SchemaError) as exc_info:
            define(required("x").value("bogus"))
        assert exc_info.value.code == ErrorCode.E7003_INVALID_RULE

    def test_key_without_rules(self):
        with pytest.raises(SchemaError):
            define(required("x"))

    def test_wrong_arity(self):
        with pytest.raises(SchemaError) as exc_info:
            define(required("age").value("gt?"))
        assert exc_info.value.code == ErrorCode.E7002_ARITY_MISMATCH

    def test_non_mapping_input(self):
        assert define(required("a").filled())("text").messages == {"a": ["is missing"]}

    def test_custom_predicate_and_messages(self, messages):
        registry = PredicateRegistry()
        registry.register(FunctionPredicate("email?", lambda input: isinstance(input, str) and "@" in input))
        schema = define(
            required("email").filled("email?"),
            registry=registry,
            messages=messages.merge({"en": {"errors": {"email?": "must be an email address"}}}),
        )
        assert schema({"email": "nope"}).messages == {"email": ["must be an email address"]}

    def test_namespace(self, messages):
        schema = define(
            required("email").filled(),
            messages=messages.merge({"en": {"errors": {"signup": {"filled?": "is required to sign up"}}}}),
            namespace="signup",
        )
        assert schema({"email": ""}).messages == {"email": ["is required to sign up"]}

    def test_ast_equality(self):
        first = define(required("age").filled("integer", gt=18))
        second = define(required("age").filled("integer", gt=18))
        assert first.to_ast() == second.to_ast()

    def test_to_node(self):
        schema = define(required("a").filled(), name="inner")
        node = schema.to_node()
        assert isinstance(node, Set)
        assert node.name == "inner"


class TestParams:
    def test_filter_runs_before_coercion(self):
        schema = params(
            required("birthday").filter(format=r"^\d{4}-\d{2}-\d{2}$").value("date"),
        )
        assert schema({"birthday": "2024-1-1"}).messages == {"birthday": ["is in invalid format"]}
        result = schema({"birthday": "2024-01-01"})
        assert result.success
        assert result["birthday"] == date(2024, 1, 1)

    def test_uncoercible_value_reported_by_type(self):
        schema = params(required("age").value("integer"))
        assert schema({"age": "abc"}).messages == {"age": ["must be an integer"]}

    def test_blank_value_is_none(self):
        schema = params(required("age").filled("integer"))
        result = schema({"age": ""})
        assert result.output == {"age": None}
        assert result.messages == {"age": ["must be filled"]}

    def test_nested_and_each_coercion(self):
        schema = params(
            required("location").schema(required("lat").filled("float")),
            required("scores").each("integer"),
        )
        result = schema({"location": {"lat": "45.6"}, "scores": ["1", "2"]})
        assert result.success
        assert result.output == {"location": {"lat": 45.6}, "scores": [1, 2]}

    def test_define_does_not_coerce(self):
        schema = define(required("age").value("integer"))
        assert schema({"age": "18"}).messages == {"age": ["must be an integer"]}


class TestResult:
    def test_full_messages(self):
        schema = define(required("email").filled())
        assert schema({"email": ""}).errors(full=True) == {"email": ["email must be filled"]}

    def test_locale(self, messages):
        schema = define(
            required("email").filled(),
            messages=messages.merge({"pl": {"errors": {"filled?": "musi być wypełnione"}}}),
        )
        result = schema({"email": ""})
        assert result.errors(locale="pl") == {"email": ["musi być wypełnione"]}
        assert result.messages == {"email": ["must be filled"]}

    def test_schema_shares_its_backend_cache(self, messages):
        schema = define(required("email").filled(), messages=messages)
        schema({"email": ""}).messages
        schema({"email": ""}).messages
        assert messages.cache.hits >= 1

    def test_explicit_schema(self, registry, messages):
        from nestval.rules import Key, check
        schema = Schema({"email": Key("email", check(registry, "filled?"))}, messages=messages)
        assert schema({"email": ""}).messages == {"email": ["must be filled"]}
