"""Schema Builder DSL

Declarative construction of schemas from key builders:

    user = params(
        required("email").filled(),
        required("age").filled("integer", gt=18),
        optional("address").schema(
            required("street").filled("string"),
            required("city").filled("string"),
        ),
        required("tags").each("string", min_size=2),
    )
    user({"email": "", "age": "18", "tags": []}).messages

Predicates are given as predicate names (``"int?"``), type shorthands
(``"integer"``), ``(name, *args)`` tuples, ready-made ``Rule`` nodes or
keyword arguments (``gt=18`` is ``gt?`` with ``18``). Builders are turned
into rule trees when ``define``/``params`` is called, against that schema's
predicate registry.
"""
from __future__ import annotations

from typing import Any, Iterable

from nestval.coercion import PARAMS_COERCIONS, Coercer, EachCoercer, KeyCoercer, ValueCoercer
from nestval.core.errors import invalid_rule
from nestval.messages import MessageBackend, setup
from nestval.predicates import PredicateRegistry
from nestval.rules import Each, Implication, Key, Rule, Set, check

from .schema import Schema

TYPE_PREDICATES: dict[str, str] = {
    "string": "str?",
    "str": "str?",
    "integer": "int?",
    "int": "int?",
    "float": "float?",
    "decimal": "decimal?",
    "number": "number?",
    "bool": "bool?",
    "hash": "hash?",
    "array": "array?",
    "date": "date?",
    "date_time": "date_time?",
    "time": "time?",
    "nil": "none?",
}

Spec = str | tuple | Rule


def _predicate_name(name: str) -> str:
    if name in TYPE_PREDICATES:
        return TYPE_PREDICATES[name]
    if name.endswith("?"):
        return name
    raise invalid_rule(f"Unknown type or predicate '{name}'", origin="dsl", spec=name)


class KeyBuilder:
    """Collects the rules declared for one key.

    Methods return the builder itself so declarations chain.
    """

    def __init__(self, name: str, *, required: bool = True):
        self.name = name
        self.required = required
        self._specs: list[Spec] = []
        self._filters: list[Spec] = []
        self._children: list[KeyBuilder] | Schema | None = None
        self._each: list[Spec] | list[KeyBuilder] | Schema | None = None

    def value(self, *specs: Spec, **predicates: Any) -> KeyBuilder:
        self._specs.extend(_specs(specs, predicates))
        return self

    def filled(self, *specs: Spec, **predicates: Any) -> KeyBuilder:
        self._specs.append("filled?")
        return self.value(*specs, **predicates)

    def schema(self, *children: KeyBuilder | Schema) -> KeyBuilder:
        """Nested hash validated by another schema or by key builders."""
        self._children = _sub_schema(children)
        return self

    def each(self, *specs: Spec | KeyBuilder | Schema, **predicates: Any) -> KeyBuilder:
        """Sequence whose elements satisfy ``specs``, or a nested schema each."""
        if specs and all(isinstance(s, (KeyBuilder, Schema)) for s in specs):
            self._each = _sub_schema(specs)
        else:
            self._each = _specs(specs, predicates)
        return self

    def filter(self, *specs: Spec, **predicates: Any) -> KeyBuilder:
        """Rules checked on the raw input, before coercion."""
        self._filters.extend(_specs(specs, predicates))
        return self

    # ------------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------------

    def build(self, registry: PredicateRegistry) -> Rule:
        inner = _chain(registry, self._specs)
        type_check = None
        if self._children is not None:
            type_check = check(registry, "hash?")
            inner = _and(inner, _set(registry, self.name, self._children))
        elif self._each is not None:
            type_check = check(registry, "array?")
            inner = _and(inner, Each(self._each_rule(registry)))
        if inner is None:
            raise invalid_rule(f"Key '{self.name}' declares no rules", origin="dsl", key=self.name)
        return self._wrap(registry, Key(self.name, inner, type_check))

    def build_filter(self, registry: PredicateRegistry) -> Rule | None:
        if (inner := _chain(registry, self._filters)) is None:
            return None
        return self._wrap(registry, Key(self.name, inner))

    def _each_rule(self, registry: PredicateRegistry) -> Rule:
        if isinstance(self._each, Schema) or (self._each and isinstance(self._each[0], KeyBuilder)):
            return check(registry, "hash?") & _set(registry, self.name, self._each)
        if (rule := _chain(registry, self._each)) is None:
            raise invalid_rule(f"Key '{self.name}' declares no element rules", origin="dsl", key=self.name)
        return rule

    def _wrap(self, registry: PredicateRegistry, rule: Key) -> Rule:
        if self.required:
            return rule
        return Implication(check(registry, "key?", self.name), rule)

    def coercer(self) -> Coercer | None:
        if self._children is not None:
            return _key_coercer(self._children)
        if self._each is not None:
            if isinstance(self._each, Schema) or (self._each and isinstance(self._each[0], KeyBuilder)):
                return EachCoercer(_key_coercer(self._each))
            inner = _value_coercer(self._each)
            return EachCoercer(inner) if inner is not None else None
        return _value_coercer(self._specs)

    def __repr__(self) -> str:
        kind = "required" if self.required else "optional"
        return f"<KeyBuilder {kind}({self.name!r})>"


def required(name: str) -> KeyBuilder:
    return KeyBuilder(name, required=True)


def optional(name: str) -> KeyBuilder:
    return KeyBuilder(name, required=False)


def define(
    *keys: KeyBuilder,
    messages: MessageBackend | None = None,
    registry: PredicateRegistry | None = None,
    namespace: str | None = None,
    name: str = "schema",
    params: bool = False,
) -> Schema:
    """Build a schema from key builders.

    Args:
        keys: Key builders, in the order their rules are applied
        messages: Message backend; a fresh one from settings when omitted
        registry: Predicate registry; the built-in predicates when omitted
        namespace: Prefer messages under ``<root>.<namespace>``
        params: Coerce form-style string input before validating
    """
    registry = registry or PredicateRegistry()
    messages = messages or setup()
    if namespace:
        messages = messages.namespaced(namespace)
    rules = [(key.name, key.build(registry)) for key in keys]
    filters = [(key.name, rule) for key in keys if (rule := key.build_filter(registry)) is not None]
    return Schema(rules, filters=filters, messages=messages, coercer=_key_coercer(list(keys)),
        params=params, name=name)


def params(*keys: KeyBuilder, **options: Any) -> Schema:
    """``define`` for form-style input: declared types are coerced from strings."""
    return define(*keys, params=True, **options)


# ============================================================================
# Helpers
# ============================================================================

def _specs(specs: Iterable[Spec], predicates: dict[str, Any]) -> list[Spec]:
    return [*specs, *((f"{name}?", value) for name, value in predicates.items())]


def _sub_schema(children: Iterable[KeyBuilder | Schema]) -> list[KeyBuilder] | Schema:
    children = list(children)
    if len(children) == 1 and isinstance(children[0], Schema):
        return children[0]
    if not all(isinstance(c, KeyBuilder) for c in children):
        raise invalid_rule("A nested schema is either one Schema or key builders", origin="dsl")
    return children


def _set(registry: PredicateRegistry, name: str, children: list[KeyBuilder] | Schema) -> Set:
    if isinstance(children, Schema):
        return children.to_node(name)
    return Set(name, tuple(child.build(registry) for child in children))


def _build(registry: PredicateRegistry, spec: Spec) -> Rule:
    if isinstance(spec, Rule):
        return spec
    if isinstance(spec, str):
        return check(registry, _predicate_name(spec))
    name, *args = spec
    fn = registry[_predicate_name(name)]
    # flag form for zero-argument predicates: filled=True
    if fn.arity == 1 and args == [True]:
        args = []
    return check(registry, fn.name, *args)


def _chain(registry: PredicateRegistry, specs: Iterable[Spec]) -> Rule | None:
    rule = None
    for spec in specs:
        rule = _and(rule, _build(registry, spec))
    return rule


def _and(left: Rule | None, right: Rule) -> Rule:
    return right if left is None else left & right


def _type_name(spec: Spec) -> str | None:
    if isinstance(spec, str):
        return TYPE_PREDICATES.get(spec, spec)
    return None


def _value_coercer(specs: Iterable[Spec]) -> Coercer | None:
    for spec in specs:
        if (name := _type_name(spec)) in PARAMS_COERCIONS:
            return ValueCoercer(PARAMS_COERCIONS[name])
    return None


def _key_coercer(children: list[KeyBuilder] | Schema) -> KeyCoercer:
    if isinstance(children, Schema):
        return children.coercer
    return KeyCoercer(tuple((c.name, coercer) for c in children if (coercer := c.coercer()) is not None))
