"""Rule Nodes

Immutable rule trees. Leaves apply a predicate; internal nodes combine
rules logically (AND/OR/NOT/IMPLICATION) or structurally (a map key, every
element of a sequence, a named set of sibling rules).

Features:
- Frozen dataclasses: structurally identical rules are equal and hash equal
- Short-circuit evaluation for AND, OR and IMPLICATION
- Sets evaluate every child so sibling fields report together
- Key and Each never descend into a missing or wrong-typed value
- ``to_ast()`` serializes any tree to nested tuples

Usage:
    registry = PredicateRegistry()
    age = Key("age", check(registry, "int?") & check(registry, "gt?", 18))
    age.evaluate({"age": 12})   # Failure(... predicate="gt?" ...)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from nestval.core.errors import arity_mismatch, invalid_rule
from nestval.predicates import UNDEFINED, Predicate as PredicateFn, PredicateRegistry

from .result import SUCCESS, Failure, RuleResult, Segment


def dig(value: Any, path: tuple[Segment, ...]) -> Any:
    """Value at ``path`` inside ``value``; ``UNDEFINED`` when any segment is absent."""
    for segment in path:
        if isinstance(value, Mapping) and segment in value:
            value = value[segment]
        elif isinstance(value, (list, tuple)) and isinstance(segment, int) and -len(value) <= segment < len(value):
            value = value[segment]
        else:
            return UNDEFINED
    return value


class Rule(ABC):
    """Base class for rule nodes.

    Rules compose via operators:
    - & (AND): both must pass
    - | (OR): at least one must pass
    - ~ (NOT): negates a predicate
    - >> (IMPLICATION): right is checked only when left passes
    """
    __slots__ = ()

    @abstractmethod
    def evaluate(self, value: Any) -> RuleResult:
        """Evaluate against ``value``."""

    @abstractmethod
    def to_ast(self) -> tuple:
        """Language-agnostic representation of this rule."""

    def __call__(self, value: Any) -> RuleResult: return self.evaluate(value)

    def __and__(self, other: Rule) -> And: return And(self, other)

    def __or__(self, other: Rule) -> Or: return Or(self, other)

    def __invert__(self) -> Not: return Not(self)

    def __rshift__(self, other: Rule) -> Implication: return Implication(self, other)


# ============================================================================
# Leaf
# ============================================================================

@dataclass(frozen=True, slots=True)
class Predicate(Rule):
    """Apply a registered predicate to the value at ``path``.

    ``args`` holds every parameter binding including the trailing input slot,
    which stays ``UNDEFINED`` until evaluation supplies the value.
    """
    name: str
    path: tuple[Segment, ...] = ()
    args: tuple[tuple[str, Any], ...] = ()
    fn: PredicateFn | None = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.fn is None:
            raise invalid_rule(
                f"Predicate node '{self.name}' has no predicate bound; build it with check()",
                origin="rule_builder",
                predicate=self.name,
            )
        # one binding per parameter, the input slot included
        if len(self.args) != self.fn.arity:
            raise arity_mismatch(self.name, self.fn.arity, len(self.args), origin="rule_builder")

    @property
    def arg_values(self) -> tuple[Any, ...]:
        return tuple(v for _, v in self.args[:-1])

    def evaluate(self, value: Any) -> RuleResult:
        target = dig(value, self.path)
        if self.fn(*self.arg_values, target):
            return SUCCESS
        return self.failure(target)

    def failure(self, target: Any, *, negated: bool = False) -> Failure:
        options = {"args": self.args[:-1], "input": target}
        if negated:
            options["not"] = True
        return Failure("predicate", self.path, self.name, options)

    def to_ast(self) -> tuple:
        return ("predicate", self.name, self.path, self.args[:-1])


def check(registry: PredicateRegistry, name: str, *args: Any, path: tuple[Segment, ...] = ()) -> Predicate:
    """Build a predicate node, validating name and arity against ``registry``.

    Every parameter except the input must be supplied; the input binding is
    left padded with ``UNDEFINED``.
    """
    fn = registry[name]
    if len(args) != fn.arity - 1:
        raise arity_mismatch(name, fn.arity - 1, len(args), origin="rule_builder")
    return Predicate(name=name, path=tuple(path), args=registry.arg_list(name, *args), fn=fn)


# ============================================================================
# Logical combinators
# ============================================================================

@dataclass(frozen=True, slots=True)
class And(Rule):
    """AND combinator: stops at the first failure and returns it."""
    left: Rule
    right: Rule

    def evaluate(self, value: Any) -> RuleResult:
        if (left := self.left.evaluate(value)).is_failure: return left
        return self.right.evaluate(value)

    def to_ast(self) -> tuple:
        return ("and", self.left.to_ast(), self.right.to_ast())


@dataclass(frozen=True, slots=True)
class Or(Rule):
    """OR combinator: stops at the first success; otherwise reports both branches."""
    left: Rule
    right: Rule

    def evaluate(self, value: Any) -> RuleResult:
        if (left := self.left.evaluate(value)).is_success: return SUCCESS
        if (right := self.right.evaluate(value)).is_success: return SUCCESS
        return Failure("or", children=(left, right))

    def to_ast(self) -> tuple:
        return ("or", self.left.to_ast(), self.right.to_ast())


@dataclass(frozen=True, slots=True)
class Not(Rule):
    """NOT combinator over a single predicate.

    A passing predicate becomes a negated failure (message root ``errors.not``).
    """
    inner: Rule

    def __post_init__(self):
        if not isinstance(self.inner, Predicate):
            raise invalid_rule(f"Negation requires a predicate, got {type(self.inner).__name__}",
                origin="rule_builder", node=type(self.inner).__name__)

    def evaluate(self, value: Any) -> RuleResult:
        if self.inner.evaluate(value).is_failure: return SUCCESS
        return self.inner.failure(dig(value, self.inner.path), negated=True)

    def to_ast(self) -> tuple:
        return ("not", self.inner.to_ast())


@dataclass(frozen=True, slots=True)
class Implication(Rule):
    """IMPLICATION combinator: the consequent runs only if the antecedent passes."""
    antecedent: Rule
    consequent: Rule

    def evaluate(self, value: Any) -> RuleResult:
        if self.antecedent.evaluate(value).is_failure: return SUCCESS
        return self.consequent.evaluate(value)

    def to_ast(self) -> tuple:
        return ("implication", self.antecedent.to_ast(), self.consequent.to_ast())


# ============================================================================
# Structural combinators
# ============================================================================

@dataclass(frozen=True, slots=True)
class Set(Rule):
    """Named group of rules applied to the same value; keeps every failure."""
    name: str
    children: tuple[Rule, ...] = ()

    def evaluate(self, value: Any) -> RuleResult:
        failures = tuple(r for r in (child.evaluate(value) for child in self.children) if r.is_failure)
        if not failures: return SUCCESS
        return Failure("set", options={"name": self.name}, children=failures)

    def to_ast(self) -> tuple:
        return ("set", self.name, tuple(child.to_ast() for child in self.children))


@dataclass(frozen=True, slots=True)
class Each(Rule):
    """Apply ``inner`` to every element of the sequence at ``path``.

    A non-sequence fails once with ``array?``; an empty sequence passes.
    """
    inner: Rule
    path: tuple[Segment, ...] = ()

    def evaluate(self, value: Any) -> RuleResult:
        target = dig(value, self.path)
        if not isinstance(target, (list, tuple)):
            return Failure("predicate", self.path, "array?", {"args": (), "input": target})
        failures = tuple(
            Failure("key", (index,), children=(result,))
            for index, result in enumerate(self.inner.evaluate(item) for item in target)
            if result.is_failure
        )
        if not failures: return SUCCESS
        return Failure("each", self.path, children=failures)

    def to_ast(self) -> tuple:
        return ("each", self.path, self.inner.to_ast())


@dataclass(frozen=True, slots=True)
class Key(Rule):
    """Apply ``inner`` to the value under map key ``name``.

    A missing key reports ``key?`` ("is missing") and a value rejected by
    ``type_check`` reports that predicate; ``inner`` is skipped in both cases.
    """
    name: Segment
    inner: Rule
    type_check: Predicate | None = None

    def evaluate(self, value: Any) -> RuleResult:
        if not isinstance(value, Mapping) or self.name not in value:
            return Failure("predicate", (self.name,), "key?",
                {"args": (("name", self.name),), "input": UNDEFINED})
        target = value[self.name]
        if self.type_check is not None and (result := self.type_check.evaluate(target)).is_failure:
            return Failure("key", (self.name,), children=(result,))
        if (result := self.inner.evaluate(target)).is_failure:
            return Failure("key", (self.name,), children=(result,))
        return SUCCESS

    def to_ast(self) -> tuple:
        type_check = self.type_check.to_ast() if self.type_check is not None else None
        return ("key", self.name, type_check, self.inner.to_ast())
