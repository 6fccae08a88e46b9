"""Predicate registry - owned lookup table from predicate names to predicates."""
from collections.abc import Iterable, Mapping
from typing import Any

from nestval.core.errors import arity_mismatch, invalid_rule, unknown_predicate
from nestval.core.logging import rules_logger

from .catalog import BUILTIN_PREDICATES, UNDEFINED, Predicate

log = rules_logger()


def freeze(value: Any) -> Any:
    """Turn argument values into hashable equivalents so rule trees can be compared and hashed."""
    if isinstance(value, list):
        return tuple(freeze(v) for v in value)
    if isinstance(value, set):
        return frozenset(value)
    if isinstance(value, Mapping):
        return tuple((k, freeze(v)) for k, v in value.items())
    return value


class PredicateRegistry:
    """Registry of predicates available to a schema.

    Each instance owns its table; registering a custom predicate on one
    registry never leaks into another.
    """

    def __init__(self, predicates: Iterable[Predicate] = BUILTIN_PREDICATES):
        self._predicates: dict[str, Predicate] = {p.name: p for p in predicates}

    def __getitem__(self, name: str) -> Predicate:
        if name not in self._predicates:
            raise unknown_predicate(name, self.names(), origin="predicate_registry")
        return self._predicates[name]

    def __contains__(self, name: object) -> bool:
        return name in self._predicates

    def __len__(self) -> int:
        return len(self._predicates)

    def names(self) -> list[str]:
        return list(self._predicates)

    def register(self, predicate: Predicate) -> None:
        """Register a predicate, replacing any predicate with the same name."""
        if not predicate.parameters:
            raise invalid_rule(f"Predicate '{predicate.name}' must accept an input parameter",
                origin="predicate_registry", predicate=predicate.name)
        self._predicates[predicate.name] = predicate
        log.debug("predicate_registered", predicate=predicate.name, arity=predicate.arity)

    def arg_list(self, name: str, *values: Any) -> tuple[tuple[str, Any], ...]:
        """Pair declared parameter names with supplied values.

        Missing trailing values are padded with ``UNDEFINED``; supplying more
        values than the predicate accepts is a schema error.
        """
        predicate = self[name]
        if len(values) > predicate.arity:
            raise arity_mismatch(name, predicate.arity, len(values), origin="predicate_registry")
        padded = [freeze(v) for v in values] + [UNDEFINED] * (predicate.arity - len(values))
        return tuple(zip(predicate.parameters, padded))
