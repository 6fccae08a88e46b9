"""Predicates - named boolean checks and the registry that binds their arguments."""
from .catalog import (
    UNDEFINED,
    BUILTIN_PREDICATES,
    Predicate,
    FunctionPredicate,
)
from .registry import PredicateRegistry, freeze

__all__ = [
    "UNDEFINED",
    "BUILTIN_PREDICATES",
    "Predicate",
    "FunctionPredicate",
    "PredicateRegistry",
    "freeze",
]
