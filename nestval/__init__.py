"""nestval - validation of nested data with structured, localizable error messages.

Usage:
    from nestval import params, required, optional

    schema = params(
        required("email").filled(),
        required("age").filled("integer", gt=18),
    )
    result = schema({"email": "", "age": "18"})
    result.success     # False
    result.messages    # {"email": ["must be filled"], "age": ["must be greater than 18"]}
"""
from nestval.core.errors import SchemaError, TranslationError
from nestval.dsl import KeyBuilder, define, optional, params, required
from nestval.messages import (
    ErrorReport,
    I18nMessages,
    MessageBackend,
    MessageCompiler,
    NamespacedMessages,
    StaticMessages,
    setup,
)
from nestval.predicates import UNDEFINED, FunctionPredicate, PredicateRegistry
from nestval.rules import (
    And,
    Each,
    Failure,
    Implication,
    Key,
    Not,
    Or,
    Predicate,
    Rule,
    RuleApplier,
    SchemaResult,
    Set,
    SUCCESS,
    check,
)
from nestval.schema import Schema

__version__ = "0.1.0"

__all__ = [
    "SchemaError",
    "TranslationError",
    "KeyBuilder",
    "define",
    "optional",
    "params",
    "required",
    "ErrorReport",
    "I18nMessages",
    "MessageBackend",
    "MessageCompiler",
    "NamespacedMessages",
    "StaticMessages",
    "setup",
    "UNDEFINED",
    "FunctionPredicate",
    "PredicateRegistry",
    "And",
    "Each",
    "Failure",
    "Implication",
    "Key",
    "Not",
    "Or",
    "Predicate",
    "Rule",
    "RuleApplier",
    "SchemaResult",
    "Set",
    "SUCCESS",
    "check",
    "Schema",
]
