"""Error Handling System

Key components:
- ErrorCode: Hierarchical error code taxonomy
- AppError: Immutable error value with context
- SchemaError: raised when a rule tree cannot be built
- Result[T, E]: Ok/Err container for recoverable failures (template loading, coercion)

Usage:
    from nestval.core.errors import SchemaError, unknown_predicate

    if name not in registry:
        raise unknown_predicate(name, registry.names())
"""
from .types import (
    AppError,
    ErrorCode,
    ErrorContext,
    SchemaError,
    TranslationError,
    Result,
    Ok,
    Err,
)

from .builders import (
    schema_error,
    unknown_predicate,
    arity_mismatch,
    invalid_rule,
    invalid_messages_config,
    file_not_found,
    file_read_error,
)

__all__ = [
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "SchemaError",
    "TranslationError",
    "Result",
    "Ok",
    "Err",
    "schema_error",
    "unknown_predicate",
    "arity_mismatch",
    "invalid_rule",
    "invalid_messages_config",
    "file_not_found",
    "file_read_error",
]
