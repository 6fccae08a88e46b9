"""Domain-Specific Error Builders

Ergonomic constructors for typed errors. Schema builders return exceptions
ready to raise; resource builders return ``Err`` values.
"""
from pathlib import Path

from .types import AppError, ErrorCode, ErrorContext, Err, SchemaError


# =============================================================================
# Schema Errors (E7xxx)
# =============================================================================

def schema_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E7000_SCHEMA_GENERIC,
    origin: str = "",
    **metadata,
) -> SchemaError:
    """Create schema construction error."""
    return SchemaError(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in metadata.items() if v is not None},
    ))


def unknown_predicate(name: str, available: list[str] | None = None, origin: str = "") -> SchemaError:
    msg = f"Predicate '{name}' is not registered"
    if available:
        msg += f". Available: {', '.join(sorted(available)[:10])}"
    return schema_error(msg, code=ErrorCode.E7001_UNKNOWN_PREDICATE, origin=origin, predicate=name)


def arity_mismatch(name: str, expected: int, given: int, origin: str = "") -> SchemaError:
    return schema_error(
        f"Predicate '{name}' expects {expected} argument(s), got {given}",
        code=ErrorCode.E7002_ARITY_MISMATCH,
        origin=origin,
        predicate=name,
        expected=expected,
        given=given,
    )


def invalid_rule(message: str, origin: str = "", **metadata) -> SchemaError:
    return schema_error(message, code=ErrorCode.E7003_INVALID_RULE, origin=origin, **metadata)


def invalid_messages_config(message: str, origin: str = "", **metadata) -> SchemaError:
    return schema_error(message, code=ErrorCode.E7004_INVALID_MESSAGES_CONFIG, origin=origin, **metadata)


# =============================================================================
# Resource Errors (E6xxx)
# =============================================================================

def file_not_found(path: str | Path, origin: str = "") -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E6001_FILE_NOT_FOUND,
        message=f"Template source not found: {path}",
        context=ErrorContext(origin=origin),
        metadata={"path": str(path)},
    ))


def file_read_error(path: str | Path, cause: Exception, origin: str = "") -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E6002_FILE_READ_ERROR,
        message=f"Cannot read template source {path}: {cause}",
        context=ErrorContext(origin=origin),
        metadata={"path": str(path)},
        cause=cause,
    ))
