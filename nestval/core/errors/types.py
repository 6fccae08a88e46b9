"""Error Handling Types

Typed error codes, immutable error values and a small Result type for
operations that may fail without it being a programming error (loading a
template source, coercing a submitted string).

Schema construction problems are programming errors and raise
``SchemaError``; validation failures are never errors at all, they are data.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, NoReturn, TypeVar, Union, final

T = TypeVar("T")
E = TypeVar("E", bound="AppError")


class ErrorCode(Enum):
    """Error code taxonomy.

    E2xxx: Coercion of submitted values
    E6xxx: Template sources
    E7xxx: Schema construction
    """
    E2004_INVALID_TYPE = 2004

    E6001_FILE_NOT_FOUND = 6001
    E6002_FILE_READ_ERROR = 6002

    E7000_SCHEMA_GENERIC = 7000
    E7001_UNKNOWN_PREDICATE = 7001
    E7002_ARITY_MISMATCH = 7002
    E7003_INVALID_RULE = 7003
    E7004_INVALID_MESSAGES_CONFIG = 7004

    @property
    def category(self) -> str:
        return {2: "coercion", 6: "resource", 7: "schema"}[self.value // 1000]


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Where an error was raised (``rule_builder``, ``template_loader``, ...)."""
    origin: str = ""


@dataclass(frozen=True, slots=True)
class AppError:
    """Error value: code, message, origin and structured metadata."""
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict = field(default_factory=dict)
    cause: Exception | None = None

    def to_dict(self) -> dict:
        return {
            "code": self.code.name,
            "category": self.code.category,
            "message": self.message,
            "origin": self.context.origin,
            "metadata": self.metadata,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


class _WrappedError(Exception):
    def __init__(self, error: AppError):
        super().__init__(str(error))
        self.error = error

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def metadata(self) -> dict:
        return self.error.metadata


class SchemaError(_WrappedError):
    """Raised when a rule tree cannot be built.

    Unknown predicates, arity mismatches and malformed combinators are
    detected while the schema is constructed, before any input is seen.
    """


class TranslationError(_WrappedError):
    """Raised when a template source cannot be loaded."""


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool: return True

    def is_err(self) -> bool: return False

    def unwrap(self) -> T: return self.value

    def unwrap_or(self, default: T) -> T: return self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool: return False

    def is_err(self) -> bool: return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T: return default

    def unwrap_err(self) -> E: return self.error


Result = Union[Ok[T], Err[E]]
