"""Params Coercion

Explicit, opt-in conversion of form-style string input into the types a
schema declares, applied before rules run. Only keys whose declared type
predicate has a coercion rule are touched; a value that cannot be coerced
is left exactly as submitted so the type predicate reports it.

Features:
- Coercion rules return Result instead of raising
- Empty strings become None for typed keys (form fields left blank)
- Coercers nest through sub-schemas and sequences
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from nestval.core.errors import AppError, Err, ErrorCode, Ok, Result


class CoercionRule(ABC):
    """Parses a submitted string into ``target_type``."""
    target_type: type

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse stripped text; raise ``ValueError`` when it does not fit."""

    def coerce(self, value: Any) -> Result[Any, AppError]:
        if not isinstance(value, str):
            return Err(AppError(
                code=ErrorCode.E2004_INVALID_TYPE,
                message=f"Only strings are coerced, got {type(value).__name__}",
            ))
        try:
            return Ok(self.parse(value.strip()))
        except (ValueError, InvalidOperation) as e:
            return Err(AppError(
                code=ErrorCode.E2004_INVALID_TYPE,
                message=f"Cannot coerce {value!r} to {self.target_type.__name__}",
                metadata={"value": value, "target": self.target_type.__name__},
                cause=e,
            ))

    def __call__(self, value: Any) -> Result[Any, AppError]: return self.coerce(value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} -> {self.target_type.__name__}>"


class StringToInt(CoercionRule):
    target_type = int

    def parse(self, text: str) -> int: return int(text)


class StringToFloat(CoercionRule):
    target_type = float

    def parse(self, text: str) -> float: return float(text)


class StringToDecimal(CoercionRule):
    """Keeps the submitted precision: ``"1.10"`` stays ``Decimal("1.10")``."""
    target_type = Decimal

    def parse(self, text: str) -> Decimal: return Decimal(text)


class StringToBool(CoercionRule):
    target_type = bool
    true_values = frozenset({"true", "1", "yes", "on", "y"})
    false_values = frozenset({"false", "0", "no", "off", "n"})

    def parse(self, text: str) -> bool:
        lower = text.lower()
        if lower in self.true_values:
            return True
        if lower in self.false_values:
            return False
        raise ValueError(f"not a boolean: {text!r}")


class ISO8601ToDate(CoercionRule):
    target_type = date

    def parse(self, text: str) -> date: return date.fromisoformat(text)


class ISO8601ToDateTime(CoercionRule):
    """Accepts a trailing ``Z`` for UTC."""
    target_type = datetime

    def parse(self, text: str) -> datetime: return datetime.fromisoformat(text.replace("Z", "+00:00"))


# Type predicate -> coercion rule used by Params schemas
PARAMS_COERCIONS: dict[str, CoercionRule] = {
    "int?": StringToInt(),
    "float?": StringToFloat(),
    "decimal?": StringToDecimal(),
    "bool?": StringToBool(),
    "date?": ISO8601ToDate(),
    "date_time?": ISO8601ToDateTime(),
}


# ============================================================================
# Coercers
# ============================================================================

class Coercer(ABC):
    """Applies coercion to a value of a declared shape."""

    @abstractmethod
    def __call__(self, value: Any) -> Any: ...


@dataclass(frozen=True, slots=True)
class ValueCoercer(Coercer):
    """Coerces a scalar with one rule; blank strings become None."""
    rule: CoercionRule

    def __call__(self, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return self.rule.coerce(value).unwrap_or(value)


@dataclass(frozen=True, slots=True)
class EachCoercer(Coercer):
    """Coerces every element of a sequence."""
    inner: Coercer

    def __call__(self, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        return type(value)(self.inner(item) for item in value)


@dataclass(frozen=True, slots=True)
class KeyCoercer(Coercer):
    """Coerces declared keys of a mapping; other keys pass through untouched."""
    keys: tuple[tuple[str, Coercer], ...] = field(default_factory=tuple)

    def __call__(self, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        output = dict(value)
        for name, coercer in self.keys:
            if name in output:
                output[name] = coercer(output[name])
        return output
