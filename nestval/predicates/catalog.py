"""Predicate Catalog

A predicate is a named boolean check over an input value and zero or more
arguments. Parameters are declared in order with the input last, which is
what argument binding relies on::

    gt?(num, input)        -> input > num
    included_in?(list, input)

The built-in set is closed and statically enumerable (``BUILTIN_PREDICATES``);
applications add their own through ``PredicateRegistry.register``.
"""
from __future__ import annotations

import inspect
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable


class _Undefined:
    """Sentinel for an argument that was not supplied.

    Distinct from ``None``: ``None`` is a value a user may submit,
    ``UNDEFINED`` means nothing was there at all.
    """
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Undefined"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


class Predicate(ABC):
    """Capability shared by every predicate: a name, ordered parameters, evaluation."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registered name, e.g. ``"filled?"``."""

    @property
    @abstractmethod
    def parameters(self) -> tuple[str, ...]:
        """Ordered parameter names, input last."""

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @abstractmethod
    def evaluate(self, *values: Any) -> bool:
        """Evaluate with bound arguments followed by the input."""

    def __call__(self, *values: Any) -> bool: return self.evaluate(*values)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}({', '.join(self.parameters)})>"


class FunctionPredicate(Predicate):
    """Predicate backed by a plain function; parameters come from its signature."""

    def __init__(self, name: str, fn: Callable[..., bool], parameters: tuple[str, ...] | None = None):
        self._name = name
        self._fn = fn
        self._parameters = parameters if parameters is not None else tuple(inspect.signature(fn).parameters)

    @property
    def name(self) -> str:
        return self._name

    @property
    def parameters(self) -> tuple[str, ...]:
        return self._parameters

    def evaluate(self, *values: Any) -> bool:
        return bool(self._fn(*values))


_BUILTINS: list[FunctionPredicate] = []


def predicate(name: str) -> Callable[[Callable[..., bool]], Callable[..., bool]]:
    """Register a function in the built-in catalog under ``name``."""
    def decorator(fn: Callable[..., bool]) -> Callable[..., bool]:
        _BUILTINS.append(FunctionPredicate(name, fn))
        return fn
    return decorator


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


# ============================================================================
# Structure
# ============================================================================

@predicate("key?")
def is_key(name, input) -> bool:
    return isinstance(input, Mapping) and name in input


@predicate("attr?")
def is_attr(name, input) -> bool:
    return input is not UNDEFINED and hasattr(input, name)


@predicate("none?")
def is_none(input) -> bool:
    return input is None


@predicate("empty?")
def is_empty(input) -> bool:
    if input is None or input is UNDEFINED:
        return True
    if isinstance(input, (str, bytes, list, tuple, set, frozenset, Mapping)):
        return len(input) == 0
    return False


@predicate("filled?")
def is_filled(input) -> bool:
    return not is_empty(input)


# ============================================================================
# Types
# ============================================================================

@predicate("type?")
def is_type(type, input) -> bool:
    return isinstance(input, type)


@predicate("str?")
def is_str(input) -> bool:
    return isinstance(input, str)


@predicate("int?")
def is_int(input) -> bool:
    return isinstance(input, int) and not isinstance(input, bool)


@predicate("float?")
def is_float(input) -> bool:
    return isinstance(input, float)


@predicate("decimal?")
def is_decimal(input) -> bool:
    return isinstance(input, Decimal)


@predicate("number?")
def is_number(input) -> bool:
    return _is_number(input)


@predicate("bool?")
def is_bool(input) -> bool:
    return isinstance(input, bool)


@predicate("true?")
def is_true(input) -> bool:
    return input is True


@predicate("false?")
def is_false(input) -> bool:
    return input is False


@predicate("hash?")
def is_hash(input) -> bool:
    return isinstance(input, Mapping)


@predicate("array?")
def is_array(input) -> bool:
    return isinstance(input, (list, tuple))


@predicate("date?")
def is_date(input) -> bool:
    return isinstance(input, date) and not isinstance(input, datetime)


@predicate("date_time?")
def is_date_time(input) -> bool:
    return isinstance(input, datetime)


@predicate("time?")
def is_time(input) -> bool:
    return isinstance(input, time)


# ============================================================================
# Comparison
# ============================================================================

@predicate("gt?")
def is_gt(num, input) -> bool:
    return input > num


@predicate("gteq?")
def is_gteq(num, input) -> bool:
    return input >= num


@predicate("lt?")
def is_lt(num, input) -> bool:
    return input < num


@predicate("lteq?")
def is_lteq(num, input) -> bool:
    return input <= num


@predicate("eql?")
def is_eql(left, input) -> bool:
    return left == input


@predicate("not_eql?")
def is_not_eql(left, input) -> bool:
    return left != input


@predicate("odd?")
def is_odd(input) -> bool:
    return input % 2 == 1


@predicate("even?")
def is_even(input) -> bool:
    return input % 2 == 0


# ============================================================================
# Size and membership
# ============================================================================

@predicate("size?")
def is_size(size, input) -> bool:
    if isinstance(size, range):
        return len(input) in size
    return len(input) == size


@predicate("min_size?")
def is_min_size(num, input) -> bool:
    return len(input) >= num


@predicate("max_size?")
def is_max_size(num, input) -> bool:
    return len(input) <= num


@predicate("included_in?")
def is_included_in(list, input) -> bool:
    return input in list


@predicate("excluded_from?")
def is_excluded_from(list, input) -> bool:
    return input not in list


@predicate("includes?")
def includes(value, input) -> bool:
    return value in input


@predicate("excludes?")
def excludes(value, input) -> bool:
    return value not in input


# ============================================================================
# Format
# ============================================================================

_UUID_V4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)


@predicate("format?")
def is_format(regex, input) -> bool:
    pattern = regex if isinstance(regex, re.Pattern) else re.compile(regex)
    return isinstance(input, str) and pattern.search(input) is not None


@predicate("uuid_v4?")
def is_uuid_v4(input) -> bool:
    return isinstance(input, str) and _UUID_V4.match(input) is not None


BUILTIN_PREDICATES: tuple[Predicate, ...] = tuple(_BUILTINS)
