"""Evaluation Results

A rule evaluates to ``SUCCESS`` or to a ``Failure`` tree. The tree mirrors
the rule tree that produced it, pruned to the nodes that failed:

- ``predicate`` failures are leaves and carry the predicate name, its bound
  arguments and the input it rejected
- ``key`` failures wrap the failure of a map value or sequence element and
  contribute one path segment
- ``each``, ``set`` and ``or`` failures group child failures

Paths are relative: a failure's ``path`` is the segment(s) it adds to its
parent's path, so a sub-schema produces the same tree wherever it is nested.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Union

if TYPE_CHECKING:
    from nestval.messages.compiler import MessageCompiler
    from nestval.messages.report import ErrorReport

Segment = Union[str, int]


@dataclass(frozen=True, slots=True)
class Success:
    """Outcome of a rule that passed."""

    @property
    def is_success(self) -> bool: return True

    @property
    def is_failure(self) -> bool: return False


SUCCESS = Success()


@dataclass(frozen=True, slots=True)
class Failure:
    """Outcome of a rule that failed."""
    node: str
    path: tuple[Segment, ...] = ()
    predicate: str | None = None
    options: dict[str, Any] = field(default_factory=dict, hash=False)
    children: tuple[Failure, ...] = ()

    @property
    def is_success(self) -> bool: return False

    @property
    def is_failure(self) -> bool: return True

    def leaves(self) -> list[Failure]:
        """Predicate failures under this node, depth-first."""
        if self.node == "predicate":
            return [self]
        return [leaf for child in self.children for leaf in child.leaves()]


RuleResult = Union[Success, Failure]


class SchemaResult:
    """Accumulates failures for one input as it moves through a schema.

    Holds the (possibly coerced) output, the failures recorded so far and the
    compiler used to turn them into messages on demand.
    """

    def __init__(self, output: Any, failures: Iterable[Failure] = (),
                 message_compiler: MessageCompiler | None = None):
        self.output = output
        self.failures: list[Failure] = list(failures)
        self.message_compiler = message_compiler

    def error(self, name: Segment) -> bool:
        """Whether a failure has already been recorded under top-level ``name``."""
        return any(f.path[:1] == (name,) for f in self.failures)

    def concat(self, failures: Iterable[Failure]) -> SchemaResult:
        self.failures.extend(failures)
        return self

    @property
    def success(self) -> bool: return not self.failures

    @property
    def failure(self) -> bool: return bool(self.failures)

    def errors(self, *, full: bool = False, locale: str | None = None) -> ErrorReport:
        """Compile recorded failures into an error report."""
        if self.message_compiler is None:
            raise RuntimeError("SchemaResult has no message compiler")
        return self.message_compiler.with_options(full=full, locale=locale).compile(self.failures)

    @property
    def messages(self) -> ErrorReport: return self.errors()

    def __getitem__(self, name: Segment) -> Any: return self.output[name]

    def __repr__(self) -> str:
        return f"<SchemaResult success={self.success} failures={len(self.failures)}>"
