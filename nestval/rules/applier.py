"""Applies a schema's top-level rules to one input."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from nestval.core.logging import rules_logger

from .nodes import Rule
from .result import Failure, SchemaResult

if TYPE_CHECKING:
    from nestval.messages.compiler import MessageCompiler
    from nestval.messages.report import ErrorReport

log = rules_logger()


class RuleApplier:
    """Evaluates named rules in declaration order and accumulates failures.

    A rule is skipped when the input already carries an error under its name
    (recorded by a filter or type-check step), so business predicates never
    run against values that failed earlier.
    """

    def __init__(self, rules: Sequence[tuple[str, Rule]] | Mapping[str, Rule],
                 message_compiler: MessageCompiler | None = None):
        self.rules: tuple[tuple[str, Rule], ...] = tuple(rules.items() if isinstance(rules, Mapping) else rules)
        self.message_compiler = message_compiler

    def __call__(self, result: SchemaResult) -> SchemaResult: return self.apply(result)

    def apply(self, result: SchemaResult) -> SchemaResult:
        failures: list[Failure] = []
        skipped = 0
        for name, rule in self.rules:
            if result.error(name):
                skipped += 1
                log.debug("rule_skipped", rule=name)
                continue
            if (outcome := rule.evaluate(result.output)).is_failure:
                failures.append(outcome)
        log.debug("rules_applied", total=len(self.rules), skipped=skipped, failed=len(failures))
        return result.concat(failures)

    def report(self, result: SchemaResult) -> ErrorReport:
        """Apply rules and compile the accumulated failures into an error report."""
        if self.message_compiler is None:
            raise RuntimeError("RuleApplier has no message compiler")
        return self.message_compiler.compile(self.apply(result).failures)

    def to_ast(self) -> tuple:
        return ("set", tuple(rule.to_ast() for _, rule in self.rules))
