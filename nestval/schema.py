"""Schema Processor

Runs one input through the steps of a schema and returns a ``SchemaResult``:

1. Filter rules, applied to the raw input
2. Params coercion, when the schema was built for form-style input
3. The schema's rules, skipping keys that already failed a filter

Usage:
    schema = Schema([("email", Key("email", check(registry, "filled?")))])
    result = schema({"email": ""})
    result.messages        # {"email": ["must be filled"]}
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from nestval.coercion import KeyCoercer
from nestval.core.logging import schema_logger
from nestval.messages import MessageBackend, MessageCompiler, setup
from nestval.rules import Rule, RuleApplier, SchemaResult, Set

log = schema_logger()


class Schema:
    """Named rules plus everything needed to turn their failures into messages.

    Args:
        rules: ``(name, rule)`` pairs or a mapping, applied in order
        filters: Rules applied to the raw input before coercion
        messages: Message backend; a fresh one from settings when omitted
        coercer: Coercer for declared key types
        params: Apply ``coercer`` before the rules run
        name: Name used when the schema is embedded in another one
    """

    def __init__(
        self,
        rules: Sequence[tuple[str, Rule]] | Mapping[str, Rule],
        *,
        filters: Sequence[tuple[str, Rule]] = (),
        messages: MessageBackend | None = None,
        coercer: KeyCoercer | None = None,
        params: bool = False,
        name: str = "schema",
    ):
        self.name = name
        self.messages = messages or setup()
        self.coercer = coercer or KeyCoercer()
        self.params = params
        self.message_compiler = MessageCompiler(self.messages)
        self.rule_applier = RuleApplier(rules, self.message_compiler)
        self.filter_applier = RuleApplier(filters, self.message_compiler)

    @property
    def rules(self) -> tuple[tuple[str, Rule], ...]:
        return self.rule_applier.rules

    @property
    def filters(self) -> tuple[tuple[str, Rule], ...]:
        return self.filter_applier.rules

    def __call__(self, input: Any) -> SchemaResult:
        result = SchemaResult(input, message_compiler=self.message_compiler)
        if self.filters:
            self.filter_applier.apply(result)
        if self.params:
            result.output = self.coercer(result.output)
        self.rule_applier.apply(result)
        log.debug("schema_applied", schema=self.name, success=result.success, failures=len(result.failures))
        return result

    def to_node(self, name: str | None = None) -> Set:
        """This schema's rules as one ``Set`` node, for embedding under a key."""
        return Set(name or self.name, tuple(rule for _, rule in self.rules))

    def to_ast(self) -> tuple:
        return self.rule_applier.to_ast()

    def __repr__(self) -> str:
        return f"<Schema name={self.name!r} keys={[name for name, _ in self.rules]} params={self.params}>"
