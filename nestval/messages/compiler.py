"""Message Compiler

Turns failure trees into an ``ErrorReport`` shaped like the input. ``key``,
``each`` and ``set`` failures extend the path, predicate leaves become
messages at their full path, ``or`` failures become one message joining both
branches.

A predicate with no resolvable message is still reported, as
``"translation missing: <locale>.<root>.<predicate>"``, and logged.
"""
from __future__ import annotations

from typing import Any, Iterable

from nestval.core.logging import messages_logger
from nestval.predicates import UNDEFINED
from nestval.rules.result import Failure, Segment

from .abstract import MessageBackend
from .report import ErrorReport

log = messages_logger()


class MessageCompiler:
    """Compiles failures into messages through a message backend.

    Args:
        messages: Backend resolving predicate failures to text
        full: Prefix each message with the rule's display name
        locale: Locale to resolve in; the backend's default when omitted
    """

    def __init__(self, messages: MessageBackend, *, full: bool = False, locale: str | None = None):
        self.messages = messages
        self.full = full
        self.locale = locale

    def with_options(self, *, full: bool | None = None, locale: str | None = None) -> MessageCompiler:
        return MessageCompiler(
            self.messages,
            full=self.full if full is None else full,
            locale=locale or self.locale,
        )

    @property
    def current_locale(self) -> str:
        return self.locale or self.messages.default_locale

    def compile(self, failures: Iterable[Failure]) -> ErrorReport:
        report = ErrorReport()
        for failure in failures:
            self._visit(failure, (), report)
        return report

    def _visit(self, failure: Failure, path: tuple[Segment, ...], report: ErrorReport) -> None:
        full_path = path + failure.path
        match failure.node:
            case "predicate":
                report.add(full_path, self.message(failure, full_path))
            case "or":
                report.add(full_path, self._or_message(failure, full_path))
            case _:
                for child in failure.children:
                    self._visit(child, full_path, report)

    def _texts(self, failure: Failure, path: tuple[Segment, ...]) -> list[str]:
        full_path = path + failure.path
        if failure.node == "predicate":
            return [self.message(failure, full_path)]
        if failure.node == "or":
            return [self._or_message(failure, full_path)]
        return [text for child in failure.children for text in self._texts(child, full_path)]

    def _or_message(self, failure: Failure, path: tuple[Segment, ...]) -> str:
        word = self.messages.text(f"{self.messages.root}.or", {"locale": self.current_locale}) or "or"
        return f" {word} ".join(text for child in failure.children for text in self._texts(child, path))

    def message(self, failure: Failure, path: tuple[Segment, ...]) -> str:
        """Text for one predicate failure located at ``path``."""
        args = failure.options.get("args", ())
        arg_vals = [value for _, value in args]
        value = failure.options.get("input", UNDEFINED)
        tokens = message_tokens(args)

        options: dict[str, Any] = {
            "path": path,
            "arg_type": type(arg_vals[0]) if arg_vals else None,
            "val_type": type(value) if value is not UNDEFINED else None,
            "not": bool(failure.options.get("not")),
            "message_type": failure.options.get("message_type", "failure"),
            "locale": self.current_locale,
            **tokens,
        }
        if rule := failure.options.get("rule"):
            options["rule"] = rule

        text = self.messages.call(failure.predicate, options)
        if text is None:
            log.warning("message_missing", predicate=failure.predicate,
                path=".".join(str(s) for s in path), locale=self.current_locale)
            text = f"translation missing: {self.current_locale}.{self.messages.root}.{failure.predicate}"

        if self.full:
            name = _rule_name(path, failure)
            text = f"{self.messages.rule(name, {'locale': self.current_locale}) or name} {text}"
        return text


def message_tokens(args: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Interpolation tokens for a predicate's bound arguments.

    Ranges add ``<name>_left``/``<name>_right`` (inclusive bounds) and
    sequences are joined with ", ".
    """
    tokens: dict[str, Any] = {}
    for name, value in args:
        if isinstance(value, range):
            left, right = (value[0], value[-1]) if len(value) else (value.start, value.stop)
            tokens[f"{name}_left"], tokens[f"{name}_right"] = left, right
            tokens[name] = f"{left} - {right}"
        elif isinstance(value, (list, tuple, set, frozenset)):
            tokens[name] = ", ".join(str(v) for v in value)
        elif isinstance(value, type):
            tokens[name] = value.__name__
        else:
            tokens[name] = value
    return tokens


def _rule_name(path: tuple[Segment, ...], failure: Failure) -> str:
    for segment in reversed(path):
        if isinstance(segment, str):
            return segment
    return str(failure.predicate)
