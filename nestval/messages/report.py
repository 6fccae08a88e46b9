"""Error Report

Nested mapping of messages mirroring the input's shape:

    {"meta": {"info": {"details": ["is missing"]}},
     "data": {0: {"name": ["must be filled"]}}}

Map keys stay as they are, sequence positions are ``int`` keys, and each
leaf is a list of messages. Messages written to the same path accumulate in
order; nothing is ever overwritten. Failures on the root value itself are
stored under the ``None`` key.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from nestval.rules.result import Segment

ROOT_KEY = None


class ErrorReport(dict):
    """Dict of messages with path-based, concatenating writes."""

    def add(self, path: Sequence[Segment], message: str) -> ErrorReport:
        """Append ``message`` at ``path``."""
        if not path:
            self.setdefault(ROOT_KEY, []).append(message)
            return self
        node: dict = self
        for segment in path[:-1]:
            node = _child_mapping(node, segment)
        existing = node.setdefault(path[-1], [])
        if isinstance(existing, list):
            existing.append(message)
        else:
            existing.setdefault(ROOT_KEY, []).append(message)
        return self

    def merge(self, other: Mapping) -> ErrorReport:
        """Deep-merge ``other`` into this report, concatenating message lists."""
        _merge_into(self, other)
        return self

    def to_dict(self) -> dict:
        return _copy(self)


def _child_mapping(node: dict, segment: Segment) -> dict:
    existing = node.get(segment)
    if existing is None:
        node[segment] = child = {}
        return child
    if isinstance(existing, dict):
        return existing
    # Messages already sit at this path; nested messages go alongside them.
    for item in existing:
        if isinstance(item, dict):
            return item
    existing.append(child := {})
    return child


def _merge_into(target: dict, source: Mapping) -> None:
    for key, value in source.items():
        current = target.get(key)
        if current is None:
            target[key] = _copy(value)
        elif isinstance(current, list) and isinstance(value, list):
            current.extend(_copy(value))
        elif isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        elif isinstance(current, list):
            current.append(_copy(value))
        else:
            current.setdefault(ROOT_KEY, []).extend(value)


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy(v) for v in value]
    return value
