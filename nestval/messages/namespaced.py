"""Backend view that prefers messages under a namespace."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .abstract import MessageBackend


class NamespacedMessages(MessageBackend):
    """Wraps a backend; every lookup path is tried under ``<root>.<namespace>`` first.

    Storage is delegated; the view keeps its own cache because its
    resolutions differ from the wrapped backend's.
    """

    def __init__(self, namespace: str, messages: MessageBackend):
        super().__init__(messages.config)
        self.namespace = namespace
        self.messages = messages

    def key_exists(self, key: str, options: Mapping[str, Any]) -> bool:
        return self.messages.key_exists(key, options)

    def get(self, key: str, options: Mapping[str, Any]) -> Any:
        return self.messages.get(key, options)

    @property
    def default_locale(self) -> str:
        return self.messages.default_locale

    def lookup_paths(self, tokens: Mapping[str, Any]) -> list[str]:
        namespaced = {**tokens, "root": f"{tokens['root']}.{self.namespace}"}
        return super().lookup_paths(namespaced) + super().lookup_paths(tokens)
