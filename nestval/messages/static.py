"""In-memory message backend."""
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from nestval.core.errors import TranslationError

from .abstract import MessageBackend, MessagesConfig, interpolate
from .loader import deep_merge, load_templates

_MISSING = object()


class StaticMessages(MessageBackend):
    """Messages held in a ``{locale: {nested keys: template}}`` mapping.

    Usage:
        messages = StaticMessages({"en": {"errors": {"filled?": "must be filled"}}})
        messages.call("filled?", {"path": ("email",)})   # "must be filled"
    """

    def __init__(self, data: Mapping[str, Mapping], config: MessagesConfig | None = None):
        super().__init__(config)
        self.data = data

    @classmethod
    def load(cls, *paths: str | Path, config: MessagesConfig | None = None) -> StaticMessages:
        """Build from template files; later files override earlier ones."""
        config = config or MessagesConfig()
        data: dict = {}
        for path in paths or config.paths:
            result = load_templates(path)
            if result.is_err():
                raise TranslationError(result.unwrap_err())
            data = deep_merge(data, result.unwrap())
        return cls(data, config)

    def merge(self, data: Mapping[str, Mapping]) -> StaticMessages:
        """New backend with ``data`` layered over this one's templates."""
        return StaticMessages(deep_merge(self.data, data), self.config)

    def _fetch(self, key: str, locale: str) -> Any:
        node: Any = self.data.get(locale, _MISSING)
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def _locale(self, options: Mapping[str, Any]) -> str:
        return options.get("locale") or self.default_locale

    def key_exists(self, key: str, options: Mapping[str, Any]) -> bool:
        return (self._fetch(key, self._locale(options)) is not _MISSING
            or self._fetch(key, self.default_locale) is not _MISSING)

    def get(self, key: str, options: Mapping[str, Any]) -> Any:
        value = self._fetch(key, self._locale(options))
        if value is _MISSING:
            value = self._fetch(key, self.default_locale)
        if value is _MISSING:
            return None
        return interpolate(value, options) if isinstance(value, str) else value
