"""Localization-library message backend

``I18nMessages`` delegates storage, locale fallback and lookup to a
``Translator``. ``I18nTranslator`` is the bundled translator, an adapter over
the python-i18n package: template files are read with PyYAML and registered
key by key in python-i18n's store, messages come back through ``i18n.t``.

python-i18n keeps a single process-wide store and configuration. Every
``I18nTranslator`` reads and writes that store, and its ``default_locale`` is
python-i18n's ``fallback`` setting, so templates added through one backend
are visible to all of them.
"""
from __future__ import annotations

import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

import i18n

from nestval.core.errors import TranslationError
from nestval.core.logging import messages_logger

from .abstract import MessageBackend, MessagesConfig, interpolate
from .loader import load_templates

log = messages_logger()


@runtime_checkable
class Translator(Protocol):
    """What the backend needs from a localization library."""
    default_locale: str
    locale: str | None

    def exists(self, key: str, locale: str) -> bool: ...

    def translate(self, key: str, locale: str, tokens: Mapping[str, Any]) -> Any: ...

    def add_path(self, path: str | Path) -> None: ...


def _flatten(tree: Mapping, prefix: str = "") -> Iterator[tuple[str, str]]:
    """Dotted keys of every string template in a nested tree."""
    for name, value in tree.items():
        key = f"{prefix}{name}"
        if isinstance(value, Mapping):
            yield from _flatten(value, key + ".")
        elif isinstance(value, str):
            yield key, value


class I18nTranslator:
    """Translator backed by python-i18n.

    Args:
        paths: Template files shaped ``{locale: {nested keys: template}}``
        default_locale: Sets python-i18n's ``fallback`` locale when given
        locale: Locale used when a lookup names none
    """

    def __init__(self, paths: Iterable[str | Path] = (), default_locale: str | None = None,
                 locale: str | None = None):
        if default_locale:
            i18n.set("fallback", default_locale)
        self.locale = locale
        self.load_path: list[Path] = []
        self._lock = threading.Lock()
        for path in paths:
            self.add_path(path)

    @property
    def default_locale(self) -> str:
        return i18n.get("fallback")

    def add_path(self, path: str | Path) -> None:
        result = load_templates(path)
        if result.is_err():
            raise TranslationError(result.unwrap_err())
        keys = 0
        with self._lock:
            for locale, tree in result.unwrap().items():
                if not isinstance(tree, Mapping):
                    continue
                for key, template in _flatten(tree):
                    i18n.add_translation(key, template, locale=str(locale))
                    keys += 1
            self.load_path.append(Path(path))
        log.info("translations_loaded", source=str(path), keys=keys)

    def exists(self, key: str, locale: str) -> bool:
        return i18n.translations.has(key, locale)

    def translate(self, key: str, locale: str, tokens: Mapping[str, Any]) -> Any:
        if not (self.exists(key, locale) or self.exists(key, self.default_locale)):
            return f"translation missing: {locale}.{key}"
        # python-i18n only expands %{name}; {name} placeholders pass through untouched
        return interpolate(i18n.t(key, locale=locale), tokens)


class I18nMessages(MessageBackend):
    """Message backend delegating to a ``Translator``."""

    def __init__(self, translator: Translator | None = None, config: MessagesConfig | None = None):
        super().__init__(config)
        self.translator = translator or I18nTranslator(self.config.paths, self.config.default_locale)

    def key_exists(self, key: str, options: Mapping[str, Any]) -> bool:
        return (self.translator.exists(key, options.get("locale") or self.default_locale)
            or self.translator.exists(key, self.translator.default_locale))

    def get(self, key: str, options: Mapping[str, Any]) -> Any:
        if not key:
            return None
        return self.translator.translate(key, options.get("locale") or self.default_locale, options)

    def merge(self, path: str | Path) -> I18nMessages:
        """Add a template source; previously resolved messages are discarded."""
        self.translator.add_path(path)
        self.cache.clear()
        return self

    @property
    def default_locale(self) -> str:
        return self.translator.locale or self.translator.default_locale or super().default_locale
