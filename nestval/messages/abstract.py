"""Message Backend

Resolves the message for a failed predicate by walking an ordered chain of
candidate keys, most specific first. Given ``gt?`` failing on ``age``::

    errors.rules.age.gt?.arg.default
    errors.rules.age.gt?
    errors.gt?.failure
    errors.gt?.value.age.arg.default
    errors.gt?.value.age
    errors.gt?.value.default.arg.default
    errors.gt?.value.default
    errors.gt?.arg.default
    errors.gt?

The first key that exists (in the requested locale or the default locale)
and holds a plain string wins. The order is load-bearing and kept as is;
nested sub-trees are skipped even when their key exists.

Every resolution is memoized per backend instance, keyed by the full call
signature, so a failure descriptor walks the chain once per process.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from nestval.core.config import DEFAULT_MESSAGES_PATH, Settings
from nestval.core.logging import messages_logger

from .cache import MessageCache, cache_key

if TYPE_CHECKING:
    from .namespaced import NamespacedMessages

log = messages_logger()

DEFAULT_LOOKUP_PATHS: tuple[str, ...] = (
    "{root}.rules.{path}.{predicate}.arg.{arg_type}",
    "{root}.rules.{path}.{predicate}",
    "{root}.{predicate}.{message_type}",
    "{root}.{predicate}.value.{path}.arg.{arg_type}",
    "{root}.{predicate}.value.{path}",
    "{root}.{predicate}.value.{val_type}.arg.{arg_type}",
    "{root}.{predicate}.value.{val_type}",
    "{root}.{predicate}.arg.{arg_type}",
    "{root}.{predicate}",
)

LOOKUP_OPTIONS: frozenset[str] = frozenset({"root", "predicate", "path", "val_type", "arg_type"})


@dataclass(frozen=True, slots=True)
class TypeClassifier:
    """Maps a runtime type to a lookup tag; unmapped types get ``default``."""
    types: tuple[tuple[type, str], ...] = ()
    default: str = "default"

    def classify(self, tp: type | None) -> str:
        if tp is None:
            return self.default
        table = dict(self.types)
        for klass in getattr(tp, "__mro__", (tp,)):
            if klass in table:
                return table[klass]
        return self.default

    def __call__(self, tp: type | None) -> str: return self.classify(tp)


@dataclass(frozen=True, slots=True)
class MessagesConfig:
    """Configuration a message backend resolves against."""
    root: str = "errors"
    lookup_paths: tuple[str, ...] = DEFAULT_LOOKUP_PATHS
    lookup_options: frozenset[str] = LOOKUP_OPTIONS
    arg_types: TypeClassifier = field(default_factory=lambda: TypeClassifier(((range, "range"),)))
    val_types: TypeClassifier = field(default_factory=lambda: TypeClassifier(((range, "range"), (str, "string"))))
    default_locale: str = "en"
    paths: tuple[Path, ...] = (DEFAULT_MESSAGES_PATH,)

    @classmethod
    def from_settings(cls, settings: Settings) -> MessagesConfig:
        return cls(root=settings.MESSAGES_ROOT, default_locale=settings.DEFAULT_LOCALE,
            paths=tuple(Path(p) for p in settings.MESSAGE_PATHS))


class _Tokens(dict):
    """format_map source that leaves unknown placeholders in place."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def interpolate(template: str, tokens: Mapping[str, Any]) -> str:
    return template.format_map(_Tokens(tokens))


class MessageBackend(ABC):
    """Base class for message backends.

    Subclasses supply three capabilities: ``key_exists``, ``get`` and
    ``default_locale``. Lookup, precedence and caching live here.
    """

    def __init__(self, config: MessagesConfig | None = None):
        self.config = config or MessagesConfig()
        self.cache = MessageCache()

    @abstractmethod
    def key_exists(self, key: str, options: Mapping[str, Any]) -> bool:
        """Whether ``key`` is defined for the requested locale or the default locale."""

    @abstractmethod
    def get(self, key: str, options: Mapping[str, Any]) -> Any:
        """Entry stored under ``key``; strings are interpolated with ``options``."""

    @property
    def default_locale(self) -> str:
        return self.config.default_locale

    @property
    def root(self) -> str:
        return self.config.root

    def call(self, predicate: str, options: Mapping[str, Any] | None = None) -> str | None:
        """Resolve the message for ``predicate``; ``None`` when no candidate key resolves."""
        options = dict(options or {})
        return self.cache.fetch_or_store(cache_key((predicate, options)), lambda: self._resolve(predicate, options))

    def __getitem__(self, key: str | tuple[str, Mapping[str, Any]]) -> str | None:
        predicate, options = key if isinstance(key, tuple) else (key, None)
        return self.call(predicate, options)

    def _resolve(self, predicate: str, options: dict[str, Any]) -> str | None:
        key, opts = self.lookup(predicate, options)
        if key is None:
            log.debug("message_unresolved", predicate=predicate, path=options.get("path"))
            return None
        log.debug("message_resolved", predicate=predicate, key=key)
        return self.get(key, opts)

    def lookup(self, predicate: str, options: Mapping[str, Any]) -> tuple[str | None, dict[str, Any]]:
        """First candidate key holding a string, plus the options to render it with."""
        tokens = {
            **options,
            "root": f"{self.root}.not" if options.get("not") else self.root,
            "predicate": predicate,
            "arg_type": self.config.arg_types.classify(options.get("arg_type")),
            "val_type": self.config.val_types.classify(options.get("val_type")),
            "message_type": options.get("message_type") or "failure",
        }
        path = options.get("path", ())
        tokens["path"] = options.get("rule") or (path if isinstance(path, str) else ".".join(str(s) for s in path))

        opts = {k: v for k, v in options.items() if k not in self.config.lookup_options}

        for key in self.lookup_paths(tokens):
            if self.key_exists(key, opts) and isinstance(self.get(key, opts), str):
                return key, opts
        return None, opts

    def lookup_paths(self, tokens: Mapping[str, Any]) -> list[str]:
        return [path.format_map(tokens) for path in self.config.lookup_paths]

    def text(self, key: str, options: Mapping[str, Any] | None = None) -> str | None:
        """String stored under an absolute ``key``, or ``None``."""
        options = options or {}
        if self.key_exists(key, options) and isinstance(value := self.get(key, options), str):
            return value
        return None

    def rule(self, name: str, options: Mapping[str, Any] | None = None) -> str | None:
        """Display name configured for rule ``name`` under ``rules.<name>``."""
        return self.text(f"rules.{name}", options)

    def namespaced(self, namespace: str) -> NamespacedMessages:
        """Backend that prefers messages under ``<root>.<namespace>``."""
        from .namespaced import NamespacedMessages
        return NamespacedMessages(namespace, self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} root={self.root!r} locale={self.default_locale!r}>"
