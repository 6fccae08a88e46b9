"""Message resolution: backends, caching and compilation into error reports.

Usage:
    from nestval.messages import setup, MessageCompiler

    messages = setup()                      # backend chosen from settings
    compiler = MessageCompiler(messages)
    report = compiler.compile(result.failures)
"""
from nestval.core.config import Settings, settings as default_settings
from nestval.core.errors import invalid_messages_config

from .abstract import (
    DEFAULT_LOOKUP_PATHS,
    LOOKUP_OPTIONS,
    MessageBackend,
    MessagesConfig,
    TypeClassifier,
    interpolate,
)
from .cache import MessageCache, cache_key
from .static import StaticMessages
from .i18n import I18nMessages, I18nTranslator, Translator
from .namespaced import NamespacedMessages
from .report import ErrorReport, ROOT_KEY
from .compiler import MessageCompiler, message_tokens


def setup(settings: Settings | None = None) -> MessageBackend:
    """Build a fresh message backend from configuration.

    Each call returns a new backend with its own cache; share the instance to
    share resolved messages.
    """
    settings = settings or default_settings
    config = MessagesConfig.from_settings(settings)
    match settings.MESSAGES_BACKEND:
        case "static":
            return StaticMessages.load(config=config)
        case "i18n":
            return I18nMessages(config=config)
        case other:
            raise invalid_messages_config(f"Unknown messages backend '{other}'",
                origin="messages_setup", backend=other)


__all__ = [
    "DEFAULT_LOOKUP_PATHS",
    "LOOKUP_OPTIONS",
    "MessageBackend",
    "MessagesConfig",
    "TypeClassifier",
    "interpolate",
    "MessageCache",
    "cache_key",
    "StaticMessages",
    "I18nMessages",
    "Translator",
    "I18nTranslator",
    "NamespacedMessages",
    "ErrorReport",
    "ROOT_KEY",
    "MessageCompiler",
    "message_tokens",
    "setup",
]
