"""Tests for message backends: lookup precedence, locales and caching."""

import threading

import i18n
import pytest

from nestval.core.config import DEFAULT_MESSAGES_PATH, Settings
from nestval.core.errors import ErrorCode, SchemaError, TranslationError
from nestval.messages import (
    DEFAULT_LOOKUP_PATHS,
    I18nMessages,
    I18nTranslator,
    MessageCache,
    NamespacedMessages,
    StaticMessages,
    TypeClassifier,
    cache_key,
    interpolate,
    setup,
)


def static(errors, **locales):
    data = {"en": {"errors": errors}}
    for locale, tree in locales.items():
        data[locale] = {"errors": tree}
    return StaticMessages(data)


class TestLookupPaths:
    def test_candidates_most_specific_first(self, messages):
        tokens = {"root": "errors", "predicate": "gt?", "path": "age", "arg_type": "default",
                  "val_type": "default", "message_type": "failure"}
        assert messages.lookup_paths(tokens) == [
            "errors.rules.age.gt?.arg.default",
            "errors.rules.age.gt?",
            "errors.gt?.failure",
            "errors.gt?.value.age.arg.default",
            "errors.gt?.value.age",
            "errors.gt?.value.default.arg.default",
            "errors.gt?.value.default",
            "errors.gt?.arg.default",
            "errors.gt?",
        ]
        assert len(DEFAULT_LOOKUP_PATHS) == 9

    def test_plain_predicate_message(self):
        assert static({"filled?": "must be filled"}).call("filled?", {"path": ("email",)}) == "must be filled"

    def test_rule_specific_message_wins(self):
        backend = static({
            "filled?": "must be filled",
            "rules": {"email": {"filled?": "email is required"}},
        })
        assert backend.call("filled?", {"path": ("email",)}) == "email is required"
        assert backend.call("filled?", {"path": ("name",)}) == "must be filled"

    def test_nested_subtree_is_skipped(self):
        backend = static({"size?": {"arg": {"default": "size must be {size}"}}})
        assert backend.call("size?", {"path": ("tags",), "arg_type": int, "size": 3}) == "size must be 3"

    def test_arg_type_variant(self, messages):
        text = messages.call("size?", {"path": ("tags",), "arg_type": range, "size_left": 2, "size_right": 4})
        assert text == "size must be within 2 - 4"

    def test_value_type_variant(self, messages):
        text = messages.call("size?", {"path": ("name",), "arg_type": int, "val_type": str, "size": 3})
        assert text == "length must be 3"

    def test_negated_lookup_uses_not_root(self, messages):
        assert messages.call("filled?", {"path": ("name",), "not": True}) == "must not be filled"

    def test_unresolved_returns_none(self):
        assert static({}).call("filled?", {"path": ("x",)}) is None

    def test_unknown_placeholder_left_intact(self):
        assert interpolate("must be {num} {unit}", {"num": 3}) == "must be 3 {unit}"


class TestLocales:
    def test_requested_locale(self):
        backend = static({"filled?": "must be filled"}, pl={"filled?": "musi być wypełnione"})
        assert backend.call("filled?", {"path": ("x",), "locale": "pl"}) == "musi być wypełnione"

    def test_falls_back_to_default_locale(self):
        backend = static({"filled?": "must be filled"}, pl={})
        assert backend.call("filled?", {"path": ("x",), "locale": "pl"}) == "must be filled"


class TestCache:
    def test_repeat_calls_hit_cache(self):
        backend = static({"filled?": "must be filled"})
        options = {"path": ("email",)}
        backend.call("filled?", options)
        backend.call("filled?", dict(options))
        assert backend.cache.misses == 1
        assert backend.cache.hits == 1

    def test_resolution_runs_once(self, monkeypatch):
        backend = static({"filled?": "must be filled"})
        calls = []
        original = backend.lookup

        def spy(predicate, options):
            calls.append(predicate)
            return original(predicate, options)

        monkeypatch.setattr(backend, "lookup", spy)
        for _ in range(5):
            backend.call("filled?", {"path": ("email",)})
        assert calls == ["filled?"]

    def test_backends_do_not_share_cache(self):
        first, second = static({"filled?": "a"}), static({"filled?": "b"})
        assert first.call("filled?", {}) == "a"
        assert second.call("filled?", {}) == "b"

    def test_cache_key_is_order_stable(self):
        assert cache_key({"a": 1, "b": [1, 2]}) == cache_key({"b": (1, 2), "a": 1})

    def test_concurrent_misses_compute_once(self):
        cache = MessageCache()
        computed = []
        start = threading.Barrier(8)

        def compute():
            computed.append(1)
            return "value"

        def worker(results):
            start.wait()
            results.append(cache.fetch_or_store("key", compute))

        results = []
        threads = [threading.Thread(target=worker, args=(results,)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert results == ["value"] * 8
        assert len(computed) == 1

    def test_concurrent_hits_are_all_counted(self):
        cache = MessageCache()
        cache.fetch_or_store("key", lambda: "value")
        start = threading.Barrier(8)

        def worker():
            start.wait()
            for _ in range(500):
                cache.fetch_or_store("key", lambda: "other")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert cache.misses == 1
        assert cache.hits == 8 * 500

    def test_clear_during_compute_discards_result(self):
        cache = MessageCache()

        def compute():
            cache.clear()
            return "stale"

        assert cache.fetch_or_store("key", compute) == "stale"
        assert "key" not in cache
        assert cache.fetch_or_store("key", lambda: "fresh") == "fresh"
        assert cache.fetch_or_store("key", lambda: "other") == "fresh"


class TestTypeClassifier:
    def test_walks_mro(self):
        class Name(str):
            pass

        classifier = TypeClassifier(((str, "string"),))
        assert classifier(Name) == "string"
        assert classifier(int) == "default"
        assert classifier(None) == "default"


class TestStaticMessages:
    def test_load_merges_files(self, templates):
        override = templates('en:\n  errors:\n    filled?: "cannot be blank"\n', "override.yml")
        backend = StaticMessages.load(DEFAULT_MESSAGES_PATH, override)
        assert backend.call("filled?", {"path": ("x",)}) == "cannot be blank"
        assert backend.call("int?", {"path": ("x",)}) == "must be an integer"

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(TranslationError) as exc_info:
            StaticMessages.load(tmp_path / "absent.yml")
        assert exc_info.value.error.code == ErrorCode.E6001_FILE_NOT_FOUND

    def test_merge_returns_new_backend(self, messages):
        merged = messages.merge({"en": {"errors": {"filled?": "required"}}})
        assert merged.call("filled?", {"path": ("x",)}) == "required"
        assert messages.call("filled?", {"path": ("x",)}) == "must be filled"

    def test_rule_display_name(self):
        backend = StaticMessages({"en": {"rules": {"email": "E-mail"}}})
        assert backend.rule("email") == "E-mail"
        assert backend.rule("age") is None


class TestI18nMessages:
    def test_resolves_through_translator(self, templates):
        path = templates('en:\n  errors:\n    gt?: "must exceed {num}"\n')
        backend = I18nMessages(I18nTranslator([path], default_locale="en"))
        assert backend.call("gt?", {"path": ("age",), "num": 18}) == "must exceed 18"

    def test_templates_land_in_python_i18n(self, templates):
        path = templates('en:\n  errors:\n    rules:\n      nickname: "Nick"\n')
        I18nTranslator([path], default_locale="en")
        assert i18n.t("errors.rules.nickname", locale="en") == "Nick"

    def test_merge_adds_source_and_clears_cache(self, templates):
        base = templates('en:\n  errors:\n    filled?: "must be filled"\n', "base.yml")
        extra = templates('en:\n  errors:\n    filled?: "is required"\n', "extra.yml")
        backend = I18nMessages(I18nTranslator([base], default_locale="en"))
        assert backend.call("filled?", {"path": ("x",)}) == "must be filled"
        backend.merge(extra)
        assert len(backend.cache) == 0
        assert backend.translator.load_path[-1] == extra
        assert backend.call("filled?", {"path": ("x",)}) == "is required"

    def test_locale_fallback(self, templates):
        path = templates('en:\n  errors:\n    filled?: "must be filled"\npl:\n  errors: {}\n')
        backend = I18nMessages(I18nTranslator([path], default_locale="en"))
        assert backend.call("filled?", {"path": ("x",), "locale": "pl"}) == "must be filled"

    def test_subtrees_are_not_templates(self, templates):
        path = templates('en:\n  errors:\n    size?:\n      arg:\n        default: "size must be {size}"\n')
        translator = I18nTranslator([path], default_locale="en")
        assert translator.exists("errors.size?.arg.default", "en")
        assert not translator.exists("errors.size?.arg", "en")

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(TranslationError) as exc_info:
            I18nTranslator([tmp_path / "absent.yml"])
        assert exc_info.value.code == ErrorCode.E6001_FILE_NOT_FOUND

    def test_translator_protocol(self):
        from nestval.messages import Translator
        assert isinstance(I18nTranslator(), Translator)


class TestNamespaced:
    def test_prefers_namespace(self):
        backend = static({"filled?": "must be filled", "signup": {"filled?": "please fill in"}})
        namespaced = backend.namespaced("signup")
        assert isinstance(namespaced, NamespacedMessages)
        assert namespaced.call("filled?", {"path": ("x",)}) == "please fill in"
        assert backend.call("filled?", {"path": ("x",)}) == "must be filled"

    def test_falls_back_outside_namespace(self):
        namespaced = static({"int?": "must be an integer"}).namespaced("signup")
        assert namespaced.call("int?", {"path": ("x",)}) == "must be an integer"


class TestSetup:
    def test_static_backend(self):
        assert isinstance(setup(Settings(MESSAGES_BACKEND="static")), StaticMessages)

    def test_i18n_backend(self):
        assert isinstance(setup(Settings(MESSAGES_BACKEND="i18n")), I18nMessages)

    def test_unknown_backend(self):
        with pytest.raises(SchemaError) as exc_info:
            setup(Settings(MESSAGES_BACKEND="gettext"))
        assert exc_info.value.code == ErrorCode.E7004_INVALID_MESSAGES_CONFIG

    def test_each_call_owns_its_cache(self):
        assert setup().cache is not setup().cache
