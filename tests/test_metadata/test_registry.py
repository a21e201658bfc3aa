"""Tests for cmdexplorer.metadata.registry.

Covers:
- define/get/has round trip keyed by function identity
- Bound methods, staticmethods and classmethods resolve to their function
- Same-named methods on different classes do not collide
- Non-callable and unhashable targets have no metadata
- Entries disappear with their function
- Module-level helpers use the default registry
"""

from __future__ import annotations

import gc

from cmdexplorer.metadata.registry import (
    COMMAND_HANDLER_METADATA,
    MetadataRegistry,
    default_registry,
    define_metadata,
    get_metadata,
)


class TestMetadataRegistry:
    def test_define_and_get(self) -> None:
        registry = MetadataRegistry()

        def handler():
            pass

        registry.define("key", handler, {"a": 1})
        assert registry.get("key", handler) == {"a": 1}
        assert registry.has("key", handler)

    def test_missing_key_or_target(self) -> None:
        registry = MetadataRegistry()

        def handler():
            pass

        assert registry.get("key", handler) is None
        registry.define("key", handler, 1)
        assert registry.get("other", handler) is None
        assert registry.get("key", None) is None
        assert not registry.has("other", handler)

    def test_bound_method_resolves_to_function(self) -> None:
        registry = MetadataRegistry()

        class Tool:
            def run(self):
                pass

        registry.define("key", Tool.run, "meta")
        assert registry.get("key", Tool().run) == "meta"

    def test_static_and_class_methods(self) -> None:
        registry = MetadataRegistry()

        class Tool:
            @staticmethod
            def s():
                pass

            @classmethod
            def c(cls):
                pass

        registry.define("key", Tool.__dict__["s"], "static")
        registry.define("key", Tool.__dict__["c"], "class")
        assert registry.get("key", Tool.s) == "static"
        assert registry.get("key", Tool.c) == "class"

    def test_same_name_on_different_classes(self) -> None:
        registry = MetadataRegistry()

        class A:
            def run(self):
                pass

        class B:
            def run(self):
                pass

        registry.define("key", A.run, "a")
        assert registry.get("key", B.run) is None

    def test_unreferenceable_target(self) -> None:
        registry = MetadataRegistry()
        registry.define("key", lambda: None, 1)
        assert registry.get("key", 42) is None
        assert registry.get("key", [1, 2]) is None

    def test_entries_are_weak(self) -> None:
        registry = MetadataRegistry()

        def handler():
            pass

        registry.define("key", handler, 1)
        assert len(registry._tables["key"]) == 1
        del handler
        gc.collect()
        assert len(registry._tables["key"]) == 0

    def test_clear(self) -> None:
        registry = MetadataRegistry()

        def handler():
            pass

        registry.define("key", handler, 1)
        registry.clear()
        assert registry.get("key", handler) is None


class TestDefaultRegistry:
    def test_module_helpers(self) -> None:
        def handler():
            pass

        define_metadata(COMMAND_HANDLER_METADATA, handler, "meta")
        assert get_metadata(COMMAND_HANDLER_METADATA, handler) == "meta"
        assert default_registry.get(COMMAND_HANDLER_METADATA, handler) == "meta"
