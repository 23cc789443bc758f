"""Tests for the handler registry and built-in handlers."""

from unittest.mock import Mock

import pytest
import yaml
from sfc_loader.compiled_cache import MemoryCompiledCache
from sfc_loader.context import Options
from sfc_loader.context import init_context
from sfc_loader.handlers import ModuleHandlerRegistry
from sfc_loader.handlers import compiled_key
from sfc_loader.handlers import default_module_handlers
from sfc_loader.handlers import json_handler
from sfc_loader.handlers import style_handler
from sfc_loader.handlers import text_handler
from sfc_loader.handlers import yaml_handler
from sfc_loader.loader import load_module


async def upper_handler(content, path, context):
    return content.upper()


class TestModuleHandlerRegistry:
    """Registry mapping behavior."""

    def test_register_and_lookup(self):
        registry = ModuleHandlerRegistry()

        result = registry.register(".txt", upper_handler)

        assert result is registry
        assert registry[".txt"] is upper_handler
        assert registry.get(".txt") is upper_handler
        assert registry.get(".vue") is None
        assert ".txt" in registry

    def test_override(self):
        registry = ModuleHandlerRegistry({".txt": text_handler})

        registry[".txt"] = upper_handler

        assert registry[".txt"] is upper_handler
        assert len(registry) == 1

    def test_empty_extension_key(self):
        registry = ModuleHandlerRegistry({"": text_handler})

        assert registry[""] is text_handler
        assert registry.extensions == [""]

    def test_unregister_and_delete(self):
        registry = ModuleHandlerRegistry({".a": text_handler, ".b": text_handler})

        assert registry.unregister(".a") is text_handler
        assert registry.unregister(".a") is None
        del registry[".b"]
        assert len(registry) == 0

    def test_copy_is_independent(self):
        registry = ModuleHandlerRegistry({".txt": text_handler})
        clone = registry.copy()

        clone.register(".json", json_handler)

        assert ".json" not in registry

    def test_any_callable_accepted(self):
        """Handlers are not validated for shape."""
        handler = Mock()
        registry = ModuleHandlerRegistry()

        registry.register(".x", handler)

        assert registry[".x"] is handler


class TestBuiltinHandlers:
    """Built-in extension handlers."""

    def test_default_mapping_is_fresh(self):
        first = default_module_handlers()
        first.clear()

        assert ".json" in default_module_handlers()

    @pytest.mark.asyncio
    async def test_json(self):
        context = init_context()
        assert await json_handler('{"a": [1, 2]}', "/a.json", context) == {"a": [1, 2]}

    @pytest.mark.asyncio
    async def test_yaml(self):
        context = init_context()
        assert await yaml_handler("name: app\nitems:\n  - 1\n", "/a.yaml", context) == {"name": "app", "items": [1]}

    @pytest.mark.asyncio
    async def test_yaml_rejects_unsafe_tags(self):
        with pytest.raises(yaml.YAMLError):
            await yaml_handler("!!python/object/apply:os.system ['true']", "/a.yaml", init_context())

    @pytest.mark.asyncio
    async def test_style_injected(self):
        add_style = Mock()
        context = init_context(Options(add_style=add_style))

        result = await style_handler(".a { color: red }", "/a.css", context)

        assert result == ".a { color: red }"
        add_style.assert_called_once_with(".a { color: red }", None)

    @pytest.mark.asyncio
    async def test_style_without_add_style(self):
        log = Mock()
        context = init_context(Options(log=log))

        assert await style_handler("p {}", "/a.css", context) == "p {}"
        log.assert_called_once_with("warn", "No add_style configured, /a.css was not injected")

    @pytest.mark.asyncio
    async def test_load_through_builtins(self):
        files = {"/config.json": '{"debug": true}', "/README.md": "# Title"}

        async def get_file(path):
            return files[path]

        options = Options(get_file=get_file, builtin_handlers=True)

        assert await load_module("/config.json", options) == {"debug": True}
        assert await load_module("/README.md", options) == "# Title"


class TestCompiledOutput:
    """Parsing built-ins keep their output in context.cache."""

    @pytest.mark.asyncio
    async def test_json_stored_and_reused(self):
        cache = MemoryCompiledCache()
        context = init_context(Options(cache=cache))
        content = '{"b": 1, "a": [true, null]}'

        assert await json_handler(content, "/a.json", context) == {"b": 1, "a": [True, None]}
        key = compiled_key("/a.json", content)
        assert await cache.get(key) == '{"b": 1, "a": [true, null]}'

        await cache.set(key, '{"from": "cache"}')
        assert await json_handler(content, "/a.json", context) == {"from": "cache"}

    @pytest.mark.asyncio
    async def test_edited_content_gets_new_key(self):
        cache = MemoryCompiledCache()
        context = init_context(Options(cache=cache))

        await yaml_handler("a: 1\n", "/a.yaml", context)
        assert await yaml_handler("a: 2\n", "/a.yaml", context) == {"a": 2}

        assert len(cache) == 2
        assert compiled_key("/a.yaml", "a: 1\n") != compiled_key("/a.yaml", "a: 2\n")

    @pytest.mark.asyncio
    async def test_yaml_dates_become_strings(self):
        context = init_context(Options(cache=MemoryCompiledCache()))

        assert await yaml_handler("released: 2024-01-02\n", "/a.yaml", context) == {"released": "2024-01-02"}

    @pytest.mark.asyncio
    async def test_invalid_json_not_stored(self):
        cache = MemoryCompiledCache()
        context = init_context(Options(cache=cache))

        with pytest.raises(ValueError):
            await json_handler("{broken", "/a.json", context)
        assert len(cache) == 0
