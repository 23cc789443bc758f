"""Tests for context assembly from options."""

import asyncio
from unittest.mock import Mock

import pytest
from sfc_loader.compiled_cache import MemoryCompiledCache
from sfc_loader.context import Context
from sfc_loader.context import Options
from sfc_loader.context import init_context
from sfc_loader.handlers import ModuleHandlerRegistry
from sfc_loader.handlers import json_handler
from sfc_loader.loader import load_module
from sfc_loader.module_cache import EntryState
from sfc_loader.module_cache import ModuleCache
from sfc_loader.paths import default_path_handler


async def vue_handler(content, path, context):
    return content


class TestInitContext:
    """init_context defaults and copying."""

    def test_defaults(self):
        context = init_context(Options())

        assert isinstance(context.modules, ModuleCache)
        assert len(context.modules) == 0
        assert isinstance(context.module_handlers, ModuleHandlerRegistry)
        assert len(context.module_handlers) == 0
        assert context.path_handler is default_path_handler
        assert context.get_file is None
        assert context.load_module is None
        assert context.retain_failures is False

    def test_no_options(self):
        assert isinstance(init_context(), Context)

    def test_options_collections_not_mutated(self):
        """Cache changes are only visible through the context."""
        modules = {"vue": object()}
        handlers = {".vue": vue_handler}
        options = Options(modules=modules, module_handlers=handlers)

        context = init_context(options)
        context.modules.set_resolved("/extra.vue", "extra")
        context.module_handlers.register(".json", json_handler)

        assert modules.keys() == {"vue"}
        assert handlers == {".vue": vue_handler}
        assert options.modules is modules
        assert context.modules.is_resolved("/extra.vue")

    def test_contexts_do_not_share_cache(self):
        options = Options(modules={"vue": "vue"})
        first = init_context(options)
        second = init_context(options)

        first.modules.set_resolved("/a", 1)

        assert "/a" not in second.modules
        assert first.modules is not second.modules
        assert first.module_handlers is not second.module_handlers

    def test_seeded_from_module_cache(self):
        """A ModuleCache given as modules is copied, not shared."""
        source = ModuleCache({"vue": "vue"})
        context = init_context(Options(modules=source))

        context.modules.set_resolved("/a", 1)

        assert context.modules.is_resolved("vue")
        assert "/a" not in source

    @pytest.mark.asyncio
    async def test_seeding_skips_in_flight_entries(self, fake_files):
        """A copy never inherits a resolution it cannot settle."""
        get_file = fake_files({}, delay=0.01)
        first = init_context(Options(get_file=get_file, module_handlers={".txt": vue_handler}))
        pending = asyncio.ensure_future(load_module("/x.txt", first))
        await asyncio.sleep(0)
        assert first.modules.is_pending("/x.txt")

        second = init_context(Options(get_file=get_file, modules=first.modules, module_handlers={".txt": vue_handler}))
        assert "/x.txt" not in second.modules

        with pytest.raises(FileNotFoundError):
            await pending
        for _ in range(2):
            with pytest.raises(FileNotFoundError):
                await load_module("/x.txt", second)

        assert "/x.txt" not in second.modules
        assert get_file.count("/x.txt") == 3

    def test_seeding_copies_failures_only_when_retained(self):
        source = ModuleCache({"vue": "vue"})
        source.set_failed("/broken.vue", ValueError("boom"))

        evicting = init_context(Options(modules=source))
        retaining = init_context(Options(modules=source, retain_failures=True))

        assert "/broken.vue" not in evicting.modules
        assert retaining.modules.get_entry("/broken.vue").state == EntryState.FAILED
        assert evicting.modules.is_resolved("vue")

    def test_builtin_handlers_overridden_by_user(self):
        context = init_context(Options(builtin_handlers=True, module_handlers={".json": vue_handler}))

        assert context.module_handlers[".json"] is vue_handler
        assert ".yaml" in context.module_handlers

    def test_builtin_handlers_off_by_default(self):
        context = init_context(Options(module_handlers={".vue": vue_handler}))

        assert list(context.module_handlers) == [".vue"]

    def test_collaborators_carried_through(self):
        get_file = Mock()
        hook = Mock()
        add_style = Mock()
        log = Mock()
        custom_block_handler = Mock()
        cache = MemoryCompiledCache()
        path_handler = Mock()

        context = init_context(
            Options(
                get_file=get_file,
                load_module=hook,
                add_style=add_style,
                log=log,
                custom_block_handler=custom_block_handler,
                cache=cache,
                path_handler=path_handler,
                retain_failures=True,
            )
        )

        assert context.get_file is get_file
        assert context.load_module is hook
        assert context.add_style is add_style
        assert context.log is log
        assert context.custom_block_handler is custom_block_handler
        assert context.cache is cache
        assert context.path_handler is path_handler
        assert context.retain_failures is True


class TestEmitLog:
    """Context.emit_log routing."""

    def test_uses_log_callback(self):
        log = Mock()
        context = init_context(Options(log=log))

        context.emit_log("warn", "template tip", 3)

        log.assert_called_once_with("warn", "template tip", 3)

    def test_falls_back_to_logger(self, caplog):
        context = init_context(Options())

        with caplog.at_level("WARNING", logger="sfc_loader.context"):
            context.emit_log("warn", "style compilation", "failed")

        assert "style compilation failed" in caplog.text

    @pytest.mark.parametrize("level", ["error", "info", "debug", "unknown"])
    def test_any_level_accepted(self, level, caplog):
        context = init_context(Options())

        with caplog.at_level("DEBUG", logger="sfc_loader.context"):
            context.emit_log(level, "message")

        assert "message" in caplog.text
