"""Loader context and its assembly from caller options.

Options is what the caller provides; every field is optional. init_context()
fills in defaults and copies the mutable collections so that nothing the
loader does is visible through the caller's own objects.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import NamedTuple

from .compiled_cache import CompiledCache
from .handlers import ModuleHandler
from .handlers import ModuleHandlerRegistry
from .handlers import default_module_handlers
from .module_cache import ModuleCache
from .paths import PathHandler
from .paths import default_path_handler

logger = logging.getLogger(__name__)


class FileContent(NamedTuple):
    """File content with an explicit extension (bypasses extension inference)."""

    content: str
    extname: str


File = str | FileContent

GetFile = Callable[[str], Awaitable[File]]
LoadModuleHook = Callable[[str, "Context"], Awaitable[Any]]
AddStyle = Callable[[str, str | None], None]
LogCallback = Callable[..., None]
CustomBlockHandler = Callable[[Any, str, "Context"], Awaitable[Any]]

_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Options:
    """Caller-supplied loader configuration.

    Attributes:
        get_file: Fetches raw content for a path. Returns text, or a
            FileContent / (content, extname) pair / {"content", "extname"} mapping.
        modules: Pre-resolved modules (path -> module), e.g. {"vue": vue}
        module_handlers: Extension -> handler (".json", ".vue", ...)
        builtin_handlers: Seed the registry with default_module_handlers()
        path_handler: Path algebra (default: POSIX)
        load_module: Custom resolution hook; return None to fall through
        add_style: Injects a stylesheet (style, scope_id)
        log: Log callback (level, *data)
        custom_block_handler: Handles non-standard SFC blocks
        cache: Compiled-code cache used by handlers
        retain_failures: Keep failed resolutions in the cache instead of evicting
    """

    get_file: GetFile | None = None
    modules: Mapping[str, Any] | ModuleCache | None = None
    module_handlers: Mapping[str, ModuleHandler] | None = None
    builtin_handlers: bool = False
    path_handler: PathHandler | None = None
    load_module: LoadModuleHook | None = None
    add_style: AddStyle | None = None
    log: LogCallback | None = None
    custom_block_handler: CustomBlockHandler | None = None
    cache: CompiledCache | None = None
    retain_failures: bool = False


@dataclass
class Context:
    """Resolution context shared by one load request and its dependencies.

    The modules cache is the only mutable state; only the loader writes to it.
    Pass the same Context to several load_module calls to share deduplication.
    """

    modules: ModuleCache = field(default_factory=ModuleCache)
    module_handlers: ModuleHandlerRegistry = field(default_factory=ModuleHandlerRegistry)
    path_handler: PathHandler = default_path_handler
    get_file: GetFile | None = None
    load_module: LoadModuleHook | None = None
    add_style: AddStyle | None = None
    log: LogCallback | None = None
    custom_block_handler: CustomBlockHandler | None = None
    cache: CompiledCache | None = None
    retain_failures: bool = False

    def emit_log(self, level: str, *data: Any) -> None:
        """Log through the caller's log callback, or the stdlib logger.

        Args:
            level: One of error, warn, info, debug
            data: Values to log
        """
        if self.log is not None:
            self.log(level, *data)
            return
        logger.log(_LOG_LEVELS.get(level.lower(), logging.INFO), " ".join(str(d) for d in data))


def init_modules(options: Options) -> ModuleCache:
    return ModuleCache(options.modules, include_failed=options.retain_failures)


def init_module_handlers(options: Options) -> ModuleHandlerRegistry:
    registry = ModuleHandlerRegistry(default_module_handlers() if options.builtin_handlers else None)
    if options.module_handlers:
        for extension, handler in options.module_handlers.items():
            registry.register(extension, handler)
    return registry


def init_path_handler(options: Options) -> PathHandler:
    return options.path_handler or default_path_handler


def init_context(options: Options | None = None) -> Context:
    """Assemble a Context from caller options.

    The module cache and handler registry are fresh objects seeded from the
    options; the caller's mappings are never mutated or retained. All other
    collaborators are carried over unchanged.
    """
    options = options or Options()
    return Context(
        modules=init_modules(options),
        module_handlers=init_module_handlers(options),
        path_handler=init_path_handler(options),
        get_file=options.get_file,
        load_module=options.load_module,
        add_style=options.add_style,
        log=options.log,
        custom_block_handler=options.custom_block_handler,
        cache=options.cache,
        retain_failures=options.retain_failures,
    )


__all__ = [
    "File",
    "FileContent",
    "Options",
    "Context",
    "init_context",
]
