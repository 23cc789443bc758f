"""sfc-loader: concurrency-safe module resolution and caching.

Resolves a module path into a module exactly once per context: fetch the
source, pick a handler by extension, let the handler build the module (and
load its dependencies), and memoize the result.
"""

from .compiled_cache import CompiledCache
from .compiled_cache import DiskCompiledCache
from .compiled_cache import MemoryCompiledCache
from .compiled_cache import get_or_compile
from .context import Context
from .context import File
from .context import FileContent
from .context import Options
from .context import init_context
from .errors import FetcherNotConfiguredError
from .errors import InvalidModuleContentError
from .errors import LoaderError
from .errors import UnsupportedExtensionError
from .handlers import ModuleHandler
from .handlers import ModuleHandlerRegistry
from .handlers import default_module_handlers
from .loader import load_module
from .loader import load_module_impl
from .module_cache import CacheEntry
from .module_cache import EntryState
from .module_cache import ModuleCache
from .paths import DefaultPathHandler
from .paths import PathHandler
from .paths import default_path_handler
from .sources import FileSystemSource

__all__ = [
    "load_module",
    "load_module_impl",
    "init_context",
    "Context",
    "Options",
    "File",
    "FileContent",
    "ModuleCache",
    "CacheEntry",
    "EntryState",
    "ModuleHandler",
    "ModuleHandlerRegistry",
    "default_module_handlers",
    "PathHandler",
    "DefaultPathHandler",
    "default_path_handler",
    "CompiledCache",
    "MemoryCompiledCache",
    "DiskCompiledCache",
    "get_or_compile",
    "FileSystemSource",
    "LoaderError",
    "UnsupportedExtensionError",
    "InvalidModuleContentError",
    "FetcherNotConfiguredError",
]
