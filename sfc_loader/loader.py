"""Module resolution engine.

Turns a path into a module exactly once per context, however many callers ask
for it concurrently or re-entrantly (e.g. a handler resolving its own
dependencies).

Resolution order for a path not yet in the cache (first match wins):
1. Custom hook (context.load_module); returning None means "no opinion"
2. Fetch (context.get_file) + module handler chosen by extension

Single resolution is guaranteed by installing the PENDING entry before the
first await: any later request for the same path finds it and joins the
in-flight task instead of starting another one.

Known limitation: a module that (directly or transitively) requests itself
while it is still resolving waits on its own pending task and never completes.
There is no cycle detection.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import Any

from .context import Context
from .context import FileContent
from .context import Options
from .context import init_context
from .errors import FetcherNotConfiguredError
from .errors import InvalidModuleContentError
from .errors import UnsupportedExtensionError
from .module_cache import EntryState

logger = logging.getLogger(__name__)


async def load_module(path: str, options: Options | Context | None = None) -> Any:
    """Load a module and, recursively, its dependencies.

    Args:
        path: Module path
        options: Options to assemble a new Context from, or an existing Context
            to reuse (its cache is shared with previous requests)

    Returns:
        The resolved module
    """
    context = options if isinstance(options, Context) else init_context(options)
    return await load_module_impl(path, context)


async def load_module_impl(path: str, context: Context) -> Any:
    """Resolve path against context, sharing any in-flight resolution.

    Safe to call concurrently and from inside module handlers.

    Raises:
        UnsupportedExtensionError: No handler for the file's extension
        InvalidModuleContentError: get_file returned non-text content
        FetcherNotConfiguredError: The path needs fetching but get_file is unset
        Exception: Anything raised by get_file, the custom hook or a handler,
            unchanged
    """
    modules = context.modules
    entry = modules.get_entry(path)

    if entry is not None:
        if entry.state == EntryState.RESOLVED:
            return entry.value
        if entry.state == EntryState.FAILED:
            logger.debug(f"[module:resolve] {path} -> retained failure")
            raise entry.error
        logger.debug(f"[module:resolve] {path} -> joining pending resolution")
        # Shield so a cancelled waiter does not cancel the shared resolution
        return await asyncio.shield(entry.task)

    # No await between the lookup above and this install
    task = asyncio.ensure_future(_resolve(path, context))
    modules.set_pending(path, task)
    return await asyncio.shield(task)


async def _resolve(path: str, context: Context) -> Any:
    """Run the resolution for path and settle its cache entry."""
    try:
        module = await _produce_module(path, context)
    except asyncio.CancelledError:
        context.modules.evict(path)
        raise
    except Exception as e:
        if context.retain_failures:
            context.modules.set_failed(path, e)
        else:
            context.modules.evict(path)
        logger.debug(f"[module:resolve] {path} failed: {type(e).__name__}: {e}")
        raise

    context.modules.set_resolved(path, module)
    return module


async def _produce_module(path: str, context: Context) -> Any:
    if context.load_module is not None:
        module = await _maybe_await(context.load_module(path, context))
        if module is not None:
            logger.debug(f"[module:resolve] {path} -> custom hook")
            return module

    if context.get_file is None:
        raise FetcherNotConfiguredError(path)

    res = await _maybe_await(context.get_file(path))
    content, extname = _normalize_file(res, path, context)

    handler = context.module_handlers.get(extname)
    if handler is None:
        raise UnsupportedExtensionError(extname, path)

    if not isinstance(content, str):
        raise InvalidModuleContentError(path, content)

    logger.debug(f"[module:resolve] {path} -> handler '{extname}'")
    return await _maybe_await(handler(content, path, context))


def _normalize_file(res: Any, path: str, context: Context) -> tuple[Any, str]:
    """Split a get_file result into (content, extname).

    Plain content takes its extension from the path.
    """
    if isinstance(res, FileContent):
        return res.content, res.extname
    if isinstance(res, Mapping) and "content" in res and "extname" in res:
        return res["content"], res["extname"]
    if isinstance(res, tuple) and len(res) == 2:
        return res[0], res[1]
    return res, context.path_handler.extname(path)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


__all__ = ["load_module", "load_module_impl"]
