"""Module handler registry.

A module handler turns the text of a fetched file into a module:

    async def handler(content: str, path: str, context: Context) -> Any

Handlers are keyed by extension (".json", ".vue", ...). A handler may resolve
further modules through ``load_module_impl(dep, context)``; nested requests
share the context's cache.

Built-in handlers are opt-in (see default_module_handlers). User handlers are
registered on top of them and override any built-in for the same extension.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import MutableMapping
from typing import TYPE_CHECKING
from typing import Any

import yaml

from .compiled_cache import get_or_compile

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

ModuleHandler = Callable[[str, str, "Context"], Awaitable[Any]]


class ModuleHandlerRegistry(MutableMapping[str, ModuleHandler]):
    """Mapping of file extension to module handler.

    Any string is a valid key, including "" for extensionless paths.
    """

    def __init__(self, handlers: Mapping[str, ModuleHandler] | None = None) -> None:
        self._handlers: dict[str, ModuleHandler] = {}
        if handlers:
            self._handlers.update(handlers)

    def register(self, extension: str, handler: ModuleHandler) -> ModuleHandlerRegistry:
        """Register (or override) the handler for an extension.

        Returns:
            Self for method chaining.
        """
        if extension in self._handlers:
            logger.debug(f"[handlers] overriding handler for '{extension}'")
        self._handlers[extension] = handler
        return self

    def unregister(self, extension: str) -> ModuleHandler | None:
        return self._handlers.pop(extension, None)

    def copy(self) -> ModuleHandlerRegistry:
        return ModuleHandlerRegistry(self._handlers)

    @property
    def extensions(self) -> list[str]:
        return sorted(self._handlers)

    def __getitem__(self, extension: str) -> ModuleHandler:
        return self._handlers[extension]

    def __setitem__(self, extension: str, handler: ModuleHandler) -> None:
        self.register(extension, handler)

    def __delitem__(self, extension: str) -> None:
        del self._handlers[extension]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"ModuleHandlerRegistry({self.extensions})"


def compiled_key(path: str, content: str) -> str:
    """Cache key for the compiled form of content; edits produce a new key."""
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
    return f"{path}#{digest}"


async def json_handler(content: str, path: str, context: Context) -> Any:
    """Parse a .json file.

    The normalized document is kept in context.cache, when configured.
    """

    async def compile() -> str:
        return json.dumps(json.loads(content))

    return json.loads(await get_or_compile(context, compiled_key(path, content), compile))


async def yaml_handler(content: str, path: str, context: Context) -> Any:
    """Parse a .yaml/.yml file (safe loader only).

    Documents are cached as JSON; values JSON cannot represent (dates,
    timestamps) come back as strings.
    """

    async def compile() -> str:
        return json.dumps(yaml.safe_load(content), default=str)

    return json.loads(await get_or_compile(context, compiled_key(path, content), compile))


async def text_handler(content: str, path: str, context: Context) -> str:
    return content


async def style_handler(content: str, path: str, context: Context) -> str:
    """Inject a stylesheet through context.add_style, if configured.

    The module value is the stylesheet text itself.
    """
    if context.add_style is not None:
        context.add_style(content, None)
    else:
        context.emit_log("warn", f"No add_style configured, {path} was not injected")
    return content


def default_module_handlers() -> dict[str, ModuleHandler]:
    """Return a fresh mapping of the built-in handlers."""
    return {
        ".json": json_handler,
        ".yaml": yaml_handler,
        ".yml": yaml_handler,
        ".txt": text_handler,
        ".md": text_handler,
        ".css": style_handler,
    }


__all__ = [
    "ModuleHandler",
    "ModuleHandlerRegistry",
    "compiled_key",
    "default_module_handlers",
    "json_handler",
    "yaml_handler",
    "text_handler",
    "style_handler",
]
