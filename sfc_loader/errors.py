"""Exceptions raised by the module loader.

Errors coming from collaborators (get_file, the custom load hook, module
handlers) are never wrapped; they reach every waiter on the failing path as-is.
"""

from __future__ import annotations

from typing import Any


class LoaderError(Exception):
    """Base exception for errors raised by the loader itself."""


class UnsupportedExtensionError(LoaderError, TypeError):
    """No module handler is registered for a file extension."""

    def __init__(self, extension: str, path: str):
        self.extension = extension
        self.path = path
        super().__init__(f"Unable to handle {extension!r} files ({path}), register a module handler for it")


class InvalidModuleContentError(LoaderError, TypeError):
    """Fetched content is not text."""

    def __init__(self, path: str, content: Any):
        self.path = path
        self.content = content
        super().__init__(f"Invalid module content ({path}): {content!r}")


class FetcherNotConfiguredError(LoaderError):
    """A path needs fetching but the context has no get_file collaborator."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot fetch {path}: no get_file configured")


__all__ = [
    "LoaderError",
    "UnsupportedExtensionError",
    "InvalidModuleContentError",
    "FetcherNotConfiguredError",
]
