"""Path algebra used by the loader.

The loader only needs two operations from a path handler: the extension of a
path (used to pick a module handler) and resolution of a dependency reference
against the path of the module that imports it. Paths are URL-like and always
use forward slashes, regardless of the host OS.
"""

from __future__ import annotations

import posixpath
from typing import Protocol


class PathHandler(Protocol):
    """Protocol for path handlers."""

    def extname(self, filepath: str) -> str:
        """Return the extension of filepath, including the leading dot."""
        ...

    def resolve(self, absolute_filepath: str, dependency_path: str) -> str:
        """Resolve dependency_path relative to the module at absolute_filepath."""
        ...


class DefaultPathHandler:
    """POSIX path handler.

    Examples:
        >>> handler = DefaultPathHandler()
        >>> handler.extname("/components/App.vue")
        '.vue'
        >>> handler.resolve("/a/b/c.vue", "./d.vue")
        '/a/b/d.vue'
        >>> handler.resolve("/a/b/c.vue", "../d.vue")
        '/a/d.vue'
        >>> handler.resolve("/a/b/c.vue", "vue")
        'vue'
    """

    def extname(self, filepath: str) -> str:
        # splitext already ignores leading dots, so ".eslintrc" has no extension
        return posixpath.splitext(filepath)[1]

    def resolve(self, absolute_filepath: str, dependency_path: str) -> str:
        """Resolve a dependency reference.

        Bare and absolute references (anything not starting with ".") are
        returned unchanged. Relative references are joined against the
        directory of absolute_filepath and normalized.
        """
        if not dependency_path.startswith("."):
            return dependency_path
        base_dir = posixpath.dirname(absolute_filepath)
        return posixpath.normpath(posixpath.join(base_dir, dependency_path))

    def __repr__(self) -> str:
        return "DefaultPathHandler(posix)"


default_path_handler = DefaultPathHandler()

__all__ = ["PathHandler", "DefaultPathHandler", "default_path_handler"]
