"""get_file implementations.

FileSystemSource serves module paths from a local directory. Module paths are
URL-like ("/components/App.vue"); they are mapped under the source root and
never allowed to escape it.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSystemSource:
    """Local directory source usable as Options.get_file."""

    def __init__(self, root: str | Path, encoding: str = "utf-8"):
        """Initialize with root directory.

        Args:
            root: Directory that module paths are relative to
            encoding: Text encoding of source files
        """
        if isinstance(root, str) and root.startswith("file://"):
            root = root[7:]
        self.root = Path(root).resolve()
        self.encoding = encoding

    def to_filesystem_path(self, module_path: str) -> Path:
        """Map a module path to a file under the root.

        Raises:
            FileNotFoundError: The path escapes the root
        """
        candidate = (self.root / module_path.lstrip("/")).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise FileNotFoundError(f"Module path outside source root: {module_path}")
        return candidate

    async def get_file(self, module_path: str) -> str:
        """Read a module's source text.

        Raises:
            FileNotFoundError: No such file under the root
        """
        file_path = self.to_filesystem_path(module_path)
        logger.debug(f"[source:fetch] {module_path} -> {file_path}")
        return await asyncio.to_thread(file_path.read_text, encoding=self.encoding)

    async def __call__(self, module_path: str) -> str:
        return await self.get_file(module_path)

    def __repr__(self) -> str:
        return f"FileSystemSource({self.root})"


__all__ = ["FileSystemSource"]
