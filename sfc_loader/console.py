"""Shared Rich consoles for CLI output."""

from rich.console import Console

console = Console()

# Diagnostics and logs go to stderr so `load --json` output stays parseable
err_console = Console(stderr=True)

__all__ = ["console", "err_console"]
