"""Compiled-cache management commands.

Inspect and clean the on-disk compiled-code cache configured in settings
(default ~/.sfc-loader/cache/).
"""

from __future__ import annotations

import click
from rich.table import Table

from ..compiled_cache import DiskCompiledCache
from ..console import console
from ..settings import LoaderSettings


def _format_size(size_bytes: int) -> str:
    """Format bytes as human-readable size."""
    size_float = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size_float < 1024:
            return f"{size_float:.1f} {unit}"
        size_float /= 1024
    return f"{size_float:.1f} TB"


def _disk_cache(ctx: click.Context) -> DiskCompiledCache:
    settings = ctx.find_object(LoaderSettings) or LoaderSettings()
    return DiskCompiledCache(settings.cache.dir)


@click.group(invoke_without_command=True)
@click.pass_context
def cache(ctx: click.Context):
    """Manage the compiled-code cache."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@cache.command(name="path")
@click.pass_context
def cache_path(ctx: click.Context):
    """Show the cache directory path."""
    cache_dir = _disk_cache(ctx).cache_dir
    console.print(f"[cyan]{cache_dir}[/cyan]")

    if cache_dir.exists():
        console.print("[dim]Status: exists[/dim]")
    else:
        console.print("[dim]Status: not created yet[/dim]")


@cache.command(name="size")
@click.pass_context
def cache_size(ctx: click.Context):
    """Show total cache disk usage."""
    disk_cache = _disk_cache(ctx)

    if not disk_cache.cache_dir.exists():
        console.print("[dim]Cache directory does not exist yet.[/dim]")
        console.print(f"[dim]Path: {disk_cache.cache_dir}[/dim]")
        return

    console.print(f"[bold]Cache Size:[/bold] {_format_size(disk_cache.size())}")
    console.print(f"[dim]Path: {disk_cache.cache_dir}[/dim]")


@cache.command(name="list")
@click.pass_context
def cache_list(ctx: click.Context):
    """List cached entries with sizes."""
    entries = _disk_cache(ctx).entries()

    if not entries:
        console.print("[dim]No cached entries found.[/dim]")
        return

    table = Table(title="Compiled Cache")
    table.add_column("Key", style="cyan")
    table.add_column("Size", justify="right")

    for key, size in sorted(entries.items()):
        table.add_row(key, _format_size(size))

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {len(entries)} entries, {_format_size(sum(entries.values()))}")


@cache.command(name="clear")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def cache_clear(ctx: click.Context, force: bool):
    """Remove every cached entry."""
    disk_cache = _disk_cache(ctx)

    if not disk_cache.cache_dir.exists():
        console.print("[dim]Cache directory does not exist - nothing to clean.[/dim]")
        return

    total_size = disk_cache.size()
    if not force and not click.confirm(f"Remove {disk_cache.cache_dir} ({_format_size(total_size)})?"):
        console.print("[yellow]Aborted.[/yellow]")
        return

    removed = disk_cache.clear()
    console.print(f"[green]Cleared {removed} entries ({_format_size(total_size)})[/green]")
