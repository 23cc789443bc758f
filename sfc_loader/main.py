"""sfc-loader CLI - load modules from a directory through the resolution engine."""

import asyncio
import json
import logging
import sys
from typing import Any

import click
from pydantic import ValidationError
from rich.pretty import Pretty
from rich.table import Table

from .commands.cache import cache as cache_group
from .console import console
from .console import err_console
from .context import init_context
from .loader import load_module
from .logging_setup import init_logging
from .settings import LoaderSettings
from .settings import SettingsManager
from .sources import FileSystemSource
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


def parse_module_option(value: str) -> tuple[str, Any]:
    """Parse a NAME=JSON pre-resolved module option.

    Raises:
        click.BadParameter: Missing '=' or invalid JSON
    """
    name, sep, raw = value.partition("=")
    if not sep or not name:
        raise click.BadParameter(f"expected NAME=JSON, got '{value}'", param_hint="--module")
    try:
        return name, json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON for '{name}': {e}", param_hint="--module") from e


@click.group(invoke_without_command=True)
@click.version_option(package_name="sfc-loader")
@click.option("--log-level", default=None, help="Log level (default: settings or SFC_LOADER_LOG_LEVEL)")
@click.option("--log-file", default=None, help="Also write JSONL logs to this file")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_file: str | None):
    """Resolve and load modules through sfc-loader."""
    try:
        settings = SettingsManager().load()
    except ValidationError as e:
        err_console.print(f"[red]Invalid settings:[/red] {escape_markup(e)}")
        sys.exit(1)

    init_logging(log_level or settings.logging.level, log_file or settings.logging.path)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("entry")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Directory module paths are resolved in",
)
@click.option("--module", "-m", "modules", multiple=True, help="Pre-resolved module as NAME=JSON (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Print the loaded module as JSON")
@click.option("--no-cache", is_flag=True, help="Do not use the compiled-code cache")
@click.pass_obj
def load(settings: LoaderSettings | None, entry: str, root: str, modules: tuple[str, ...], as_json: bool, no_cache: bool):
    """Load ENTRY (a path under --root) and print the resulting module."""
    settings = settings or LoaderSettings()
    preloaded = dict(parse_module_option(m) for m in modules)
    styles: list[str] = []

    options = settings.to_options(
        get_file=FileSystemSource(root).get_file,
        modules=preloaded,
        add_style=lambda style, scope_id: styles.append(style),
    )
    if no_cache:
        options.cache = None
    context = init_context(options)

    try:
        module = asyncio.run(load_module(entry, context))
    except Exception as e:
        logger.debug(f"Loading {entry} failed", exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(module, indent=2, default=str))
        return

    console.print(Pretty(module))

    table = Table(title="Module Cache")
    table.add_column("Path", style="cyan")
    table.add_column("Type", style="dim")
    for path, value in sorted(context.modules.resolved_modules().items()):
        table.add_row(path, type(value).__name__)
    console.print(table)

    if styles:
        console.print(f"[dim]{len(styles)} stylesheet(s) injected[/dim]")


cli.add_command(cache_group)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
