"""CLI commands for cache maintenance.

Usage:
    catalog cache stats
    catalog cache stats --format json
    catalog cache clear --yes
"""

from __future__ import annotations

import asyncio

import orjson
import typer
from rich.console import Console
from rich.table import Table

from catalog.cache.admin import CacheStats
from catalog.cache.runtime import build_cache_runtime
from catalog.config import CacheConfig, settings
from catalog.observability import LogContext, configure_logging

app = typer.Typer(help="Inspect and clear the product cache", no_args_is_help=True)


async def _stats(config: CacheConfig) -> tuple[bool, CacheStats]:
    runtime = build_cache_runtime(config)
    try:
        reachable = await runtime.store.health_check()
        return reachable, await runtime.admin.stats()
    finally:
        await runtime.close()


async def _clear(config: CacheConfig) -> bool:
    runtime = build_cache_runtime(config)
    try:
        return await runtime.admin.clear_all()
    finally:
        await runtime.close()


@app.command("stats")
def stats(
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text, json"),
) -> None:
    """Show how many keys each cache category holds."""
    configure_logging(json_format=False, level=settings.log_level)
    config = CacheConfig.from_settings(settings)
    with LogContext(request_id="cli-cache-stats"):
        reachable, result = asyncio.run(_stats(config))

    if output_format == "json":
        typer.echo(orjson.dumps({"reachable": reachable, **result.to_dict()}).decode())
    else:
        console = Console()
        if not reachable:
            console.print(f"[yellow]Cache backend '{config.backend}' is unreachable[/yellow]")
        table = Table(title=f"Cache keys ({config.prefix})")
        table.add_column("Category")
        table.add_column("Keys", justify="right")
        for name, value in result.to_dict().items():
            table.add_row(name, str(value))
        console.print(table)

    if not reachable:
        raise typer.Exit(code=1)


@app.command("clear")
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete every cached entry and flush the cache database."""
    config = CacheConfig.from_settings(settings)
    if not yes:
        typer.confirm(f"Clear every key in cache backend '{config.backend}'?", abort=True)

    configure_logging(json_format=False, level=settings.log_level)
    with LogContext(request_id="cli-cache-clear"):
        cleared = asyncio.run(_clear(config))

    if cleared:
        typer.echo("Cache cleared")
    else:
        typer.echo("Cache clear incomplete", err=True)
        raise typer.Exit(code=1)
