"""
CLI commands for the verified-archive cache.

Thin wrappers over ``pqrs_bin.core.services.install.cache``.
"""

from __future__ import annotations

import json

import click


@click.group()
def cache() -> None:
    """Archive cache — path, list, clear."""


@cache.command("path")
def cache_path() -> None:
    """Print the cache directory."""
    from pqrs_bin.core.config.loader import default_cache_dir

    click.echo(str(default_cache_dir()))


@cache.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def cache_list(as_json: bool) -> None:
    """List cached archives."""
    from pqrs_bin.core.config.loader import default_cache_dir
    from pqrs_bin.core.services.install import ArchiveCache, fmt_size

    archives = [
        f for entry in ArchiveCache(default_cache_dir()).entries()
        for f in sorted(entry.iterdir()) if f.is_file() and not f.name.startswith(".")
    ]

    if as_json:
        click.echo(json.dumps(
            [{"sha256": f.parent.name, "archive": f.name, "size_bytes": f.stat().st_size}
             for f in archives],
            indent=2,
        ))
        return

    if not archives:
        click.echo("No cached archives")
        return

    for f in archives:
        click.echo(f"   {f.parent.name[:12]}  {f.name:<30} {fmt_size(f.stat().st_size)}")


@cache.command("clear")
def cache_clear() -> None:
    """Remove all cached archives."""
    from pqrs_bin.core.use_cases.install import clear_cache

    removed = clear_cache()
    click.secho(f"🗑️  Removed {removed} cached archive(s)", fg="green")
