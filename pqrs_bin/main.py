"""
pqrs-bin — CLI entrypoint.

Usage:
    pqrs-bin --help
    pqrs-bin info
    pqrs-bin install ~/.local
    pqrs-bin verify --archive ./pqrs-mac.tar.gz
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from pqrs_bin import __version__
from pqrs_bin.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="pqrs-bin")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--formula",
    "-f",
    "formula_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to formula.yml (default: auto-detect, else built-in).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    formula_path: str | None,
) -> None:
    """pqrs-bin — install the prebuilt pqrs Parquet CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["formula_path"] = Path(formula_path) if formula_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def _load_descriptor(ctx: click.Context, as_json: bool = False):
    """Resolve the formula for this invocation or exit 1."""
    from pqrs_bin.core.config.loader import ConfigError, resolve_descriptor

    try:
        return resolve_descriptor(ctx.obj.get("formula_path"))
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"ok": False, "error": str(e), "error_kind": "config"}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _report_failure(result) -> None:
    label = {
        "integrity": "Integrity check failed",
        "transport": "Download failed",
        "archive": "Bad archive",
        "filesystem": "Install failed",
        "config": "Invalid formula",
    }.get(result.error_kind, "Failed")
    click.secho(f"❌ {label}", fg="red", bold=True)
    for line in (result.error or "").split("\n"):
        click.echo(f"   {line}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info(ctx: click.Context, as_json: bool) -> None:
    """Show the formula."""
    descriptor = _load_descriptor(ctx, as_json)

    if as_json:
        click.echo(json.dumps(descriptor.to_dict(), indent=2))
        return

    click.secho(f"\n📦 {descriptor.name} {descriptor.version}", fg="cyan", bold=True)
    if descriptor.description:
        click.echo(f"   {descriptor.description}")
    if descriptor.homepage:
        click.echo(f"   🏠 {descriptor.homepage}")
    click.echo(f"   URL:    {descriptor.url}")
    click.echo(f"   SHA256: {descriptor.sha256}")
    if descriptor.binary != descriptor.name:
        click.echo(f"   Binary: {descriptor.binary}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Validate the formula file."""
    from pqrs_bin.core.use_cases.config_check import check_formula

    result = check_formula(formula_path=ctx.obj.get("formula_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid and result.descriptor is not None:
        source = "built-in" if result.builtin else str(result.formula_path)
        click.secho("✅ Formula is valid", fg="green", bold=True)
        click.echo(f"   Formula: {result.descriptor.name} {result.descriptor.version}")
        click.echo(f"   Source:  {source}")
    else:
        click.secho("❌ Formula errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)


@cli.command()
@click.option(
    "--archive",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Verify a local archive instead of downloading.",
)
@click.option("--timeout", default=60, type=int, show_default=True, help="Download timeout (s).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def verify(ctx: click.Context, archive: Path | None, timeout: int, as_json: bool) -> None:
    """Fetch the release archive and check its SHA-256."""
    from pqrs_bin.core.use_cases.install import verify_formula

    descriptor = _load_descriptor(ctx, as_json)
    result = verify_formula(descriptor, archive=archive, timeout=timeout)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        _report_failure(result)
        sys.exit(1)

    from pqrs_bin.core.services.install import fmt_size

    click.secho(f"✅ {descriptor.archive_name} verified", fg="green", bold=True)
    click.echo(f"   SHA256: {result.sha256}")
    click.echo(f"   Size:   {fmt_size(result.size_bytes)}")


@cli.command()
@click.argument(
    "prefix",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option(
    "--archive",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Install from a local archive instead of downloading.",
)
@click.option("--no-cache", is_flag=True, help="Don't read or write the archive cache.")
@click.option("--timeout", default=60, type=int, show_default=True, help="Download timeout (s).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    prefix: Path | None,
    archive: Path | None,
    no_cache: bool,
    timeout: int,
    as_json: bool,
) -> None:
    """Install the executable into PREFIX/bin.

    PREFIX defaults to $PQRS_BIN_PREFIX, else /usr/local.

    Examples:

        pqrs-bin install ~/.local

        pqrs-bin install /opt/pqrs --archive ./pqrs-mac.tar.gz
    """
    from pqrs_bin.core.config.loader import default_prefix
    from pqrs_bin.core.use_cases.install import install_formula

    descriptor = _load_descriptor(ctx, as_json)
    result = install_formula(
        descriptor,
        prefix or default_prefix(),
        archive=archive,
        use_cache=not no_cache,
        timeout=timeout,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        _report_failure(result)
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        cached = " (from cache)" if result.cached else ""
        click.secho(
            f"🍺 {descriptor.name} {descriptor.version} installed{cached}",
            fg="green",
            bold=True,
        )
        click.echo(f"   → {result.path}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def checksum(file: Path) -> None:
    """Print the SHA-256 of FILE."""
    from pqrs_bin.core.services.install import file_sha256

    click.echo(f"{file_sha256(file)}  {file.name}")


@cli.command()
@click.argument("version")
@click.option("--url", default=None, help="Download URL of the new release.")
@click.option(
    "--archive",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Hash a local copy of the new archive instead of downloading.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the new formula (default: ./formula.yml).",
)
@click.option("--dry-run", is_flag=True, help="Print the new formula, don't write it.")
@click.option("--timeout", default=60, type=int, show_default=True, help="Download timeout (s).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def bump(
    ctx: click.Context,
    version: str,
    url: str | None,
    archive: Path | None,
    output: Path | None,
    dry_run: bool,
    timeout: int,
    as_json: bool,
) -> None:
    """Write a new formula for release VERSION."""
    import yaml

    from pqrs_bin.core.config.loader import FORMULA_FILE, dump_descriptor
    from pqrs_bin.core.use_cases.install import bump_formula

    descriptor = _load_descriptor(ctx, as_json)
    result = bump_formula(
        descriptor, version=version, url=url, archive=archive, timeout=timeout,
    )

    if not result.ok or result.descriptor is None:
        if as_json:
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            _report_failure(result)
        sys.exit(1)

    target = output or ctx.obj.get("formula_path") or Path.cwd() / FORMULA_FILE

    if not dry_run:
        dump_descriptor(result.descriptor, target)

    if as_json:
        data = result.to_dict()
        data["written_to"] = None if dry_run else str(target)
        click.echo(json.dumps(data, indent=2))
        return

    if dry_run:
        click.echo(yaml.safe_dump({"formula": result.descriptor.to_dict()}, sort_keys=False))
        return

    click.secho(
        f"✅ {descriptor.name} {descriptor.version} → {result.descriptor.version}",
        fg="green",
        bold=True,
    )
    click.echo(f"   SHA256: {result.descriptor.sha256}")
    click.echo(f"   Written to {target}")


# ── Register sub-command groups from pqrs_bin/ui/cli/ ─────────────

from pqrs_bin.ui.cli.cache import cache  # noqa: E402

cli.add_command(cache)


if __name__ == "__main__":
    cli()
