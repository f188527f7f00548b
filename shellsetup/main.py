"""
shell-setup — CLI entrypoint.

Usage:
    python -m shellsetup.main --help
    shellsetup apply
    shellsetup apply --no-install --home /tmp/fakehome
    shellsetup config check
    shellsetup block ensure ~/.config/kitty/kitty.conf --source configs/kitty.conf
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from shellsetup import __version__
from shellsetup.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="shellsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to shellsetup.yml (default: search upward from cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """shell-setup — install developer tools and manage dotfiles."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("SHELLSETUP_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("SHELLSETUP_LOG_FILE"),
        log_file_level=os.environ.get("SHELLSETUP_LOG_FILE_LEVEL"),
    )


def _resolve_config(ctx: click.Context) -> Path | None:
    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        from shellsetup.core.config.loader import find_manifest_file

        config_path = find_manifest_file(Path.cwd())
    return config_path


@cli.command()
@click.option("--no-install", is_flag=True, help="Skip taps and package installs.")
@click.option("--dry-run", is_flag=True, help="Report steps without running them.")
@click.option("--mock", is_flag=True, help="Use the mock adapter (no brew calls).")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory '~' targets resolve against (default: your home).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def apply(
    ctx: click.Context,
    no_install: bool,
    dry_run: bool,
    mock: bool,
    home: Path | None,
    as_json: bool,
) -> None:
    """Install packages and sync every managed file in the manifest.

    Examples:

        shellsetup apply

        shellsetup apply --no-install

        shellsetup apply --dry-run --json
    """
    from shellsetup.adapters import AdapterRegistry, HomebrewAdapter, ToolCommandAdapter
    from shellsetup.core.config.loader import ConfigError, load_manifest
    from shellsetup.core.use_cases.apply import apply_manifest

    config_path = _resolve_config(ctx)
    if config_path is None:
        click.secho("❌ No shellsetup.yml found. Use --config to point at one.", fg="red")
        sys.exit(1)

    try:
        manifest = load_manifest(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    registry = AdapterRegistry(mock_mode=mock)
    registry.register(HomebrewAdapter())
    registry.register(ToolCommandAdapter())

    report = apply_manifest(
        manifest,
        base_dir=config_path.parent.resolve(),
        home=home or Path.home(),
        registry=registry,
        install=not no_install,
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        if report.failed:
            sys.exit(1)
        return

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    if not ctx.obj.get("quiet"):
        click.secho(f"\n⚡ {mode_label}{manifest.tool}", fg="cyan", bold=True)
        click.echo(f"   Steps: {report.total}")
        click.echo()

    for step in report.steps:
        if step.ok:
            click.secho(f"   ✓ {step.kind:<8}", fg="green", nl=False)
            action = f" ({step.action})" if step.action else ""
            click.echo(f" {step.target}{action}")
            if ctx.obj.get("verbose") and step.backup_path:
                click.echo(f"     💾 {step.backup_path}")
        elif step.failed:
            click.secho(f"   ✗ {step.kind:<8}", fg="red", nl=False)
            click.echo(f" {step.target}")
            for line in (step.error or "").split("\n")[:5]:
                click.echo(f"     │ {line}")
        else:
            click.secho(f"   ⊘ {step.kind:<8}", fg="yellow", nl=False)
            click.echo(f" {step.target}")
        for warning in step.warnings:
            click.secho(f"     ⚠️  {warning}", fg="yellow")

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(report.status, "white")
    click.secho(
        f"   Result: {report.succeeded}/{report.total} succeeded",
        fg=status_color,
        bold=True,
    )
    click.echo()

    if report.failed:
        sys.exit(1)


@cli.group()
def config() -> None:
    """Manifest configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate shellsetup.yml."""
    from shellsetup.core.use_cases.config_check import check_manifest

    result = check_manifest(_resolve_config(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.manifest is not None  # guaranteed when valid
        click.secho("✅ Manifest is valid", fg="green", bold=True)
        click.echo(f"   Tool: {result.manifest.tool}")
        click.echo(f"   Packages: {len(result.manifest.packages)}")
        click.echo(f"   Managed targets: {len(result.manifest.managed_targets)}")
    else:
        click.secho("❌ Manifest errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()
    if not result.valid:
        sys.exit(1)


# ── Register sub-command groups from shellsetup/ui/cli/ ─────────────

from shellsetup.ui.cli.block import block  # noqa: E402

cli.add_command(block)


if __name__ == "__main__":
    cli()
