"""
CLI commands for managed blocks in a single file.

Thin wrappers over ``shellsetup.core.services.blocks``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from shellsetup.core.models.merge import MergeAction, MergeResult

_ACTION_STYLE = {
    MergeAction.CREATED: ("✨", "green"),
    MergeAction.UPDATED: ("✅", "green"),
    MergeAction.MIGRATED: ("🔁", "cyan"),
    MergeAction.UNCHANGED: ("✓", "white"),
    MergeAction.SKIPPED: ("⊘", "yellow"),
}

_target_arg = click.argument("target", type=click.Path(dir_okay=False, path_type=Path))
_tool_opt = click.option("--tool", default="shell-setup", show_default=True, help="Marker tool name.")
_subsection_opt = click.option("--subsection", default=None, help="Marker subsection, e.g. 'cargo'.")
_suffix_opt = click.option(
    "--backup-suffix",
    type=click.Choice(["bak", "backup"]),
    default="bak",
    show_default=True,
    help="Backup file naming: <target>.<suffix>-<timestamp>.",
)
_json_opt = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")


def echo_result(result: MergeResult) -> None:
    """Print one file outcome with its warnings."""
    icon, color = _ACTION_STYLE[result.action]
    click.secho(f"{icon} {result.action.value}: {result.target}", fg=color)
    if result.format:
        click.echo(f"   format: {result.format.value}")
    if result.backup_path:
        click.echo(f"   💾 backup: {result.backup_path}")
    for warning in result.warnings:
        click.secho(f"   ⚠️  {warning}", fg="yellow")


def _finish(result_fn, as_json: bool) -> None:
    from shellsetup.core.services.blocks import MergeError

    try:
        result = result_fn()
    except MergeError as e:
        if as_json:
            click.echo(json.dumps({"error": e.message, "error_kind": e.kind, "target": str(e.target)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        echo_result(result)


@click.group()
def block() -> None:
    """Managed blocks — ensure, section, line, status."""


@block.command()
@_target_arg
@click.option(
    "--source", "-s",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Source-of-truth file for the block content.",
)
@_tool_opt
@_subsection_opt
@_suffix_opt
@_json_opt
def ensure(
    target: Path,
    source: Path,
    tool: str,
    subsection: str | None,
    backup_suffix: str,
    as_json: bool,
) -> None:
    """Create, update or migrate the managed block in TARGET."""
    from shellsetup.core.services.blocks import Markers, ensure_managed_block

    markers = Markers.for_tool(tool, subsection)
    _finish(
        lambda: ensure_managed_block(target, source, markers.begin, markers.end, backup_suffix),
        as_json,
    )


@block.command()
@_target_arg
@click.option("--source", "-s", type=click.Path(dir_okay=False, path_type=Path), help="File with the section body.")
@click.option("--body", default=None, help="Section body text.")
@_tool_opt
@_subsection_opt
@_suffix_opt
@_json_opt
def section(
    target: Path,
    source: Path | None,
    body: str | None,
    tool: str,
    subsection: str | None,
    backup_suffix: str,
    as_json: bool,
) -> None:
    """Replace the marked section of TARGET, moving it to end-of-file."""
    from shellsetup.core.services.blocks import Markers, read_source, replace_section

    if (source is None) == (body is None):
        raise click.UsageError("Give exactly one of --source or --body.")

    if source is not None:
        body = read_source(source)
        if body is None:
            click.secho(f"⚠️  Source {source} is missing or empty; {target} left untouched", fg="yellow")
            return

    markers = Markers.for_tool(tool, subsection)
    _finish(
        lambda: replace_section(target, markers.begin, markers.end, body or "", backup_suffix),
        as_json,
    )


@block.command()
@_target_arg
@click.argument("line")
@click.option("--comment", default=None, help="Comment line written above LINE.")
@_suffix_opt
@_json_opt
def line(target: Path, line: str, comment: str | None, backup_suffix: str, as_json: bool) -> None:
    """Append LINE to TARGET unless it is already present."""
    from shellsetup.core.services.blocks import ensure_line

    _finish(lambda: ensure_line(target, line, comment=comment, backup_suffix=backup_suffix), as_json)


@block.command()
@_target_arg
@_tool_opt
@_subsection_opt
@_json_opt
def status(target: Path, tool: str, subsection: str | None, as_json: bool) -> None:
    """Show the marker layout of TARGET and its backups."""
    from shellsetup.core.persistence.backup import list_backups
    from shellsetup.core.services.blocks import Markers, inspect_file

    markers = Markers.for_tool(tool, subsection)
    fmt, scan = inspect_file(target, markers)
    backups = list_backups(target)

    if as_json:
        click.echo(json.dumps({
            "target": str(target),
            "exists": fmt is not None,
            "format": fmt.value if fmt else None,
            "begin_markers": len(scan.begins),
            "end_markers": len(scan.ends),
            "legacy_markers": len(scan.legacy),
            "backups": [str(p) for p in backups],
        }, indent=2))
        return

    if fmt is None:
        click.secho(f"⊘ {target} does not exist", fg="yellow")
        return

    color = {"corrupt": "red", "legacy-single-marker": "yellow"}.get(fmt.value, "green")
    click.secho(f"📄 {target}", fg="cyan", bold=True)
    click.echo(f"   Markers: {markers.begin!r} / {markers.end!r}")
    click.echo("   Format:  ", nl=False)
    click.secho(fmt.value, fg=color)
    click.echo(f"   Found:   {scan.summary()}")
    if backups:
        click.echo(f"   Backups: {len(backups)} (latest {backups[-1].name})")
