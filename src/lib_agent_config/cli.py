"""CLI adapter for ``lib_agent_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators see how an agent command line resolves, layer by layer, without
starting the agent.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_flags` – prints the agent flag surface.
* :func:`cli_resolve` – runs the full pipeline for the agent arguments given
  after ``--`` and prints the runtime configuration (or the merged fragment)
  as JSON.
* :func:`main` – entry point used by ``console_scripts`` registration.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.merge import merge
from .core import load_config, load_fragments, usage
from .domain.errors import HelpRequested
from .domain.fragment import FieldKind, document_key, field_kind, group_fields
from .domain.literals import format_duration

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_PASSTHROUGH_SETTINGS = {
    **CLICK_CONTEXT_SETTINGS,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_agent_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Layered agent configuration resolver",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_agent_config",
    message="lib_agent_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_agent_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_agent_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_agent_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("flags", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_flags() -> None:
    """Print every agent flag with its value placeholder and help text."""

    click.echo(usage())


@cli.command("resolve", context_settings=_PASSTHROUGH_SETTINGS)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
@click.option(
    "--fragments/--no-fragments",
    default=False,
    help="Print the merged fragment (present values only) instead of the runtime configuration",
)
@click.option(
    "--cwd",
    type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True),
    default=None,
    help="Directory that relative -config-file/-config-dir paths resolve against",
)
@click.argument("agent_args", nargs=-1, type=click.UNPROCESSED)
def cli_resolve(indent: Optional[int], fragments: bool, cwd: Optional[Path], agent_args: Sequence[str]) -> None:
    """Resolve the agent arguments given after ``--`` and print JSON.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["resolve", "--", "-datacenter", "east"])
    >>> json.loads(result.output)["datacenter"]
    'east'
    """

    cwd_str = str(cwd) if cwd is not None else None
    try:
        if fragments:
            merged = merge(load_fragments(agent_args, cwd=cwd_str))
            click.echo(json.dumps(_present_values(merged), indent=indent, separators=(",", ":")))
            return
        config = load_config(agent_args, cwd=cwd_str)
    except HelpRequested as exc:
        click.echo(exc.usage)
        return
    click.echo(config.to_json(indent=indent))


def _present_values(group: Any) -> dict[str, Any]:
    """Render the fields a layer contributed, keyed by document key."""

    rendered: dict[str, Any] = {}
    for spec in group_fields(group):
        value = getattr(group, spec.name)
        key = document_key(spec)
        kind = field_kind(spec)
        if kind is FieldKind.GROUP:
            nested = _present_values(value)
            if nested:
                rendered[key] = nested
        elif kind is FieldKind.LIST:
            if value:
                rendered[key] = list(value)
        elif kind is FieldKind.MAP:
            if value:
                rendered[key] = dict(value)
        elif value.present:
            rendered[key] = format_duration(value.value) if kind is FieldKind.DURATION else value.value
    return rendered


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_agent_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
