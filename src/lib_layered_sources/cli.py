"""CLI adapter for ``lib_layered_sources`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators load sources in a chosen order and inspect the resulting layered
configuration without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_extensions` – lists the extension table of a fresh registry.
* :func:`cli_read` – loads sources and prints JSON (whole config, a single key,
  or config plus provenance).
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It only talks to
:class:`lib_layered_sources.core.DefaultLoaders` and the :class:`Config` value it
returns.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import DefaultLoaders
from .domain.config import Config
from .domain.tree import MISSING, thaw_tree

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_layered_sources")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Layered configuration loader",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_layered_sources",
    message="lib_layered_sources version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_layered_sources")
    except metadata.PackageNotFoundError:
        click.echo("lib_layered_sources (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_layered_sources')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("extensions", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_extensions() -> None:
    """List the built-in extension table as ``extension  format`` lines.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["extensions"])
    >>> result.output.splitlines()[0]
    'conf        hocon'
    """

    registry = DefaultLoaders().registry
    for extension in registry.extensions():
        click.echo(f"{extension:<11} {registry.resolve(extension).format.value}")


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("sources", nargs=-1)
@click.option("--env/--no-env", "with_env", default=False, help="Load environment variables as the first layer")
@click.option("--prefix", default=None, help="Only read environment variables starting with PREFIX_")
@click.option("--system/--no-system", "with_system", default=False, help="Load system properties after the environment")
@click.option("--format", "format_", default=None, help="Parse every source with this extension's provider")
@click.option("--key", default=None, help="Print only the value of this dotted key")
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include provenance metadata for each key in the output",
)
def cli_read(
    sources: Sequence[str],
    with_env: bool,
    prefix: Optional[str],
    with_system: bool,
    format_: Optional[str],
    key: Optional[str],
    indent: Optional[int],
    provenance: bool,
) -> None:
    """Load SOURCES (files or URLs) in order and print the result as JSON.

    Later sources override earlier ones. Arguments containing ``://`` are
    fetched as URLs, everything else is read as a file.
    """

    config = _load_sources(sources, with_env=with_env, prefix=prefix, with_system=with_system, format_=format_)
    if key is not None:
        value = config.get(key, MISSING)
        if value is MISSING:
            raise click.ClickException(f"Key not found: {key}")
        click.echo(json.dumps(thaw_tree(value), indent=indent, separators=(",", ":"), ensure_ascii=False, default=str))
        return
    if provenance:
        payload = {"config": config.as_dict(), "provenance": config.provenance()}
        click.echo(json.dumps(payload, indent=indent, separators=(",", ":"), ensure_ascii=False, default=str))
        return
    click.echo(config.to_json(indent=indent))


def _load_sources(
    sources: Sequence[str],
    *,
    with_env: bool,
    prefix: Optional[str],
    with_system: bool,
    format_: Optional[str],
) -> Config:
    """Apply the requested loads in command-line order."""

    loaders = DefaultLoaders()
    config = loaders.config
    if with_env:
        config = loaders.on(config).env(prefix)
    if with_system:
        config = loaders.on(config).system_properties()
    for source in sources:
        step = loaders.on(config)
        config = step.url(source, format_) if "://" in source else step.file(source, format_)
    return config


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_layered_sources",
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
