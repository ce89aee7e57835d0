"""CLI adapter for ``lib_layered_reality`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators create, edit and rotate the config and secrets files of a
namespace, and inspect where they are looked up, without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_paths` / :func:`cli_status` – read-only namespace reports.
* :func:`cli_configs` – ``create`` / ``edit`` for ``config.yml`` (alias
  ``config``).
* :func:`cli_secrets` – ``create`` / ``edit`` / ``rotate`` for ``secrets.yml``
  (alias ``secret``).
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It delegates every file operation to
:mod:`lib_layered_reality.tasks`, owns all terminal output and turns the
expected user mistakes (missing file, file already present) into an ``Abort``
message with exit status 1. ``lib_cli_exit_tools`` renders every other error.
"""

from __future__ import annotations

import sys
from importlib import metadata
from typing import Final, NoReturn, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .domain.errors import NotFound
from .tasks import ConfigFileTask, SecretsFileTask, StatusTask

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
PROG_NAME: Final[str] = "lib_layered_reality"
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

SECRETS_INSTRUCTIONS: Final[str] = (
    "Generated key. Save this key to a secure password manager, "
    "you will need it to edit the secrets.yml file:"
)


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` when not installed."""

    try:
        return metadata.version(PROG_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Layered configuration and encrypted secrets manager",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=PROG_NAME,
    message=f"{PROG_NAME} version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

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
        meta = metadata.metadata(PROG_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{PROG_NAME} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', PROG_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("paths", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_paths(namespace: str) -> None:
    """Show the directories searched for NAMESPACE, primary location first."""

    for path in StatusTask(namespace).show_paths():
        click.echo(str(path), err=True)


@cli.command("status", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_status(namespace: str) -> None:
    """Report where the config, secrets and key files of NAMESPACE are and whether they are private."""

    for line in StatusTask(namespace).status():
        click.echo(line.render())


@cli.group("configs", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_configs() -> None:
    """Manage the plain-text config.yml file."""


@cli_configs.command("create", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_configs_create(namespace: str) -> None:
    """Create an empty config.yml in the primary location of NAMESPACE."""

    try:
        path = ConfigFileTask(namespace).create()
    except FileExistsError as exc:
        _abort(str(exc), f"Maybe you meant to edit the file with: {PROG_NAME} configs edit {namespace}")
    click.echo(f"Created file: {path}", err=True)


@cli_configs.command("edit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_configs_edit(namespace: str) -> None:
    """Edit config.yml of NAMESPACE; piped input replaces the file, otherwise $EDITOR opens."""

    task = ConfigFileTask(namespace)
    try:
        path = task.edit(_piped_input())
    except NotFound as exc:
        _abort(
            f"{exc}. Searched in: {task.locator.describe_search_paths()}",
            f"Maybe you used the wrong namespace or need to create the file with: {PROG_NAME} configs create {namespace}",
        )
    click.echo(f"File saved to: {path}", err=True)


@cli.group("secrets", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_secrets() -> None:
    """Manage the encrypted secrets.yml file."""


@cli_secrets.command("create", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_secrets_create(namespace: str) -> None:
    """Create an encrypted secrets.yml for NAMESPACE and print its new key."""

    try:
        path, key = SecretsFileTask(namespace).create()
    except FileExistsError as exc:
        _abort(str(exc), f"Maybe you meant to edit the file with: {PROG_NAME} secrets edit {namespace}")
    click.echo(f"Created file: {path}", err=True)
    click.echo(SECRETS_INSTRUCTIONS, err=True)
    click.echo(key)


@cli_secrets.command("edit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_secrets_edit(namespace: str) -> None:
    """Edit the decrypted secrets of NAMESPACE; piped input replaces them, otherwise $EDITOR opens."""

    task = SecretsFileTask(namespace)
    try:
        path = task.edit(_piped_input())
    except NotFound as exc:
        _abort_missing_secrets(task, namespace, exc)
    click.echo(f"File saved to: {path}", err=True)


@cli_secrets.command("rotate", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
def cli_secrets_rotate(namespace: str) -> None:
    """Re-encrypt secrets.yml of NAMESPACE under a new key and print the key."""

    task = SecretsFileTask(namespace)
    try:
        path, key = task.rotate()
    except NotFound as exc:
        _abort_missing_secrets(task, namespace, exc)
    click.echo(f"Saved file: {path}", err=True)
    click.echo(SECRETS_INSTRUCTIONS, err=True)
    click.echo(key)


cli.add_command(cli_configs, name="config")
cli.add_command(cli_secrets, name="secret")


def _piped_input() -> Optional[str]:
    """Return text piped into stdin, or ``None`` when stdin is a terminal or empty."""

    stream = click.get_text_stream("stdin")
    if stream.isatty():
        return None
    content = stream.read()
    return content or None


def _abort(message: str, hint: str) -> NoReturn:
    """Print ``Abort: <message>`` and *hint* on stderr and exit with status 1."""

    click.echo(f"Abort: {message}", err=True)
    click.echo(hint, err=True)
    raise SystemExit(1)


def _abort_missing_secrets(task: SecretsFileTask, namespace: str, exc: NotFound) -> NoReturn:
    _abort(
        f"{exc}. Searched in: {task.locator.describe_search_paths()}",
        f"Maybe you used the wrong namespace or need to create the file with: {PROG_NAME} secrets create {namespace}",
    )


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=PROG_NAME,
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
