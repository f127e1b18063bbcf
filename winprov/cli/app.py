"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from winprov import __version__
from winprov.agent.installer import install_config
from winprov.api.secret_store import ParameterStore
from winprov.cloud.metadata import MetadataClient
from winprov.core.fetch import fetch_artifact
from winprov.database.catalog import db_exists
from winprov.exceptions import WinprovError
from winprov.models.config import ResolutionMode, ToolSettings
from winprov.storage.config_manager import ConfigManager

from .formatters import format_error_with_suggestions, print_config, print_fetch_summary

T = TypeVar("T")

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("winprov")

app = typer.Typer(
    name="winprov",
    help=(
        "Deployment helpers for Windows server provisioning. Use 'winprov"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "winprov"


def get_config_file() -> Path:
    if override := os.getenv("WINPROV_CONFIG"):
        return Path(override).expanduser()
    return get_config_dir() / "config.ini"


def _load_settings(cli_options: dict[str, Any] | None = None) -> ToolSettings:
    return ConfigManager(get_config_file()).load_config(cli_options)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Runs a coroutine, rendering application errors and exiting non-zero."""
    try:
        return asyncio.run(coro)
    except WinprovError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current settings and exit."
    ),
):
    """Windows provisioning helpers"""
    if version:
        console.print(f"[bold]winprov[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        log_level = "INFO"
    logging.getLogger("winprov").setLevel(log_level)

    if show_config:
        config_file = get_config_file()
        try:
            settings = _load_settings()
        except WinprovError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
        print_config(config_file, settings.model_dump())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing settings file."
    ),
):
    """Write a settings file with default values."""
    config_file = get_config_file()
    if (
        config_file.exists()
        and not force
        and not typer.confirm("Settings file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(config_file).save_new_config()
    except WinprovError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Settings saved to '{config_file}'[/bold green]")


@app.command(name="fetch")
def fetch_command(
    artifact_path: str = typer.Argument(
        ..., help="Path of the artifact within the repository, starting with '/'."
    ),
    output_path: Path = typer.Argument(  # noqa: B008
        ..., help="Local file to write. Existing content is overwritten."
    ),
    secret_store: bool = typer.Option(
        False,
        "--secret-store",
        help="Read the API key and host from the managed secret store.",
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", help="Artifactory API key (direct mode)."
    ),
    host: str | None = typer.Option(
        None, "--host", help="Artifactory base URL (direct mode)."
    ),
    attempts: int | None = typer.Option(
        None, "--attempts", help="Total attempts for transient failures (default 1)."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Total request timeout in seconds."
    ),
    verify_checksum: bool | None = typer.Option(
        None,
        "--verify/--no-verify",
        help="Check the body against the X-Checksum-Sha256 header.",
    ),
):
    """Download an artifact from Artifactory."""
    cli_options = {
        key: value
        for key, value in {
            "max_attempts": attempts,
            "timeout": timeout,
            "verify_checksum": verify_checksum,
        }.items()
        if value is not None
    }
    mode = ResolutionMode.SECRET_STORE if secret_store else ResolutionMode.DIRECT

    async def _fetch_async():
        settings = _load_settings(cli_options)
        store = ParameterStore(settings.aws_region) if secret_store else None

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=30),
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(output_path.name, total=None)

            def on_progress(done: int, total: int | None) -> None:
                progress.update(task_id, completed=done, total=total)

            return await fetch_artifact(
                artifact_path,
                output_path,
                mode,
                api_key,
                host,
                secret_store=store,
                settings=settings,
                on_progress=on_progress,
            )

    result = _run(_fetch_async())
    print_fetch_summary(result)


@app.command(name="install-config")
def install_config_command(
    source: Path = typer.Argument(  # noqa: B008
        ..., help="Monitoring agent configuration file to install."
    ),
):
    """Install the monitoring agent configuration and restart the agent."""

    async def _install_async():
        settings = _load_settings()
        return await install_config(source, settings=settings)

    destination = _run(_install_async())
    console.print(f"[green]✓ Installed agent configuration at '{destination}'.[/green]")


@app.command()
def region():
    """Print the region of the current instance."""

    async def _region_async():
        settings = _load_settings()
        async with MetadataClient(settings.metadata_url) as client:
            return await client.get_region()

    console.print(_run(_region_async()), highlight=False)


@app.command(name="stack-name")
def stack_name():
    """Print the CloudFormation stack name of the current instance."""

    async def _stack_name_async():
        settings = _load_settings()
        async with MetadataClient(settings.metadata_url) as client:
            return await client.get_stack_name()

    console.print(_run(_stack_name_async()), highlight=False)


@app.command(name="db-exists")
def db_exists_command(
    server: str = typer.Argument(..., help="Database server address."),
    name: str = typer.Argument(..., help="Database name to look for."),
):
    """Print True if the database exists on the server, otherwise False."""
    exists = _run(db_exists(server, name))
    console.print(str(exists), highlight=False)
