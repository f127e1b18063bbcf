"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from winprov.exceptions import RejectionKind, RemoteRejectedError
from winprov.models.result import FetchResult
from winprov.utils.formatting import format_duration, format_size

SUGGESTIONS_MAP = {
    "MissingConfigurationError": [
        "• Set ARTIFACTORY_API_KEY and ARTIFACTORY_HOST, or",
        "• pass --api-key and --host, or",
        "• use --secret-store to read them from Parameter Store.",
    ],
    "InsecureEndpointError": [
        "• The host must start with https:// so the API key is not sent in cleartext.",
    ],
    "TransportError": [
        "• Check DNS resolution and network access to the repository host.",
        "• The host must accept TLS 1.2 connections.",
        "• Set `ca_bundle` in the settings file if the host uses a private CA.",
        "• Increase `--timeout` or allow retries with `--attempts`.",
    ],
    "LocalWriteError": [
        "• Check that the output directory exists and is writable.",
        "• Check free disk space.",
    ],
    "ChecksumMismatchError": [
        "• The transfer was corrupted or the artifact changed mid-download.",
        "• Retry the download.",
    ],
    "SecretStoreError": [
        "• Check the instance role can call ssm:GetParameter.",
        "• Check the parameter names in the settings file.",
    ],
    "AgentConfigError": [
        "• Check the source path of the configuration file.",
        "• Run the command from an elevated prompt.",
    ],
    "ServiceRestartError": [
        "• Run the command from an elevated prompt.",
        "• Check the service name in the settings file.",
    ],
    "MetadataError": [
        "• This command only works on a cloud instance.",
        "• Instance metadata tags must be enabled for `stack-name`.",
    ],
    "DatabaseUnreachableError": [
        "• Check the server name and that SQL Server accepts remote connections.",
        "• Check firewall rules for port 1433.",
    ],
    "ConfigurationError": [
        "• Fix the reported value in the settings file.",
        "• Run `winprov init --force` to recreate it.",
    ],
}

REJECTION_SUGGESTIONS = {
    RejectionKind.AUTHENTICATION: [
        "• The API key is missing, invalid or lacks read permission.",
    ],
    RejectionKind.NOT_FOUND: [
        "• Check the artifact path; it must start with '/'.",
        "• Check the host includes the '/artifactory' context path if needed.",
    ],
    RejectionKind.SERVER_ERROR: [
        "• The repository is having problems. Try again later or use --attempts.",
    ],
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    if isinstance(error, RemoteRejectedError):
        suggestions = REJECTION_SUGGESTIONS.get(
            error.kind, ["• Run the command with -vv for detailed logs."]
        )
    else:
        suggestions = SUGGESTIONS_MAP.get(
            error_type, ["• Run the command with -vv for detailed logs."]
        )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current settings."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Settings ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_fetch_summary(result: FetchResult):
    """Displays a summary of a completed fetch."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Source:", result.url)
    table.add_row("Saved to:", str(result.path))
    table.add_row("Size:", format_size(result.bytes_written))
    table.add_row("Duration:", format_duration(result.duration_s))
    table.add_row("Speed:", f"{format_size(result.speed_bps)}/s")
    table.add_row("SHA-256:", f"[dim]{result.sha256}[/dim]")
    if result.attempts > 1:
        table.add_row("Attempts:", str(result.attempts))

    console.print(
        Panel(
            table,
            title="[bold green]✓ Artifact Downloaded[/bold green]",
            border_style="green",
            expand=False,
        )
    )
