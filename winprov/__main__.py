"""
Console entry point for `winprov` and `python -m winprov`.

Provisioning scripts capture stdout from `region`, `stack-name` and
`db-exists`, so anything rendered here goes to stderr.
"""

import logging
import sys

import typer
from rich.console import Console

from winprov import __version__
from winprov.cli.app import app
from winprov.cli.formatters import format_error_with_suggestions
from winprov.exceptions import WinprovError

log = logging.getLogger("winprov")

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _use_utf8_streams() -> None:
    # Windows consoles start on a legacy code page that cannot draw Rich panels.
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(encoding="utf-8", errors="replace")


def main() -> None:
    if sys.platform == "win32":
        _use_utf8_streams()

    stderr = Console(stderr=True)
    try:
        app(prog_name="winprov")
    except (typer.Exit, typer.Abort):
        pass
    except KeyboardInterrupt:
        stderr.print(
            "[yellow]Interrupted. Any existing download target is unchanged.[/yellow]"
        )
        sys.exit(EXIT_INTERRUPTED)
    except WinprovError as e:
        stderr.print(format_error_with_suggestions(e))
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        stderr.print(
            format_error_with_suggestions(
                e, {"type": "Unexpected", "winprov": __version__}
            )
        )
        log.debug("Unhandled exception in winprov", exc_info=True)
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
