"""
Installs the monitoring agent configuration file and restarts the agent service.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Protocol

from winprov.exceptions import AgentConfigError, ServiceRestartError
from winprov.models.config import ToolSettings

log = logging.getLogger(__name__)


class ServiceController(Protocol):
    async def restart(self, service_name: str) -> None:
        """Restarts a system service, raising ServiceRestartError on failure."""


class PowerShellServiceController:
    """Restarts Windows services through PowerShell's Restart-Service."""

    def __init__(self, executable: str = "powershell.exe"):
        self.executable = executable

    async def restart(self, service_name: str) -> None:
        command = f"Restart-Service -Name '{service_name}' -Force -ErrorAction Stop"
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ServiceRestartError(
                f"Could not launch '{self.executable}' to restart {service_name}: {e}"
            ) from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            raise ServiceRestartError(
                f"Restart of service '{service_name}' failed "
                f"(exit {process.returncode}): {stderr.decode(errors='replace').strip()}"
            )


def _copy_config(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)


async def install_config(
    source_path: str | os.PathLike,
    *,
    settings: ToolSettings | None = None,
    controller: ServiceController | None = None,
) -> Path:
    """
    Copies `source_path` over the agent configuration file and restarts the agent.

    Args:
        source_path: The configuration file to install.
        settings: Supplies the destination path and service name.
        controller: Service controller; PowerShell by default.

    Returns:
        The path the configuration was written to.

    Raises:
        AgentConfigError: If the source is missing or the copy fails.
        ServiceRestartError: If the service does not restart.
    """
    settings = settings or ToolSettings()
    controller = controller or PowerShellServiceController()
    source = Path(source_path)
    destination = Path(settings.agent_config_path)

    if not await asyncio.to_thread(source.is_file):
        raise AgentConfigError(f"Agent configuration file not found: '{source}'.")

    try:
        await asyncio.to_thread(_copy_config, source, destination)
    except OSError as e:
        raise AgentConfigError(
            f"Could not copy '{source}' to '{destination}': {e}"
        ) from e
    log.info(f"Installed agent configuration at '{destination}'.")

    await controller.restart(settings.agent_service_name)
    log.info(f"Restarted service '{settings.agent_service_name}'.")
    return destination
