"""
Manages loading, validation, and migration of the INI settings file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from winprov.exceptions import ConfigurationError
from winprov.models.config import ToolSettings

log = logging.getLogger(__name__)


def _to_ini_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    # configparser uses % for interpolation, so we must escape it
    return str(value).replace("%", "%%")


class ConfigManager:
    """Handles all operations related to the application's INI settings file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> ToolSettings:
        """
        Loads settings from the INI file, applies CLI overrides, and validates them.

        A missing file is not an error: defaults are used.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated ToolSettings object.

        Raises:
            ConfigurationError: If the file is unreadable or validation fails.
        """
        settings_from_file: dict[str, Any] = {}

        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing settings file: {e}") from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Settings file was updated with new default values."
                    "[/yellow]"
                )
            settings_from_file = self.get_config_as_dict()
        else:
            log.debug(f"No settings file at '{self.config_file_path}', using defaults.")

        if cli_options:
            settings_from_file.update(cli_options)

        try:
            return ToolSettings(**settings_from_file)
        except ValidationError as e:
            raise ConfigurationError(f"Settings validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new settings file, filling unspecified keys with
        defaults.
        """
        settings = settings or {}
        defaults = ToolSettings()
        config = configparser.ConfigParser()
        config["DEFAULT"] = {}

        for key in sorted(ToolSettings.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key))
            config["DEFAULT"][key] = _to_ini_value(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save settings file: {e}") from e

    def get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        values: dict[str, Any] = {}
        for key in ToolSettings.get_ini_keys():
            raw = section.get(key)
            if raw is None:
                continue
            raw = raw.strip()
            if key == "timeout" and not raw:
                values[key] = None
            elif key == "verify_checksum":
                values[key] = section.getboolean(key)
            else:
                values[key] = raw
        return values

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing settings file."""
        defaults = ToolSettings()
        needs_saving = False
        config_section = self._parser["DEFAULT"]

        for key in sorted(ToolSettings.get_ini_keys()):
            if key not in config_section:
                config_section[key] = _to_ini_value(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating settings: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated settings file: {e}")
                return False

        return needs_saving
