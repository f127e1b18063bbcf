import configparser
from pathlib import Path

import pytest

from winprov.exceptions import ConfigurationError
from winprov.models.config import DEFAULT_AGENT_CONFIG_PATH, ToolSettings
from winprov.storage.config_manager import ConfigManager


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = ConfigManager(tmp_path / "config.ini").load_config()

    assert settings == ToolSettings()
    assert settings.max_attempts == 1
    assert settings.timeout is None


def test_saved_file_loads_back(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "nested" / "config.ini")
    manager.save_new_config({"max_attempts": 4, "aws_region": "us-east-2"})

    settings = ConfigManager(tmp_path / "nested" / "config.ini").load_config()

    assert settings.max_attempts == 4
    assert settings.aws_region == "us-east-2"
    assert settings.timeout is None
    assert settings.agent_config_path == DEFAULT_AGENT_CONFIG_PATH


def test_cli_options_override_file(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.ini")
    manager.save_new_config({"timeout": 30})

    settings = ConfigManager(tmp_path / "config.ini").load_config({"timeout": 5.0})

    assert settings.timeout == 5.0


def test_missing_keys_are_migrated(tmp_path: Path) -> None:
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nverify_checksum = false\n", encoding="utf-8")

    settings = ConfigManager(path).load_config()

    assert settings.verify_checksum is False
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")
    assert set(parser["DEFAULT"]) == ToolSettings.get_ini_keys()


def test_invalid_value_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_attempts = 50\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="max_attempts"):
        ConfigManager(path).load_config()


def test_malformed_file_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.ini"
    path.write_text("max_attempts = 2\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(path).load_config()
