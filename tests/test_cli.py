from pathlib import Path

import pytest
from typer.testing import CliRunner

from winprov import __main__ as entry_point
from winprov import __version__
from winprov.cli import app as cli_app
from winprov.exceptions import DatabaseUnreachableError

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_file = tmp_path / "winprov.ini"
    monkeypatch.setenv("WINPROV_CONFIG", str(config_file))
    monkeypatch.delenv("ARTIFACTORY_API_KEY", raising=False)
    monkeypatch.delenv("ARTIFACTORY_HOST", raising=False)
    return config_file


def test_version() -> None:
    result = runner.invoke(cli_app.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_settings_file(isolated_env: Path) -> None:
    result = runner.invoke(cli_app.app, ["init"])

    assert result.exit_code == 0
    assert isolated_env.is_file()
    assert "max_attempts" in isolated_env.read_text(encoding="utf-8")


def test_fetch_without_credentials_fails_with_missing_configuration(
    tmp_path: Path,
) -> None:
    result = runner.invoke(cli_app.app, ["fetch", "/a/b.zip", str(tmp_path / "b.zip")])

    assert result.exit_code == 1
    assert "MissingConfigurationError" in result.output
    assert not (tmp_path / "b.zip").exists()


def test_db_exists_prints_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str]] = []

    async def fake_db_exists(server: str, name: str) -> bool:
        calls.append((server, name))
        return name == "OrdersDb"

    monkeypatch.setattr(cli_app, "db_exists", fake_db_exists)

    found = runner.invoke(cli_app.app, ["db-exists", "sql01", "OrdersDb"])
    absent = runner.invoke(cli_app.app, ["db-exists", "sql01", "Other"])

    assert found.exit_code == 0
    assert found.output.strip() == "True"
    assert absent.exit_code == 0
    assert absent.output.strip() == "False"
    assert calls == [("sql01", "OrdersDb"), ("sql01", "Other")]


def test_db_exists_unreachable_server_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def unreachable(server: str, name: str) -> bool:
        raise DatabaseUnreachableError(f"cannot reach {server}")

    monkeypatch.setattr(cli_app, "db_exists", unreachable)

    result = runner.invoke(cli_app.app, ["db-exists", "sql01", "OrdersDb"])

    assert result.exit_code == 1
    assert "DatabaseUnreachableError" in result.output
    assert "False" not in result.output


def test_install_config_with_missing_source(tmp_path: Path) -> None:
    result = runner.invoke(
        cli_app.app, ["install-config", str(tmp_path / "absent.json")]
    )

    assert result.exit_code == 1
    assert "AgentConfigError" in result.output


def test_show_config_lists_settings() -> None:
    result = runner.invoke(cli_app.app, ["--show-config"])

    assert result.exit_code == 0
    assert "agent_service_name" in result.output


def test_fetch_to_plain_http_host_is_refused(tmp_path: Path) -> None:
    result = runner.invoke(
        cli_app.app,
        [
            "fetch",
            "/a/b.zip",
            str(tmp_path / "b.zip"),
            "--api-key",
            "k",
            "--host",
            "http://repo.example",
        ],
    )

    assert result.exit_code == 1
    assert "InsecureEndpointError" in result.output
    assert not (tmp_path / "b.zip").exists()


def test_entry_point_reports_unexpected_errors_on_stderr(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def broken_app(**kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(entry_point, "app", broken_app)

    with pytest.raises(SystemExit) as excinfo:
        entry_point.main()

    captured = capsys.readouterr()
    assert excinfo.value.code == 1
    assert captured.out == ""
    assert "RuntimeError" in captured.err
    assert "disk on fire" in captured.err


def test_entry_point_interrupt_exits_130(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def interrupted_app(**kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(entry_point, "app", interrupted_app)

    with pytest.raises(SystemExit) as excinfo:
        entry_point.main()

    assert excinfo.value.code == 130
    assert "Interrupted" in capsys.readouterr().err
