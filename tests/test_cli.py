"""Tests for the root simplebank CLI."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from simplebank import __version__
from simplebank.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "simplebank" in result.output
    assert "account" in result.output
    assert "transfer" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json"])
def test_global_flags_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


@pytest.mark.usefixtures("_isolated_root")
def test_database_created_lazily(cli_runner: CliRunner, tmp_path: Path) -> None:
    cli_runner.invoke(cli, ["--help"])
    assert not (tmp_path / ".simplebank").exists()
    cli_runner.invoke(cli, ["account", "list"])
    assert (tmp_path / ".simplebank" / "simplebank.db").exists()


@pytest.mark.usefixtures("_isolated_root")
def test_config_file_database_url(cli_runner: CliRunner, tmp_path: Path) -> None:
    db_path = tmp_path / "ledger.db"
    config = tmp_path / "custom.toml"
    config.write_text(f'[database]\nurl = "sqlite:///{db_path.as_posix()}"\n')
    result = cli_runner.invoke(cli, ["-c", str(config), "-q", "account", "create", "alice"])
    assert result.exit_code == 0, result.output
    assert db_path.exists()
    assert not (tmp_path / ".simplebank").exists()
