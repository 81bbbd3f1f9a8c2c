"""Tests for BankSettings: defaults, TOML source, env vars, CLI flags."""

from pathlib import Path

import pytest

from simplebank.config.settings import BankSettings


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = BankSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.json_output is False
        assert settings.database.url is None
        assert settings.database.isolation_level is None
        assert settings.database.busy_timeout == 5.0
        assert settings.transfer.max_attempts == 1
        assert settings.transfer.timeout is None

    def test_default_database_url(self, tmp_path: Path) -> None:
        settings = BankSettings.from_cli(root=tmp_path)
        assert settings.data_dir == tmp_path / ".simplebank"
        assert settings.database_url == f"sqlite:///{tmp_path / '.simplebank' / 'simplebank.db'}"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = BankSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_sections(self, tmp_path: Path) -> None:
        (tmp_path / "simplebank.toml").write_text(
            '[database]\nurl = "sqlite:///ledger.db"\nisolation_level = "serializable"\n'
            "[transfer]\nmax_attempts = 3\n"
        )
        settings = BankSettings.from_cli(root=tmp_path)
        assert settings.database.url == "sqlite:///ledger.db"
        assert settings.database_url == "sqlite:///ledger.db"
        assert settings.database.isolation_level == "SERIALIZABLE"
        assert settings.transfer.max_attempts == 3
        assert settings.database.busy_timeout == 5.0  # default preserved

    def test_root_from_discovered_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "simplebank.toml").write_text("[transfer]\ntimeout = 2.5\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = BankSettings.from_cli()
        assert settings.root == tmp_path.resolve()
        assert settings.transfer.timeout == 2.5

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "bank.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[transfer]\nmax_attempts = 5\n")
        settings = BankSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.transfer.max_attempts == 5
        assert settings.config_path == custom

    def test_invalid_isolation_level_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "simplebank.toml").write_text('[database]\nisolation_level = "snapshot"\n')
        with pytest.raises(Exception, match="isolation level"):
            BankSettings.from_cli(root=tmp_path)


class TestEnvAndFlags:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "simplebank.toml").write_text("[transfer]\nmax_attempts = 3\n")
        monkeypatch.setenv("SIMPLEBANK_TRANSFER__MAX_ATTEMPTS", "4")
        settings = BankSettings.from_cli(root=tmp_path)
        assert settings.transfer.max_attempts == 4

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = BankSettings.from_cli(root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True
