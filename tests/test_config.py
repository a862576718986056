from pathlib import Path

import pytest

from memoir.config import MemoirConfig, resolve_vault_root
from memoir.span_index.config import load_span_index_config


def _write_repo_config(repo_root: Path, body: str) -> None:
    (repo_root / "pyproject.toml").touch()
    config_dir = repo_root / ".memoir"
    config_dir.mkdir(exist_ok=True)
    (config_dir / "config.toml").write_text(body, encoding="utf-8")


class TestResolveVaultRoot:
    def test_cli_option_takes_precedence(self, tmp_path, vault, monkeypatch):
        other = tmp_path / "other"
        other.mkdir()
        monkeypatch.setenv("MEMOIR_VAULT", str(other))
        _write_repo_config(tmp_path, f'vault_root = "{other.as_posix()}"\n')
        assert resolve_vault_root(str(vault)) == vault.resolve()

    def test_repo_config_beats_environment(self, tmp_path, vault, monkeypatch):
        other = tmp_path / "other"
        other.mkdir()
        monkeypatch.setenv("MEMOIR_VAULT", str(other))
        _write_repo_config(tmp_path, f'vault_root = "{vault.as_posix()}"\n')
        assert resolve_vault_root(None) == vault.resolve()

    def test_environment_variable(self, vault, monkeypatch):
        monkeypatch.setenv("MEMOIR_VAULT", str(vault))
        assert resolve_vault_root(None) == vault.resolve()

    def test_not_configured(self):
        with pytest.raises(FileNotFoundError, match="Vault not configured"):
            resolve_vault_root(None)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="does not exist"):
            resolve_vault_root(str(tmp_path / "nope"))

    def test_malformed_repo_config_is_ignored(self, tmp_path, vault, monkeypatch):
        _write_repo_config(tmp_path, "vault_root = [unclosed\n")
        monkeypatch.setenv("MEMOIR_VAULT", str(vault))
        assert resolve_vault_root(None) == vault.resolve()


def test_index_settings_defaults(vault):
    config = MemoirConfig.from_env(str(vault))
    assert config.index.enable_inner is True
    assert config.index.enable_outer is True
    assert config.index.export_path == "meta/index.json"
    assert config.index.workers == 1
    assert "meta/**" in config.index.exclude_globs


def test_index_settings_from_file_and_environment(tmp_path, vault, monkeypatch):
    _write_repo_config(
        tmp_path,
        "[index]\n"
        "enable_inner = false\n"
        'exclude_globs = ["archive/**"]\n'
        "workers = 2\n",
    )
    monkeypatch.setenv("MEMOIR_ENABLE_OUTER", "0")
    monkeypatch.setenv("MEMOIR_WORKERS", "3")
    config = MemoirConfig.from_env(str(vault))
    assert config.index.enable_inner is False
    assert config.index.enable_outer is False
    assert config.index.exclude_globs == ["archive/**"]
    assert config.index.workers == 3


def test_invalid_settings_raise_value_error(tmp_path, vault, monkeypatch):
    _write_repo_config(tmp_path, "[index]\nworkers = 0\n")
    with pytest.raises(ValueError):
        MemoirConfig.from_env(str(vault))

    _write_repo_config(tmp_path, "")
    monkeypatch.setenv("MEMOIR_WORKERS", "many")
    with pytest.raises(ValueError, match="MEMOIR_WORKERS"):
        MemoirConfig.from_env(str(vault))


def test_span_index_config_resolves_export_and_overrides(tmp_path, vault):
    cfg = load_span_index_config(cli_vault=str(vault))
    assert cfg.vault_root == vault.resolve()
    assert cfg.export_path == (vault / "meta" / "index.json").resolve()
    assert cfg.options.enable_inner and cfg.options.enable_outer

    absolute = tmp_path / "out" / "spans.json"
    cfg = load_span_index_config(
        cli_vault=str(vault),
        cli_export_path=str(absolute),
        cli_workers=4,
        enable_outer=False,
    )
    assert cfg.export_path == absolute
    assert cfg.workers == 4
    assert cfg.options.enable_inner is True
    assert cfg.options.enable_outer is False

    with pytest.raises(ValueError):
        load_span_index_config(cli_vault=str(vault), cli_workers=0)
