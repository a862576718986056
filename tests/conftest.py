"""Pytest fixtures for Memoir tests."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run every test from a scratch directory with no Memoir env overrides."""
    for name in ("MEMOIR_VAULT", "MEMOIR_ENABLE_INNER", "MEMOIR_ENABLE_OUTER", "MEMOIR_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def vault(tmp_path) -> Path:
    """Create an empty vault directory.

    Args:
        tmp_path: pytest's built-in temporary directory fixture

    Returns:
        Path to the vault root
    """
    vault_root = tmp_path / "vault"
    vault_root.mkdir()
    return vault_root


@pytest.fixture
def write_note(vault):
    """Return a helper that writes a UTF-8 note relative to the vault."""

    def _write(rel_path: str, content: str) -> Path:
        path = vault / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
