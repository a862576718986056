"""Configuration management for Memoir."""

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

CONFIG_DIR = ".memoir"
CONFIG_FILE = "config.toml"


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop if we reach filesystem root
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .memoir/config.toml if it exists."""
    config_file = repo_root / CONFIG_DIR / CONFIG_FILE

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def _nested_get(data: Optional[dict[str, Any]], path: list[str]) -> Any:
    cur: Any = data or {}
    for key in path:
        if not isinstance(cur, dict) or key not in cur:
            return None
        cur = cur[key]
    return cur


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: expected an integer, got {value!r}") from None


def resolve_vault_root(cli_vault_path: Optional[str] = None) -> Path:
    """Resolve vault root path with the following precedence:

    1. CLI --vault option (if provided)
    2. repo-local .memoir/config.toml ``vault_root`` (walk upward from CWD)
    3. MEMOIR_VAULT environment variable
    4. Error with helpful message

    Raises:
        FileNotFoundError: If no vault is configured or the path is not a directory
    """
    if cli_vault_path:
        vault_path = Path(cli_vault_path).expanduser().resolve()
        source = "--vault"
    else:
        data = _load_repo_config_data(_find_repo_root(Path.cwd()))
        repo_vault = _nested_get(data, ["vault_root"])
        env_vault = os.environ.get("MEMOIR_VAULT")
        if isinstance(repo_vault, str) and repo_vault.strip():
            vault_path = Path(repo_vault).expanduser().resolve()
            source = f"{CONFIG_DIR}/{CONFIG_FILE}"
        elif env_vault:
            vault_path = Path(env_vault).expanduser().resolve()
            source = "MEMOIR_VAULT"
        else:
            raise FileNotFoundError(
                "Vault not configured. Try one of:\n"
                "  • memoir <command> --vault \"/path/to/vault\"\n"
                f"  • set vault_root in {CONFIG_DIR}/{CONFIG_FILE}\n"
                "  • export MEMOIR_VAULT=\"/path/to/vault\""
            )

    if not vault_path.exists():
        raise FileNotFoundError(f"Vault path from {source} does not exist: {vault_path}")
    if not vault_path.is_dir():
        raise FileNotFoundError(f"Vault path from {source} is not a directory: {vault_path}")
    return vault_path


class IndexSettings(BaseModel):
    """Span index settings read from the [index] table."""

    enable_inner: bool = Field(default=True)
    enable_outer: bool = Field(default=True)
    exclude_globs: list[str] = Field(default_factory=lambda: [".obsidian/**", ".git/**", "meta/**"])
    export_path: str = Field(default="meta/index.json")
    workers: int = Field(default=1, ge=1)


class MemoirConfig(BaseModel):
    """Configuration for a Memoir vault."""

    vault_path: Path
    index: IndexSettings = Field(default_factory=IndexSettings)

    @classmethod
    def from_env(cls, cli_vault_path: Optional[str] = None) -> "MemoirConfig":
        """Load configuration from CLI, repo config, environment and defaults.

        Raises:
            FileNotFoundError: If the vault cannot be resolved
            ValueError: If a config value has the wrong type
        """
        vault_path = resolve_vault_root(cli_vault_path)
        data = _load_repo_config_data(_find_repo_root(Path.cwd())) or {}

        index_section = data.get("index", {})
        if not isinstance(index_section, dict):
            raise ValueError(f"Invalid config: [index] in {CONFIG_DIR}/{CONFIG_FILE} must be a table")
        settings = dict(index_section)

        overrides = {
            "enable_inner": _env_bool("MEMOIR_ENABLE_INNER"),
            "enable_outer": _env_bool("MEMOIR_ENABLE_OUTER"),
            "workers": _env_int("MEMOIR_WORKERS"),
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})

        return cls(vault_path=vault_path, index=IndexSettings(**settings))
