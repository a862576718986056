from __future__ import annotations

from pathlib import Path
from typing import Optional

from memoir.config import MemoirConfig

from .models import ExtractOptions, SpanIndexConfig


def load_span_index_config(
    *,
    cli_vault: Optional[str],
    cli_export_path: Optional[str] = None,
    cli_workers: Optional[int] = None,
    enable_inner: Optional[bool] = None,
    enable_outer: Optional[bool] = None,
) -> SpanIndexConfig:
    """Build the rebuild configuration; CLI values win over everything else."""
    config = MemoirConfig.from_env(cli_vault)
    settings = config.index

    export_value = cli_export_path if cli_export_path is not None else settings.export_path
    if not export_value.strip():
        raise ValueError("Invalid config: [index].export_path must be a non-empty string")
    export_path = Path(export_value).expanduser()
    if not export_path.is_absolute():
        export_path = (config.vault_path / export_path).resolve()

    workers = cli_workers if cli_workers is not None else settings.workers
    if workers < 1:
        raise ValueError(f"Invalid worker count: {workers} (must be at least 1)")

    options = ExtractOptions(
        enable_inner=settings.enable_inner if enable_inner is None else enable_inner,
        enable_outer=settings.enable_outer if enable_outer is None else enable_outer,
    )

    return SpanIndexConfig(
        vault_root=config.vault_path,
        export_path=export_path,
        exclude_globs=list(settings.exclude_globs),
        options=options,
        workers=workers,
    )
