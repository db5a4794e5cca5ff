"""Per-source spreadsheet ingestion with configurable fail-soft semantics."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pandas as pd

from crimeseries.common.errors import PipelineError, StageError
from crimeseries.common.models import StageReport
from crimeseries.ingest.reader import read_header, read_spreadsheet
from crimeseries.pipeline.filter import filter_required
from crimeseries.pipeline.normalize import apply_column_types, clean_column_names, rename_columns


def resolve_paths(files: list[str], data_dir: Path) -> list[Path]:
    paths = []
    for entry in files:
        path = Path(entry)
        paths.append(path if path.is_absolute() else data_dir / path)
    return paths


def apply_column_aliases(names: list[str], aliases: dict[str, str] | None) -> list[str]:
    """Map cleaned header names onto canonical ones, e.g. ``fecha_hecho`` to ``fecha``."""
    if not aliases:
        return list(names)
    return [aliases.get(name, name) for name in names]


def resolve_column_names(
    source_cfg: dict,
    paths: list[Path],
    *,
    on_file_error: str = "skip",
) -> tuple[list[str], dict[Path, PipelineError]]:
    """Declared names, or the cleaned header of the first file that can be read.

    Returns the names together with the files whose header could not be read.
    With ``abort`` the first such failure is raised instead.
    """
    aliases = source_cfg.get("column_aliases")
    if source_cfg.get("column_names"):
        return apply_column_aliases(source_cfg["column_names"], aliases), {}

    failures: dict[Path, PipelineError] = {}
    for path in paths:
        try:
            header = read_header(
                path,
                skip_rows=source_cfg["skip_rows"],
                column_range=source_cfg["column_range"],
            )
        except PipelineError as exc:
            if on_file_error == "abort":
                raise
            failures[path] = exc
            continue
        return apply_column_aliases(clean_column_names(header), aliases), failures
    return [], failures


def ingest_file(path: Path, source_cfg: dict, names: list[str]) -> tuple[pd.DataFrame, StageReport]:
    raw = read_spreadsheet(
        path,
        skip_rows=source_cfg["skip_rows"],
        column_range=source_cfg["column_range"],
    )
    typed = apply_column_types(raw, source_cfg["column_types"])
    normalized = rename_columns(typed, names)
    return filter_required(normalized, source=path.name)


def run_ingest_source(
    name: str,
    source_cfg: dict,
    data_dir: Path,
    *,
    on_file_error: str = "skip",
    workers: int = 1,
) -> dict:
    """Read, normalize and filter every file of one source.

    Files are processed on up to ``workers`` threads but results, reports and
    skips always come back in configured file order. With ``on_file_error`` set
    to ``skip`` a failing file is recorded and left out; with ``abort`` the
    first failure is raised.
    """
    paths = resolve_paths(source_cfg["files"], data_dir)
    names, header_failures = resolve_column_names(source_cfg, paths, on_file_error=on_file_error)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            None if path in header_failures else pool.submit(ingest_file, path, source_cfg, names)
            for path in paths
        ]

        frames: list[pd.DataFrame] = []
        reports: list[StageReport] = []
        skipped: list[dict] = []
        for path, future in zip(paths, futures):
            if future is None:
                exc = header_failures[path]
                skipped.append({"file": str(path), "error_code": exc.error_code, "error": str(exc)})
                continue
            try:
                frame, report = future.result()
            except PipelineError as exc:
                if on_file_error == "abort":
                    raise
                skipped.append({"file": str(path), "error_code": exc.error_code, "error": str(exc)})
                continue
            frames.append(frame)
            reports.append(report)

    if not frames:
        raise StageError(f"All files failed for source {name}")

    combined = pd.concat(frames, ignore_index=True, sort=False)
    return {
        "source": name,
        "frame": combined,
        "reports": reports,
        "skipped": skipped,
    }
