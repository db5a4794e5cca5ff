"""Spreadsheet reading."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from crimeseries.common.errors import IngestFailure


def read_spreadsheet(path: Path, *, skip_rows: int, column_range: str) -> pd.DataFrame:
    """Read the first sheet of ``path`` below ``skip_rows`` banner rows.

    ``column_range`` is an Excel letter range such as ``"A:T"``; the row right
    after the skipped block is the header. Every cell is read as an object so
    typing is left to the declared column types.
    """
    if not path.exists():
        raise IngestFailure(f"Spreadsheet not found: {path}")
    try:
        df = pd.read_excel(
            path,
            sheet_name=0,
            skiprows=skip_rows,
            usecols=column_range,
            dtype=object,
        )
    except Exception as exc:
        raise IngestFailure(f"Could not read {path.name}: {exc}") from exc
    return df.dropna(how="all").reset_index(drop=True)


def read_header(path: Path, *, skip_rows: int, column_range: str) -> list[str]:
    if not path.exists():
        raise IngestFailure(f"Spreadsheet not found: {path}")
    try:
        head = pd.read_excel(path, sheet_name=0, skiprows=skip_rows, usecols=column_range, nrows=0)
    except Exception as exc:
        raise IngestFailure(f"Could not read header of {path.name}: {exc}") from exc
    return [str(column) for column in head.columns]
