"""Row validity filtering with loss accounting."""

from __future__ import annotations

import pandas as pd

from crimeseries.common.constants import REQUIRED_FIELD
from crimeseries.common.errors import SchemaMismatch
from crimeseries.common.models import StageReport


def has_value(series: pd.Series) -> pd.Series:
    present = series.notna()
    blank = series.astype("string").str.strip().eq("").fillna(False)
    return present & ~blank


def filter_required(
    df: pd.DataFrame,
    source: str,
    *,
    field: str = REQUIRED_FIELD,
    stage: str = "row_filter",
) -> tuple[pd.DataFrame, StageReport]:
    if field not in df.columns:
        raise SchemaMismatch(f"{source}: required column '{field}' is missing")

    kept = df[has_value(df[field])].reset_index(drop=True)
    report = StageReport(stage=stage, source=source, rows_before=len(df), rows_after=len(kept))
    return kept, report
