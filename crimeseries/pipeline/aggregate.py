"""Incident counting per geographic unit and date."""

from __future__ import annotations

import pandas as pd

from crimeseries.common.constants import COUNT_COLUMN, KEY_COLUMNS
from crimeseries.common.errors import SchemaMismatch
from crimeseries.common.models import StageReport

AGGREGATED_COLUMNS = [*KEY_COLUMNS, COUNT_COLUMN]


def empty_counts() -> pd.DataFrame:
    frame = pd.DataFrame({column: pd.Series(dtype="string") for column in KEY_COLUMNS[:-1]})
    frame["fecha"] = pd.Series(dtype="datetime64[ns]")
    frame[COUNT_COLUMN] = pd.Series(dtype="int64")
    return frame


def count_incidents(df: pd.DataFrame, source: str) -> tuple[pd.DataFrame, StageReport]:
    """Collapse records into one row per (departamento, municipio, barrio, fecha).

    Missing key values form their own groups, so the counts always add up to the
    number of input rows.
    """
    missing = [column for column in KEY_COLUMNS if column not in df.columns]
    if missing:
        raise SchemaMismatch(f"{source}: missing key columns {', '.join(missing)}")

    if df.empty:
        counts = empty_counts()
    else:
        counts = (
            df.groupby(list(KEY_COLUMNS), dropna=False, sort=True)
            .size()
            .reset_index(name=COUNT_COLUMN)
        )
        counts[COUNT_COLUMN] = counts[COUNT_COLUMN].astype("int64")

    report = StageReport(
        stage="aggregate",
        source=source,
        rows_before=len(df),
        rows_after=len(counts),
        kind="reduction",
    )
    return counts, report
