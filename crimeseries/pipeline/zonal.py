"""Bogotá zonal weekly series.

The stages run in a fixed order over one category's aggregated counts:

1. keep rows whose ``municipio`` contains the city marker;
2. drop rows that cannot be placed in a zonal unit or a week (no ``barrio``
   label, no ``fecha``);
3. densify: every date observed in the city gets a row for every barrio
   observed in the city, zero when nothing was recorded;
4. derive ``Año`` and ``Semana`` from ``fecha``;
5. sum counts per (``Año``, ``Semana``, ``Barrio``);
6. split ``Barrio`` into ``barrio`` and ``cod_localidad`` and drop labels that
   are still hyphenated after the split.

Each stage is a pure function returning its result together with a
:class:`StageReport`; nothing here logs.
"""

from __future__ import annotations

from typing import Mapping

import pandas as pd

from crimeseries.common.constants import (
    CITY_MARKER,
    COUNT_COLUMN,
    MALFORMED_MARKER,
    ZONAL_SEPARATOR,
)
from crimeseries.common.models import StageReport
from crimeseries.pipeline.filter import filter_required

YEAR_COLUMN = "Año"
WEEK_COLUMN = "Semana"
ZONE_COLUMN = "Barrio"
ZONAL_COLUMNS = [YEAR_COLUMN, WEEK_COLUMN, "barrio", "cod_localidad", COUNT_COLUMN]


def empty_zonal_series() -> pd.DataFrame:
    return pd.DataFrame(
        {
            YEAR_COLUMN: pd.Series(dtype="int64"),
            WEEK_COLUMN: pd.Series(dtype="int64"),
            "barrio": pd.Series(dtype="string"),
            "cod_localidad": pd.Series(dtype="string"),
            COUNT_COLUMN: pd.Series(dtype="int64"),
        }
    )


def filter_city(
    df: pd.DataFrame,
    source: str,
    *,
    marker: str = CITY_MARKER,
) -> tuple[pd.DataFrame, StageReport]:
    in_city = df["municipio"].astype("string").str.contains(marker, regex=False, na=False)
    kept = df[in_city.astype(bool)].reset_index(drop=True)
    return kept, StageReport(stage="city_filter", source=source, rows_before=len(df), rows_after=len(kept))


def pivot_wide(df: pd.DataFrame) -> pd.DataFrame:
    """Dates as rows, barrios as columns, counts as cells; absent pairs are 0."""
    return df.pivot_table(
        index="fecha",
        columns="barrio",
        values=COUNT_COLUMN,
        aggfunc="sum",
        fill_value=0,
    )


def melt_long(wide: pd.DataFrame) -> pd.DataFrame:
    long = wide.reset_index().melt(id_vars="fecha", var_name="barrio", value_name=COUNT_COLUMN)
    long[COUNT_COLUMN] = long[COUNT_COLUMN].astype("int64")
    return long.sort_values(["fecha", "barrio"], kind="mergesort").reset_index(drop=True)


def densify(df: pd.DataFrame, source: str) -> tuple[pd.DataFrame, StageReport]:
    """Complete the (fecha x barrio) cross product with zero counts."""
    observed_pairs = len(df[["fecha", "barrio"]].drop_duplicates())
    if df.empty:
        long = pd.DataFrame(
            {
                "fecha": pd.Series(dtype="datetime64[ns]"),
                "barrio": pd.Series(dtype="string"),
                COUNT_COLUMN: pd.Series(dtype="int64"),
            }
        )
    else:
        long = melt_long(pivot_wide(df))
    report = StageReport(
        stage="densify",
        source=source,
        rows_before=observed_pairs,
        rows_after=len(long),
        kind="densify",
    )
    return long, report


def derive_calendar(df: pd.DataFrame, week_numbering: str = "ordinal") -> pd.DataFrame:
    """Add ``Año`` and ``Semana``.

    ``ordinal`` weeks count whole 7-day blocks from 1 January (week 1 is
    1-7 January, week 53 holds the last one or two days of the year).
    ``iso`` uses the ISO-8601 week-numbering year and week.
    """
    fecha = pd.to_datetime(df["fecha"])
    out = df.copy()
    if week_numbering == "iso":
        iso = fecha.dt.isocalendar()
        out[YEAR_COLUMN] = iso["year"].astype("int64")
        out[WEEK_COLUMN] = iso["week"].astype("int64")
    elif week_numbering == "ordinal":
        out[YEAR_COLUMN] = fecha.dt.year.astype("int64")
        out[WEEK_COLUMN] = ((fecha.dt.dayofyear - 1) // 7 + 1).astype("int64")
    else:
        raise ValueError(f"Unknown week numbering: {week_numbering}")
    return out


def weekly_totals(df: pd.DataFrame) -> pd.DataFrame:
    weekly = (
        df.rename(columns={"barrio": ZONE_COLUMN})
        .groupby([YEAR_COLUMN, WEEK_COLUMN, ZONE_COLUMN], sort=True)[COUNT_COLUMN]
        .sum()
        .reset_index()
    )
    weekly[COUNT_COLUMN] = weekly[COUNT_COLUMN].astype("int64")
    return weekly


def split_zonal_codes(
    df: pd.DataFrame,
    source: str,
    *,
    separator: str = ZONAL_SEPARATOR,
    malformed: str = MALFORMED_MARKER,
    base: int | None = None,
) -> tuple[pd.DataFrame, StageReport]:
    """Split ``Barrio`` labels such as ``"KENNEDY E-10"`` into name and code.

    A label without the separator keeps its full text as ``barrio`` and gets no
    ``cod_localidad``. Anything after a second separator is discarded. Rows
    whose ``barrio`` part still contains ``malformed`` are dropped.

    ``base`` is the row count the loss is reported against (the densified daily
    rows in the full pipeline); it defaults to the number of weekly rows given.
    """
    parts = df[ZONE_COLUMN].astype("string").str.split(separator, regex=False)
    barrio = parts.str[0].astype("string")
    code = parts.str[1].astype("string")
    malformed_label = barrio.str.contains(malformed, regex=False, na=False).astype(bool)

    out = df.drop(columns=[ZONE_COLUMN]).assign(barrio=barrio, cod_localidad=code)
    kept = out[~malformed_label].reindex(columns=ZONAL_COLUMNS).reset_index(drop=True)
    report = StageReport(
        stage="zonal_codes",
        source=source,
        rows_before=len(df) if base is None else base,
        rows_after=len(kept),
        dropped=len(df) - len(kept),
    )
    return kept, report


def run_zonal_pipeline(
    df: pd.DataFrame,
    source: str,
    settings: Mapping[str, str] | None = None,
) -> tuple[pd.DataFrame, list[StageReport]]:
    settings = settings or {}
    reports: list[StageReport] = []

    city, report = filter_city(df, source, marker=settings.get("city_marker", CITY_MARKER))
    reports.append(report)
    labelled, report = filter_required(city, source, field="barrio", stage="zonal_label")
    reports.append(report)
    dated, report = filter_required(labelled, source, field="fecha", stage="zonal_date")
    reports.append(report)

    dense, report = densify(dated, source)
    reports.append(report)
    if dense.empty:
        reports.append(StageReport(stage="zonal_codes", source=source, rows_before=0, rows_after=0))
        return empty_zonal_series(), reports

    weekly = weekly_totals(derive_calendar(dense, settings.get("week_numbering", "ordinal")))
    series, report = split_zonal_codes(
        weekly,
        source,
        separator=settings.get("separator", ZONAL_SEPARATOR),
        malformed=settings.get("malformed_marker", MALFORMED_MARKER),
        base=len(dense),
    )
    reports.append(report)
    return series, reports
