"""Header renaming and column typing for raw spreadsheet tables."""

from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd
from unidecode import unidecode

from crimeseries.common.errors import SchemaMismatch


def clean_column_name(name: object) -> str:
    return unidecode(str(name).lower()).replace(" ", "_")


def clean_column_names(names: Iterable[object]) -> list[str]:
    """Lowercase, strip accents and swap spaces for underscores.

    >>> clean_column_names(["Fecha Hecho", "Municipio", "Año"])
    ['fecha_hecho', 'municipio', 'ano']
    """
    return [clean_column_name(name) for name in names]


def rename_columns(df: pd.DataFrame, names: Sequence[str]) -> pd.DataFrame:
    if len(names) != df.shape[1]:
        raise SchemaMismatch(
            f"Expected {len(names)} columns, found {df.shape[1]}: {list(df.columns)}"
        )
    out = df.copy()
    out.columns = list(names)
    return out


def _as_text(series: pd.Series) -> pd.Series:
    text = series.astype("string").str.strip()
    return text.mask(text.eq("").fillna(False))


def apply_column_types(df: pd.DataFrame, types: Sequence[str]) -> pd.DataFrame:
    """Coerce each column to its declared type by position.

    ``text`` becomes a nullable string column with blanks as missing, ``numeric``
    and ``date`` coerce unparseable cells to missing, ``guess`` keeps what the
    reader inferred.
    """
    if len(types) != df.shape[1]:
        raise SchemaMismatch(f"Expected {len(types)} column types, found {df.shape[1]} columns")

    out = df.copy()
    for position, column_type in enumerate(types):
        column = out.iloc[:, position]
        if column_type == "text":
            coerced = _as_text(column)
        elif column_type == "numeric":
            coerced = pd.to_numeric(column, errors="coerce")
        elif column_type == "date":
            coerced = pd.to_datetime(column, errors="coerce").dt.normalize()
        else:
            continue
        out.isetitem(position, coerced)
    return out
