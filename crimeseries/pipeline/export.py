"""CSV persistence of named datasets."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from crimeseries.common.fs import dataset_path, ensure_dir

TEXT_COLUMNS = ("departamento", "municipio", "barrio", "cod_localidad")


def write_dataset(df: pd.DataFrame, folder: Path, name: str) -> Path:
    ensure_dir(folder)
    out_path = dataset_path(folder, name)
    df.to_csv(out_path, index=False, date_format="%Y-%m-%d", encoding="utf-8")
    return out_path


def read_dataset(path: Path) -> pd.DataFrame:
    header = pd.read_csv(path, nrows=0).columns
    return pd.read_csv(
        path,
        dtype={column: "string" for column in TEXT_COLUMNS if column in header},
        parse_dates=["fecha"] if "fecha" in header else False,
        keep_default_na=False,
        na_values=[""],
        encoding="utf-8",
    )

