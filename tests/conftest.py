from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

SHEET_COLUMNS = ["DEPARTAMENTO", "MUNICIPIO", "BARRIO", "FECHA HECHO", "CANTIDAD"]

HURTO_2019_ROWS = [
    ("CUNDINAMARCA", "BOGOTÁ D.C. (CT)", "KENNEDY E-08", datetime(2019, 12, 30), 1),
    ("CUNDINAMARCA", "BOGOTÁ D.C. (CT)", "SUBA E-11", datetime(2019, 12, 31), 1),
    ("ANTIOQUIA", "MEDELLÍN (CT)", "EL POBLADO", datetime(2019, 12, 31), 1),
    ("CUNDINAMARCA", None, "SIN DATO", datetime(2019, 12, 31), 1),
]

HURTO_2020_ROWS = [
    ("CUNDINAMARCA", "BOGOTÁ D.C. (CT)", "KENNEDY E-08", datetime(2020, 1, 2), 1),
    ("CUNDINAMARCA", "BOGOTÁ D.C. (CT)", "KENNEDY E-08", datetime(2020, 1, 2), 1),
    ("CUNDINAMARCA", "BOGOTÁ D.C. (CT)", "A-E-B", datetime(2020, 1, 2), 1),
]

PIPELINE_YML = """categories:
  hurto_personas: "^hurto_personas_"
  homicidios: "^homicidios_"
bogota:
  city_marker: BOGO
  separator: " E-"
  malformed_marker: "-"
  week_numbering: ordinal
ingest:
  on_file_error: skip
  workers: 1
output:
  historic_dir: historic
  aggregated_dir: aggregated
  category_dir: categories
  zonal_dir: bogota
"""

SOURCES_YML = """sources:
  hurto_personas_2019:
    files: [raw/hurto_personas_2019.xlsx]
    skip_rows: 9
    column_range: "A:E"
    column_types: [text, text, text, date, numeric]
    column_names: [departamento, municipio, barrio, fecha, cantidad]
  hurto_personas_2020:
    files: [raw/hurto_personas_2020.xlsx{extra_file}]
    skip_rows: 9
    column_range: "A:E"
    column_types: [text, text, text, date, numeric]
    column_names: [departamento, municipio, barrio, fecha, cantidad]
"""


def write_police_sheet(
    path: Path,
    rows: list[tuple],
    *,
    columns: list[str] | None = None,
    skip_rows: int = 9,
) -> Path:
    """Write ``rows`` below a banner block, the way SIEDCO exports look."""
    path.parent.mkdir(parents=True, exist_ok=True)
    banner = pd.DataFrame([["POLICÍA NACIONAL - DIJIN"]] + [[f"banner {i}"] for i in range(1, skip_rows)])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        banner.to_excel(writer, index=False, header=False, startrow=0)
        pd.DataFrame(rows, columns=columns or SHEET_COLUMNS).to_excel(writer, index=False, startrow=skip_rows)
    return path


@pytest.fixture
def police_sheet():
    return write_police_sheet


@pytest.fixture
def pipeline_workspace(tmp_path: Path):
    """Config dir and data dir with two hurto sources ready for the CLI."""

    def _build(*, missing_file: bool = False) -> dict:
        config_dir = tmp_path / "config"
        data_dir = tmp_path / "data"
        config_dir.mkdir(exist_ok=True)
        extra = ", raw/hurto_personas_2020_missing.xlsx" if missing_file else ""
        (config_dir / "pipeline.yml").write_text(PIPELINE_YML, encoding="utf-8")
        (config_dir / "sources.yml").write_text(SOURCES_YML.format(extra_file=extra), encoding="utf-8")
        write_police_sheet(data_dir / "raw" / "hurto_personas_2019.xlsx", HURTO_2019_ROWS)
        write_police_sheet(data_dir / "raw" / "hurto_personas_2020.xlsx", HURTO_2020_ROWS)
        return {"config_dir": config_dir, "data_dir": data_dir}

    return _build
