from pathlib import Path

import pytest

from crimeseries.common.categories import CrimeCategory
from crimeseries.common.config_loader import load_all_configs
from crimeseries.common.errors import ConfigError

PIPELINE_YML = """categories:
  homicidios: "^homicidios_"
  hurto_personas: "^hurto_personas_"
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
  homicidios_2020:
    files: [raw/homicidios_2020.xlsx]
    skip_rows: 9
    column_range: "A:D"
    column_types: [text, text, text, date]
    column_names: [departamento, municipio, barrio, fecha]
  hurto_personas_2020:
    files: [raw/hurto_2020.xlsx]
    skip_rows: 9
    column_range: "A:D"
    column_types: [text, text, text, date]
"""


def _write_configs(folder: Path, pipeline: str = PIPELINE_YML, sources: str = SOURCES_YML) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    (folder / "pipeline.yml").write_text(pipeline, encoding="utf-8")
    (folder / "sources.yml").write_text(sources, encoding="utf-8")
    return folder


def test_load_all_configs_from_repo_config_dir():
    bundle = load_all_configs(Path("config"))
    assert "hurto_personas_2010_2019" in bundle.sources
    assert bundle.category_sources[CrimeCategory.HURTO_PERSONAS] == [
        "hurto_personas_2010_2019",
        "hurto_personas_2020_2021",
    ]
    assert bundle.bogota["separator"] == " E-"
    assert bundle.sources["hurto_personas_2020_2021"]["column_aliases"] == {"fecha_hecho": "fecha"}


def test_load_all_configs_resolves_categories_once(tmp_path: Path):
    bundle = load_all_configs(_write_configs(tmp_path / "cfg"))
    assert bundle.category_sources == {
        CrimeCategory.HOMICIDIOS: ["homicidios_2020"],
        CrimeCategory.HURTO_PERSONAS: ["hurto_personas_2020"],
    }
    assert bundle.on_file_error == "skip"
    assert bundle.workers == 1
    assert bundle.output_dir(tmp_path, "zonal_dir") == tmp_path / "bogota"


def test_overlay_values_replace_base(tmp_path: Path):
    base = _write_configs(tmp_path / "base")
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "pipeline.yml").write_text(
        "ingest:\n  on_file_error: abort\nbogota:\n  week_numbering: iso\n",
        encoding="utf-8",
    )

    bundle = load_all_configs(base, overlay_config_dir=overlay)

    assert bundle.on_file_error == "abort"
    assert bundle.bogota["week_numbering"] == "iso"
    assert bundle.bogota["city_marker"] == "BOGO"


def test_empty_overlay_file_is_ignored(tmp_path: Path):
    base = _write_configs(tmp_path / "base")
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "sources.yml").write_text("", encoding="utf-8")
    bundle = load_all_configs(base, overlay_config_dir=overlay)
    assert set(bundle.sources) == {"homicidios_2020", "hurto_personas_2020"}


def test_missing_config_file_is_config_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_all_configs(tmp_path)


@pytest.mark.parametrize(
    "replacement",
    [
        ("on_file_error: skip", "on_file_error: retry"),
        ("week_numbering: ordinal", "week_numbering: fiscal"),
        ("homicidios: \"^homicidios_\"", "robos: \"^robos_\""),
        ("workers: 1", "workers: 0"),
    ],
)
def test_invalid_pipeline_values_are_rejected(tmp_path: Path, replacement):
    old, new = replacement
    folder = _write_configs(tmp_path / "cfg", pipeline=PIPELINE_YML.replace(old, new))
    with pytest.raises(ConfigError):
        load_all_configs(folder)


def test_names_and_types_must_line_up(tmp_path: Path):
    sources = SOURCES_YML.replace("[departamento, municipio, barrio, fecha]", "[departamento, municipio, fecha]")
    with pytest.raises(ConfigError):
        load_all_configs(_write_configs(tmp_path / "cfg", sources=sources))


def test_unknown_source_key_rejected_unless_allowed(tmp_path: Path):
    sources = SOURCES_YML.replace("    skip_rows: 9\n", "    skip_rows: 9\n    sheet: 2\n", 1)
    folder = _write_configs(tmp_path / "cfg", sources=sources)
    with pytest.raises(ConfigError):
        load_all_configs(folder)
    bundle = load_all_configs(folder, allow_unknown=True)
    assert bundle.sources["homicidios_2020"]["sheet"] == 2


def test_column_aliases_must_map_names_to_names(tmp_path: Path):
    valid = SOURCES_YML + "    column_aliases:\n      fecha_hecho: fecha\n"
    bundle = load_all_configs(_write_configs(tmp_path / "ok", sources=valid))
    assert bundle.sources["hurto_personas_2020"]["column_aliases"] == {"fecha_hecho": "fecha"}

    invalid = SOURCES_YML + "    column_aliases: [fecha_hecho, fecha]\n"
    with pytest.raises(ConfigError):
        load_all_configs(_write_configs(tmp_path / "bad", sources=invalid))
