"""Stage runners: read the previous stage's CSVs, transform, write outputs."""

from __future__ import annotations

from pathlib import Path

from crimeseries.common.categories import CrimeCategory
from crimeseries.common.config_loader import ConfigBundle
from crimeseries.common.errors import StageError
from crimeseries.common.fs import dataset_path
from crimeseries.ingest.runner import run_ingest_source
from crimeseries.pipeline.aggregate import count_incidents
from crimeseries.pipeline.export import read_dataset, write_dataset
from crimeseries.pipeline.router import build_category_datasets
from crimeseries.pipeline.zonal import run_zonal_pipeline


def _require(path: Path):
    if not path.exists():
        raise StageError(f"Missing CSV input: {path}")
    return read_dataset(path)


def run_ingest(name: str, bundle: ConfigBundle, data_dir: Path, *, on_file_error: str) -> dict:
    result = run_ingest_source(
        name,
        bundle.sources[name],
        data_dir,
        on_file_error=on_file_error,
        workers=bundle.workers,
    )
    result["path"] = write_dataset(result["frame"], bundle.output_dir(data_dir, "historic_dir"), name)
    return result


def run_aggregate(name: str, bundle: ConfigBundle, data_dir: Path) -> dict:
    records = _require(dataset_path(bundle.output_dir(data_dir, "historic_dir"), name))
    counts, report = count_incidents(records, source=name)
    out_path = write_dataset(counts, bundle.output_dir(data_dir, "aggregated_dir"), name)
    return {"source": name, "path": out_path, "reports": [report]}


def run_route(category: CrimeCategory, bundle: ConfigBundle, data_dir: Path) -> dict:
    aggregated_dir = bundle.output_dir(data_dir, "aggregated_dir")
    identifiers = bundle.category_sources.get(category, [])
    datasets = {
        name: read_dataset(dataset_path(aggregated_dir, name))
        for name in identifiers
        if dataset_path(aggregated_dir, name).exists()
    }
    frame, used, report = build_category_datasets(datasets, {category: identifiers})[category]
    out_path = write_dataset(frame, bundle.output_dir(data_dir, "category_dir"), category.value)
    return {
        "source": category.value,
        "path": out_path,
        "used": used,
        "missing": sorted(set(identifiers) - set(used)),
        "reports": [report],
    }


def run_zonal(category: CrimeCategory, bundle: ConfigBundle, data_dir: Path) -> dict:
    counts = _require(dataset_path(bundle.output_dir(data_dir, "category_dir"), category.value))
    series, reports = run_zonal_pipeline(counts, category.value, bundle.bogota)
    out_path = write_dataset(series, bundle.output_dir(data_dir, "zonal_dir"), category.value)
    return {"source": category.value, "path": out_path, "reports": reports}
