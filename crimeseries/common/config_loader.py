"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from crimeseries.common.categories import CrimeCategory, resolve_category_sources
from crimeseries.common.errors import ConfigError
from crimeseries.common.fs import read_yaml
from crimeseries.common.schema import validate_pipeline_config, validate_sources_config


@dataclass(frozen=True)
class ConfigBundle:
    sources: dict[str, dict]
    pipeline: dict
    category_sources: dict[CrimeCategory, list[str]]

    @property
    def on_file_error(self) -> str:
        return self.pipeline["ingest"]["on_file_error"]

    @property
    def workers(self) -> int:
        return int(self.pipeline["ingest"]["workers"])

    @property
    def bogota(self) -> dict:
        return self.pipeline["bogota"]

    def output_dir(self, data_dir: Path, key: str) -> Path:
        return data_dir / self.pipeline["output"][key]


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    def _overlay(name: str) -> Path | None:
        return (overlay_config_dir / name) if overlay_config_dir is not None else None

    sources_cfg = validate_sources_config(
        _load_yaml_with_overlay(config_dir / "sources.yml", _overlay("sources.yml")),
        allow_unknown=allow_unknown,
    )
    pipeline_cfg = validate_pipeline_config(
        _load_yaml_with_overlay(config_dir / "pipeline.yml", _overlay("pipeline.yml")),
        allow_unknown=allow_unknown,
    )

    sources = sources_cfg["sources"]
    category_sources = resolve_category_sources(sources, pipeline_cfg["categories"])
    return ConfigBundle(sources=sources, pipeline=pipeline_cfg, category_sources=category_sources)
