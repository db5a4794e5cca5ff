"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from crimeseries.common.categories import compile_patterns
from crimeseries.common.constants import COLUMN_TYPES, FILE_ERROR_POLICIES, WEEK_NUMBERING
from crimeseries.common.errors import ConfigError


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"Expected a mapping for {ctx}")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_choice(value, choices: tuple[str, ...], ctx: str) -> None:
    if value not in choices:
        raise ConfigError(f"{ctx} must be one of {', '.join(choices)}; got {value!r}")


def validate_source_config(name: str, cfg: dict, *, allow_unknown: bool = False) -> dict:
    ctx = f"sources.{name}"
    required = {"files", "skip_rows", "column_range", "column_types"}
    _assert_required_keys(cfg, required, ctx)
    _assert_no_unknown_keys(cfg, required | {"column_names", "column_aliases"}, ctx, allow_unknown)

    if not isinstance(cfg["files"], list) or not cfg["files"]:
        raise ConfigError(f"{ctx}.files must be a non-empty list")
    if not isinstance(cfg["skip_rows"], int) or cfg["skip_rows"] < 0:
        raise ConfigError(f"{ctx}.skip_rows must be a non-negative integer")

    types = cfg["column_types"]
    if not isinstance(types, list) or not types:
        raise ConfigError(f"{ctx}.column_types must be a non-empty list")
    for idx, column_type in enumerate(types):
        _assert_choice(column_type, COLUMN_TYPES, f"{ctx}.column_types[{idx}]")

    names = cfg.get("column_names")
    if names is not None:
        if len(names) != len(types):
            raise ConfigError(
                f"{ctx}: {len(names)} column_names declared for {len(types)} column_types"
            )
        dupes = {n for n in names if names.count(n) > 1}
        if dupes:
            raise ConfigError(f"Duplicate column names in {ctx}: {', '.join(sorted(dupes))}")

    aliases = cfg.get("column_aliases")
    if aliases is not None:
        if not isinstance(aliases, dict) or not all(
            isinstance(key, str) and isinstance(value, str) for key, value in aliases.items()
        ):
            raise ConfigError(f"{ctx}.column_aliases must map header names to column names")

    return cfg


def validate_sources_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_required_keys(cfg, {"sources"}, "sources config")
    sources = cfg["sources"]
    if not isinstance(sources, dict) or not sources:
        raise ConfigError("sources must be a non-empty mapping")
    for name, source_cfg in sources.items():
        validate_source_config(name, source_cfg, allow_unknown=allow_unknown)
    return cfg


def validate_pipeline_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"categories", "bogota", "ingest", "output"}
    _assert_required_keys(cfg, top_required, "pipeline config")
    _assert_no_unknown_keys(cfg, top_required, "pipeline config", allow_unknown)

    if not isinstance(cfg["categories"], dict) or not cfg["categories"]:
        raise ConfigError("categories must be a non-empty mapping")
    compile_patterns(cfg["categories"])

    _assert_required_keys(
        cfg["bogota"],
        {"city_marker", "separator", "malformed_marker", "week_numbering"},
        "bogota",
    )
    _assert_choice(cfg["bogota"]["week_numbering"], WEEK_NUMBERING, "bogota.week_numbering")

    _assert_required_keys(cfg["ingest"], {"on_file_error", "workers"}, "ingest")
    _assert_choice(cfg["ingest"]["on_file_error"], FILE_ERROR_POLICIES, "ingest.on_file_error")
    if not isinstance(cfg["ingest"]["workers"], int) or cfg["ingest"]["workers"] < 1:
        raise ConfigError("ingest.workers must be a positive integer")

    _assert_required_keys(
        cfg["output"],
        {"historic_dir", "aggregated_dir", "category_dir", "zonal_dir"},
        "output",
    )
    return cfg
