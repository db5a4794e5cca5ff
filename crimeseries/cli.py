"""CLI entrypoint for the Bogotá crime time-series pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from crimeseries.common.config_loader import ConfigBundle, load_all_configs
from crimeseries.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, STAGES
from crimeseries.common.errors import ConfigError, PipelineError
from crimeseries.common.ids import generate_run_id
from crimeseries.common.logging import build_logger, log_event, log_report
from crimeseries.pipeline.reports import write_run_summary
from crimeseries.pipeline.stages import run_aggregate, run_ingest, run_route, run_zonal


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="crimeseries", description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--source", default="all")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def stage_units(stage: str, bundle: ConfigBundle, source: str) -> list:
    if stage in ("ingest", "aggregate"):
        if source == "all":
            return sorted(bundle.sources)
        if source not in bundle.sources:
            raise ConfigError(f"Unknown source: {source}")
        return [source]
    return sorted(bundle.category_sources, key=lambda category: category.value)


def execute_stage(stage: str, unit, bundle: ConfigBundle, data_dir: Path, on_file_error: str) -> dict:
    if stage == "ingest":
        return run_ingest(unit, bundle, data_dir, on_file_error=on_file_error)
    if stage == "aggregate":
        return run_aggregate(unit, bundle, data_dir)
    if stage == "route":
        return run_route(unit, bundle, data_dir)
    if stage == "zonal":
        return run_zonal(unit, bundle, data_dir)
    raise ConfigError(f"Unknown stage: {stage}")


def _collect_warnings(stage: str, result: dict) -> list[dict]:
    warnings = []
    for skipped in result.get("skipped", []):
        warnings.append({"stage": stage, "source": result["source"], "event": "FILE_SKIPPED", **skipped})
    if stage == "route" and not result.get("used"):
        warnings.append(
            {
                "stage": stage,
                "source": result["source"],
                "event": "CATEGORY_EMPTY",
                "error": "no aggregated dataset matched this category",
            }
        )
    return warnings


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
    on_file_error = "abort" if args.strict else bundle.on_file_error
    abort_on_failure = on_file_error == "abort"
    stages = list(STAGES) if args.command == "all" else [args.command]

    reports = []
    warnings: list[dict] = []
    errors: list[dict] = []
    exit_code = EXIT_SUCCESS

    for stage in stages:
        log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
        for unit in stage_units(stage, bundle, args.source):
            name = getattr(unit, "value", unit)
            try:
                result = execute_stage(stage, unit, bundle, data_dir, on_file_error)
            except PipelineError as exc:
                errors.append({"stage": stage, "source": name, "error_code": exc.error_code, "error": str(exc)})
                log_event(
                    logger,
                    f"stage failed for {name}: {exc}",
                    level=logging.ERROR,
                    run_id=run_id,
                    stage=stage,
                    source=name,
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                if abort_on_failure:
                    exit_code = EXIT_HARD_FAIL
                    break
                continue

            for warning in _collect_warnings(stage, result):
                warnings.append(warning)
                log_event(
                    logger,
                    f"{warning['event'].lower().replace('_', ' ')}: {warning.get('file', name)}",
                    level=logging.WARNING,
                    run_id=run_id,
                    stage=stage,
                    source=name,
                    event=warning["event"],
                    status="warn",
                    error_code=warning.get("error_code"),
                )
            for report in result["reports"]:
                reports.append(report)
                log_report(logger, report, run_id=run_id)

        if exit_code == EXIT_HARD_FAIL:
            break
        log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")

    write_run_summary(
        data_dir,
        run_id=run_id,
        stages=stages,
        reports=reports,
        warnings=warnings,
        errors=errors,
    )
    if exit_code == EXIT_HARD_FAIL:
        return exit_code
    if errors:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError as exc:
        print(f"{exc.error_code}: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
