"""Run report aggregation."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path

from crimeseries.common.fs import write_json
from crimeseries.common.models import StageReport


def summarize_reports(reports: list[StageReport]) -> dict[str, dict]:
    """Totals per stage; only ``filter`` reports contribute to ``rows_lost``."""
    totals: dict[str, dict] = defaultdict(lambda: {"reports": 0, "rows_before": 0, "rows_after": 0, "rows_lost": 0})
    for report in reports:
        entry = totals[report.stage]
        entry["reports"] += 1
        entry["rows_before"] += report.rows_before
        entry["rows_after"] += report.rows_after
        if report.kind == "filter":
            entry["rows_lost"] += report.rows_dropped
    return {stage: dict(values) for stage, values in sorted(totals.items())}


def write_run_summary(
    data_dir: Path,
    *,
    run_id: str,
    stages: list[str],
    reports: list[StageReport],
    warnings: list[dict],
    errors: list[dict],
) -> Path:
    status = "success"
    if errors:
        status = "error"
    elif warnings:
        status = "partial"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "status": status,
        "stages": stages,
        "totals": summarize_reports(reports),
        "warning_count": len(warnings),
        "error_count": len(errors),
        "warnings": warnings,
        "errors": errors,
        "reports": [report.to_dict() for report in reports],
    }
    write_json(summary_path, payload)
    return summary_path
