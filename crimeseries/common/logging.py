"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from crimeseries.common.constants import JSON_LOG_FIELDS
from crimeseries.common.fs import ensure_dir
from crimeseries.common.ids import utc_timestamp_iso
from crimeseries.common.models import StageReport

_EMIT_LOCK = threading.Lock()


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": utc_timestamp_iso(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for field in JSON_LOG_FIELDS:
            if field not in payload:
                payload[field] = getattr(record, field, None)
        extra_counts = getattr(record, "counts", None)
        if extra_counts:
            payload["counts"] = extra_counts
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_logger(run_id: str, data_dir: Path, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(f"crimeseries.{run_id}")
    logger.setLevel(level.upper())
    logger.handlers.clear()
    logger.propagate = False

    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    logger.addHandler(stream)

    log_path = data_dir / "run_meta" / f"{run_id}.log.jsonl"
    ensure_dir(log_path.parent)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(JsonLineFormatter())
    logger.addHandler(file_handler)

    return logger


def log_event(logger: logging.Logger, message: str, *, level: int = logging.INFO, **event_fields: Any) -> None:
    with _EMIT_LOCK:
        logger.log(level, message, extra=event_fields)


def log_report(logger: logging.Logger, report: StageReport, *, run_id: str | None = None) -> None:
    """Emit one STAGE_REPORT line for ``report``."""
    log_event(
        logger,
        report.describe(),
        run_id=run_id,
        stage=report.stage,
        source=report.source,
        event="STAGE_REPORT",
        status="ok",
        rows_before=report.rows_before,
        rows_after=report.rows_after,
        rows_dropped=report.rows_dropped,
        pct_dropped=report.pct_dropped,
        counts=report.to_dict(),
    )
