"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

REPORT_KINDS = ("filter", "reduction", "densify")


def pct_of(part: int, whole: int) -> float:
    """Percentage of ``whole`` represented by ``part``; 0.0 when ``whole`` is 0."""
    if whole == 0:
        return 0.0
    return round(100 * part / whole, 2)


@dataclass(frozen=True)
class StageReport:
    """Row accounting for one stage applied to one source or category.

    ``kind`` tells how to read the difference between ``rows_before`` and
    ``rows_after``: ``filter`` is real data loss, ``reduction`` is rows collapsing
    into groups, ``densify`` is rows added by zero-filling.

    ``dropped`` overrides the loss count when ``rows_before`` is a base measured
    at a different granularity than the rows actually removed.
    """

    stage: str
    source: str
    rows_before: int
    rows_after: int
    kind: str = "filter"
    dropped: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in REPORT_KINDS:
            raise ValueError(f"Unknown report kind: {self.kind}")

    @property
    def rows_dropped(self) -> int:
        if self.dropped is not None:
            return self.dropped
        return self.rows_before - self.rows_after

    @property
    def pct_dropped(self) -> float:
        return pct_of(self.rows_dropped, self.rows_before)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "stage": self.stage,
            "source": self.source,
            "kind": self.kind,
            "rows_before": self.rows_before,
            "rows_after": self.rows_after,
        }
        if self.kind == "reduction":
            out["rows_reduced"] = self.rows_dropped
            out["pct_reduced"] = self.pct_dropped
        elif self.kind == "densify":
            out["rows_filled"] = -self.rows_dropped
        else:
            out["rows_dropped"] = self.rows_dropped
            out["pct_dropped"] = self.pct_dropped
        return out

    def describe(self) -> str:
        if self.kind == "reduction":
            return (
                f"{self.source}: grouped {self.rows_before} rows into {self.rows_after} "
                f"({self.pct_dropped}% reduction)"
            )
        if self.kind == "densify":
            return f"{self.source}: densified {self.rows_before} rows to {self.rows_after}"
        return (
            f"{self.source}: dropped {self.rows_dropped} of {self.rows_before} rows "
            f"({self.pct_dropped}%) at {self.stage}"
        )
