"""Cross-source consolidation of aggregated counts by crime category."""

from __future__ import annotations

from typing import Mapping, Sequence

import pandas as pd

from crimeseries.common.categories import CrimeCategory
from crimeseries.common.models import StageReport
from crimeseries.pipeline.aggregate import AGGREGATED_COLUMNS, empty_counts


def concat_ordered(datasets: Mapping[str, pd.DataFrame], order: Sequence[str]) -> pd.DataFrame:
    """Concatenate ``datasets`` in exactly the order given by ``order``.

    Identifiers in ``order`` without a dataset are skipped.
    """
    frames = [datasets[name] for name in order if name in datasets]
    frames = [frame for frame in frames if not frame.empty]
    if not frames:
        return empty_counts()
    return pd.concat(frames, ignore_index=True, sort=False)


def build_category_datasets(
    datasets: Mapping[str, pd.DataFrame],
    category_sources: Mapping[CrimeCategory, Sequence[str]],
) -> dict[CrimeCategory, tuple[pd.DataFrame, list[str], StageReport]]:
    """Combine, per category, the aggregated datasets of all its sources.

    Returns the combined frame, the identifiers actually used (sorted) and a
    report whose ``rows_before`` is the sum of the parts. A category whose
    sources are all absent yields an empty frame rather than an error.
    """
    out: dict[CrimeCategory, tuple[pd.DataFrame, list[str], StageReport]] = {}
    for category in sorted(category_sources, key=lambda c: c.value):
        used = sorted(name for name in category_sources[category] if name in datasets)
        combined = concat_ordered(datasets, used)
        combined = combined.reindex(columns=[*AGGREGATED_COLUMNS, *_extra_columns(combined)])
        report = StageReport(
            stage="route",
            source=category.value,
            rows_before=sum(len(datasets[name]) for name in used),
            rows_after=len(combined),
        )
        out[category] = (combined, used, report)
    return out


def _extra_columns(frame: pd.DataFrame) -> list[str]:
    return [column for column in frame.columns if column not in AGGREGATED_COLUMNS]
