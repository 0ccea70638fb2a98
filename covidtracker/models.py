from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

from .config import NATIONWIDE


class Metric(Enum):
    NEGATIVE = "negative"
    POSITIVE = "positive"
    DEATH = "death"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class TimeScale(Enum):
    """Chart time window; ``num_days`` is ``None`` for the full history."""

    MONTH = ("Month", 30)
    THREEMONTH = ("3 Months", 90)
    MAX = ("Max", None)

    def __init__(self, label: str, num_days: Optional[int]) -> None:
        self.label = label
        self.num_days = num_days


@dataclass(frozen=True)
class DailyRecord:
    """One day of statistics for one region (or the nationwide aggregate)."""

    date: dt.date
    region: str
    positive_increase: int = 0
    negative_increase: int = 0
    death_increase: int = 0


# Chronological ascending once ingested.
Dataset = Tuple[DailyRecord, ...]
RegionIndex = Mapping[str, Dataset]


@dataclass(frozen=True)
class ViewSelection:
    """What the user asked to see. Replaced, never mutated."""

    region: str = NATIONWIDE
    metric: Metric = Metric.POSITIVE
    time_scale: TimeScale = TimeScale.MAX

    @property
    def is_nationwide(self) -> bool:
        return self.region == NATIONWIDE


@dataclass(frozen=True)
class DisplayedPoint:
    record: DailyRecord
    metric: Metric
    value: int
    index: int


def display_value(record: DailyRecord, metric: Metric) -> int:
    """Count shown for ``record`` under ``metric``; a plain field lookup."""
    if metric is Metric.POSITIVE:
        return record.positive_increase
    if metric is Metric.NEGATIVE:
        return record.negative_increase
    return record.death_increase


__all__ = [
    "DailyRecord",
    "Dataset",
    "DisplayedPoint",
    "Metric",
    "RegionIndex",
    "TimeScale",
    "ViewSelection",
    "display_value",
]
