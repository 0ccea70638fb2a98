from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from .models import DailyRecord, Dataset, Metric, display_value


class ChartAdapter:
    """Random-access view of a windowed slice for the chart surface.

    The chart maps a pointer position to an index and asks for the record
    behind it, so lookups are by position rather than by date.
    """

    def __init__(self, records: Sequence[DailyRecord], metric: Metric = Metric.POSITIVE) -> None:
        self._records: Dataset = tuple(records)
        self.metric = metric

    def __len__(self) -> int:
        return len(self._records)

    def record_at(self, index: int) -> DailyRecord:
        return self._records[index]

    def plot_value(self, index: int) -> int:
        return display_value(self._records[index], self.metric)

    def values(self) -> List[int]:
        return [display_value(record, self.metric) for record in self._records]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "date": pd.to_datetime([record.date for record in self._records]),
                "value": self.values(),
            }
        )


__all__ = ["ChartAdapter"]
