"""Derive what the dashboard shows from the selection and the fetched data.

Everything here is a pure function of ``(ViewSelection, DatasetStore)``;
ingest events and user interaction both go through :func:`compute_view`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .chart_adapter import ChartAdapter
from .config import NATIONWIDE
from .errors import RegionNotFound
from .models import Dataset, DisplayedPoint, ViewSelection, display_value
from .state import DatasetStore


@dataclass(frozen=True)
class ViewState:
    selection: ViewSelection
    records: Dataset
    adapter: ChartAdapter
    displayed: Optional[DisplayedPoint]
    regions: Tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.records


def resolve_selection(selection: Optional[ViewSelection]) -> ViewSelection:
    """Fall back to nationwide / positive / max when nothing was chosen yet."""
    return selection if selection is not None else ViewSelection()


def active_dataset(selection: ViewSelection, store: DatasetStore) -> Dataset:
    if selection.is_nationwide:
        return store.national or ()
    index = store.region_index
    if index is None or selection.region not in index:
        raise RegionNotFound(selection.region)
    return index[selection.region]


def windowed_slice(dataset: Dataset, num_days: Optional[int]) -> Dataset:
    """Trailing ``num_days`` records; the whole dataset when unbounded."""
    if num_days is None or num_days <= 0:
        return dataset
    return dataset[-num_days:]


def region_options(store: DatasetStore) -> Tuple[str, ...]:
    if not store.has_regions:
        return ()
    return (NATIONWIDE,) + store.regions


def _point(adapter: ChartAdapter, index: int) -> DisplayedPoint:
    record = adapter.record_at(index)
    return DisplayedPoint(record=record, metric=adapter.metric, value=adapter.plot_value(index), index=index)


def compute_view(selection: Optional[ViewSelection], store: DatasetStore) -> ViewState:
    """Recompute the displayed slice; the displayed point is always the latest day."""
    selection = resolve_selection(selection)
    records = windowed_slice(active_dataset(selection, store), selection.time_scale.num_days)
    adapter = ChartAdapter(records, selection.metric)
    displayed = _point(adapter, len(adapter) - 1) if records else None
    return ViewState(
        selection=selection,
        records=records,
        adapter=adapter,
        displayed=displayed,
        regions=region_options(store),
    )


def scrub(view: ViewState, index: int) -> Optional[DisplayedPoint]:
    """Point under the pointer, clamped to the slice."""
    if view.is_empty:
        return None
    index = max(0, min(index, len(view.adapter) - 1))
    return _point(view.adapter, index)


__all__ = [
    "ViewState",
    "active_dataset",
    "compute_view",
    "display_value",
    "region_options",
    "resolve_selection",
    "scrub",
    "windowed_slice",
]
