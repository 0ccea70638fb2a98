from __future__ import annotations

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .models import DailyRecord, Dataset, RegionIndex, ViewSelection

if TYPE_CHECKING:
    from .view_state import ViewState


@dataclass
class DatasetStore:
    """Latest fetched snapshot. Each slot is published with a single assignment."""

    national: Optional[Dataset] = None
    region_index: Optional[RegionIndex] = None
    national_fetched_at: Optional[float] = None
    regions_fetched_at: Optional[float] = None

    def ingest_national(self, records: Sequence[DailyRecord]) -> Dataset:
        """Store a newest-first national series oldest-first."""
        dataset: Dataset = tuple(reversed(records))
        self.national = dataset
        self.national_fetched_at = time.time()
        return dataset

    def ingest_by_region(self, records: Sequence[DailyRecord]) -> RegionIndex:
        """Group a newest-first per-state series into oldest-first datasets."""
        grouped: Dict[str, List[DailyRecord]] = {}
        for record in reversed(records):
            grouped.setdefault(record.region, []).append(record)
        index: RegionIndex = MappingProxyType({region: tuple(rows) for region, rows in grouped.items()})
        self.region_index = index
        self.regions_fetched_at = time.time()
        return index

    @property
    def has_national(self) -> bool:
        return self.national is not None

    @property
    def has_regions(self) -> bool:
        return self.region_index is not None

    @property
    def regions(self) -> Tuple[str, ...]:
        if self.region_index is None:
            return ()
        return tuple(sorted(self.region_index))


@dataclass
class AppState:
    """Global application state shared across UI callbacks."""

    store: DatasetStore = field(default_factory=DatasetStore)
    selection: Optional[ViewSelection] = None
    view: Optional[ViewState] = None
    scrub_index: Optional[int] = None
    theme: str = "dark"


__all__ = ["AppState", "DatasetStore"]
