from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import pandas as pd
import requests
from pandas.api.types import is_bool_dtype

from .config import DATE_FORMAT, NATIONAL_ENDPOINT, NATIONWIDE, STATES_ENDPOINT
from .covid_client import CovidSource
from .errors import EmptyResponseBody, FetchError, NetworkFailure
from .models import DailyRecord
from .state import DatasetStore

logger = logging.getLogger(__name__)

COUNT_FIELDS = {
    "positiveIncrease": "positive_increase",
    "negativeIncrease": "negative_increase",
    "deathIncrease": "death_increase",
}


def parse_checked_dates(raw: pd.Series) -> pd.Series:
    """Parse ``yyyy-MM-dd'T'HH:mm:ss`` stamps leniently into calendar dates.

    Anything after the seconds (``Z``, offsets) is ignored and an hour of 24
    rolls over to the next day, which is how the upstream feed marks end of day.
    Unparseable values become ``NaT``.
    """
    text = raw.astype(str).str.slice(0, 19)
    rollover = text.str.slice(11, 13) == "24"
    text = text.where(~rollover, text.str.slice(0, 11) + "00" + text.str.slice(13))
    stamps = pd.to_datetime(text, format=DATE_FORMAT, errors="coerce")
    stamps = stamps + pd.to_timedelta(rollover.astype(int), unit="D")
    return stamps.dt.date


def _count_column(df: pd.DataFrame, name: str, endpoint: str) -> pd.Series:
    """Whole-number counts; only a missing or null value reads as 0."""
    if name not in df:
        return pd.Series(0, index=df.index)
    raw = df[name]
    present = raw.notna()
    if is_bool_dtype(raw) or raw[present].map(lambda value: isinstance(value, bool)).any():
        raise EmptyResponseBody(endpoint, f"Payload contains non-numeric {name}.")
    values = pd.to_numeric(raw.where(present), errors="coerce")
    if (values.isna() & present).any():
        raise EmptyResponseBody(endpoint, f"Payload contains non-numeric {name}.")
    if (values[present] % 1 != 0).any():
        raise EmptyResponseBody(endpoint, f"Payload contains fractional {name}.")
    return values.fillna(0).astype(int)


def parse_daily_payload(payload: Any, endpoint: str, by_region: bool = False) -> List[DailyRecord]:
    """Turn a newest-first JSON array into records, keeping the delivered order.

    A payload that cannot be read as a whole is reported as an absent body.
    """
    if not isinstance(payload, list) or not payload:
        raise EmptyResponseBody(endpoint, "Did not receive a valid response body")

    try:
        df_raw = pd.DataFrame(payload)
    except (TypeError, ValueError) as exc:
        raise EmptyResponseBody(endpoint, f"Malformed payload ({exc})") from exc

    if "dateChecked" not in df_raw:
        raise EmptyResponseBody(endpoint, "Payload is missing dateChecked.")
    if by_region and "state" not in df_raw:
        raise EmptyResponseBody(endpoint, "Payload is missing state.")

    df = pd.DataFrame({"date": parse_checked_dates(df_raw["dateChecked"])})
    if df["date"].isna().any():
        raise EmptyResponseBody(endpoint, "Payload contains unparseable dates.")
    if by_region:
        if df_raw["state"].isna().any():
            raise EmptyResponseBody(endpoint, "Payload contains records without a state.")
        df["region"] = df_raw["state"].astype(str)
    else:
        df["region"] = NATIONWIDE
    for source_name, column in COUNT_FIELDS.items():
        df[column] = _count_column(df_raw, source_name, endpoint)

    df = df.drop_duplicates(subset=["region", "date"], keep="first")

    return [
        DailyRecord(
            date=row.date,
            region=row.region,
            positive_increase=int(row.positive_increase),
            negative_increase=int(row.negative_increase),
            death_increase=int(row.death_increase),
        )
        for row in df.itertuples(index=False)
    ]


def _request(getter: Callable[[], Any], endpoint: str) -> Any:
    try:
        return getter()
    except (requests.RequestException, OSError, ValueError) as exc:
        raise NetworkFailure(endpoint, str(exc)) from exc


def fetch_national(source: CovidSource) -> List[DailyRecord]:
    """Fetch the nationwide daily series, newest first as delivered."""
    payload = _request(source.get_national_daily, NATIONAL_ENDPOINT)
    records = parse_daily_payload(payload, NATIONAL_ENDPOINT)
    logger.info("Received %d national records from %r", len(records), source)
    return records


def fetch_by_region(source: CovidSource) -> List[DailyRecord]:
    """Fetch the per-state daily series as one unsegmented list."""
    payload = _request(source.get_states_daily, STATES_ENDPOINT)
    records = parse_daily_payload(payload, STATES_ENDPOINT, by_region=True)
    logger.info("Received %d per-state records from %r", len(records), source)
    return records


async def fetch_national_async(source: CovidSource) -> List[DailyRecord]:
    return await asyncio.to_thread(fetch_national, source)


async def fetch_by_region_async(source: CovidSource) -> List[DailyRecord]:
    return await asyncio.to_thread(fetch_by_region, source)


def _log_fetch_error(exc: FetchError) -> None:
    if isinstance(exc, EmptyResponseBody):
        logger.warning("%s", exc)
    else:
        logger.error("Fetch failed: %s", exc)


@dataclass(frozen=True)
class RefreshResult:
    national: bool
    regions: bool


async def load_national(
    source: CovidSource, store: DatasetStore, on_ingest: Optional[Callable[[str], None]] = None
) -> bool:
    try:
        records = await fetch_national_async(source)
    except FetchError as exc:
        _log_fetch_error(exc)
        return False
    store.ingest_national(records)
    logger.info("Update graph with national data")
    if on_ingest:
        on_ingest("national")
    return True


async def load_by_region(
    source: CovidSource, store: DatasetStore, on_ingest: Optional[Callable[[str], None]] = None
) -> bool:
    try:
        records = await fetch_by_region_async(source)
    except FetchError as exc:
        _log_fetch_error(exc)
        return False
    store.ingest_by_region(records)
    logger.info("Indexed %d regions", len(store.regions))
    if on_ingest:
        on_ingest("regions")
    return True


async def refresh_store(
    source: CovidSource, store: DatasetStore, on_ingest: Optional[Callable[[str], None]] = None
) -> RefreshResult:
    """Issue both fetches concurrently; each one ingests as soon as it lands."""
    national_ok, regions_ok = await asyncio.gather(
        load_national(source, store, on_ingest),
        load_by_region(source, store, on_ingest),
    )
    return RefreshResult(national=national_ok, regions=regions_ok)


__all__ = [
    "RefreshResult",
    "fetch_by_region",
    "fetch_by_region_async",
    "fetch_national",
    "fetch_national_async",
    "load_by_region",
    "load_national",
    "parse_checked_dates",
    "parse_daily_payload",
    "refresh_store",
]
