import datetime as dt
import logging
from typing import Any, List, Optional

import pandas as pd
import pytest
import requests

from covidtracker.config import NATIONAL_ENDPOINT, NATIONWIDE, STATES_ENDPOINT
from covidtracker.covid_client import LocalCovidSource
from covidtracker.data_services import (
    fetch_by_region,
    fetch_national,
    parse_checked_dates,
    parse_daily_payload,
    refresh_store,
)
from covidtracker.errors import EmptyResponseBody, NetworkFailure
from covidtracker.state import DatasetStore
from covidtracker.view_state import compute_view


def _entry(day: int, state: Optional[str] = None, **counts: Any) -> dict:
    entry = {
        "date": 20210300 + day,
        "dateChecked": f"2021-03-{day:02d}T12:00:00Z",
        "positiveIncrease": counts.get("positive", day * 10),
        "negativeIncrease": counts.get("negative", day * 100),
        "deathIncrease": counts.get("death", day),
        "hospitalizedIncrease": 5,
    }
    if state is not None:
        entry["state"] = state
    return entry


class StubSource:
    def __init__(self, national: Any = None, states: Any = None, national_error=None, states_error=None) -> None:
        self.national = national
        self.states = states
        self.national_error = national_error
        self.states_error = states_error

    def get_national_daily(self) -> Any:
        if self.national_error:
            raise self.national_error
        return self.national

    def get_states_daily(self) -> Any:
        if self.states_error:
            raise self.states_error
        return self.states


def test_checked_dates_are_parsed_leniently() -> None:
    raw = pd.Series(["2021-03-07T12:30:00Z", "2021-03-07T24:00:00Z", "2020-12-31T24:00:00", "2021-03-07"])
    parsed = parse_checked_dates(raw)

    assert parsed.iloc[0] == dt.date(2021, 3, 7)
    assert parsed.iloc[1] == dt.date(2021, 3, 8)
    assert parsed.iloc[2] == dt.date(2021, 1, 1)
    assert pd.isna(parsed.iloc[3])


def test_national_payload_keeps_delivered_order() -> None:
    records = parse_daily_payload([_entry(3), _entry(2), _entry(1)], NATIONAL_ENDPOINT)

    assert [record.date.day for record in records] == [3, 2, 1]
    assert {record.region for record in records} == {NATIONWIDE}
    assert records[0].positive_increase == 30
    assert records[0].negative_increase == 300
    assert records[0].death_increase == 3


def test_missing_counts_read_as_zero() -> None:
    entry = _entry(1)
    entry["deathIncrease"] = None
    del entry["negativeIncrease"]

    (record,) = parse_daily_payload([entry], NATIONAL_ENDPOINT)

    assert record.death_increase == 0
    assert record.negative_increase == 0
    assert isinstance(record.positive_increase, int)


def test_negative_corrections_are_kept() -> None:
    (record,) = parse_daily_payload([_entry(1, positive=-12)], NATIONAL_ENDPOINT)
    assert record.positive_increase == -12


def test_duplicate_region_dates_are_dropped() -> None:
    payload = [_entry(2, "NY"), _entry(2, "NY", positive=999), _entry(2, "CA")]
    records = parse_daily_payload(payload, STATES_ENDPOINT, by_region=True)

    assert len(records) == 2
    assert records[0].positive_increase == 20


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        [],
        [{"positiveIncrease": 1}],
        [{"dateChecked": "not a date"}],
        [{"dateChecked": None}],
        [{"dateChecked": "2021-03-07T12:00:00Z", "positiveIncrease": "abc"}],
        [{"dateChecked": "2021-03-07T12:00:00Z", "positiveIncrease": {"x": 1}}],
        [{"dateChecked": "2021-03-07T12:00:00Z", "negativeIncrease": [1]}],
        [{"dateChecked": "2021-03-07T12:00:00Z", "deathIncrease": 1.7}],
        [{"dateChecked": "2021-03-07T12:00:00Z", "deathIncrease": True}],
        [{"dateChecked": "2021-03-08T12:00:00Z", "positiveIncrease": 4}, {"dateChecked": "2021-03-07T12:00:00Z", "positiveIncrease": "n/a"}],
    ],
)
def test_malformed_payload_is_an_empty_body(payload: Any) -> None:
    with pytest.raises(EmptyResponseBody):
        parse_daily_payload(payload, NATIONAL_ENDPOINT)


def test_region_payload_requires_state() -> None:
    with pytest.raises(EmptyResponseBody):
        parse_daily_payload([_entry(1)], STATES_ENDPOINT, by_region=True)
    with pytest.raises(EmptyResponseBody):
        parse_daily_payload([_entry(1, "NY"), {**_entry(1), "state": None}], STATES_ENDPOINT, by_region=True)


def test_transport_errors_become_network_failures() -> None:
    source = StubSource(national_error=requests.ConnectionError("boom"), states_error=requests.Timeout("slow"))

    with pytest.raises(NetworkFailure) as excinfo:
        fetch_national(source)
    assert excinfo.value.endpoint == NATIONAL_ENDPOINT
    with pytest.raises(NetworkFailure):
        fetch_by_region(source)


def test_local_source_reads_fixture_files(data_dir) -> None:
    source = LocalCovidSource(data_dir)

    national = fetch_national(source)
    states = fetch_by_region(source)

    assert len(national) == 10
    assert national[0].date == dt.date(2021, 3, 11)
    assert national[0].positive_increase == 50000
    assert {record.region for record in states} == {"NY", "CA", "AK"}


def test_local_source_missing_directory(tmp_path) -> None:
    with pytest.raises(NetworkFailure):
        fetch_national(LocalCovidSource(tmp_path / "missing"))


@pytest.mark.asyncio
async def test_refresh_ingests_both_datasets() -> None:
    source = StubSource(
        national=[_entry(day) for day in range(10, 0, -1)],
        states=[_entry(day, state) for day in range(4, 0, -1) for state in ("NY", "XX")],
    )
    store = DatasetStore()
    ingested: List[str] = []

    result = await refresh_store(source, store, on_ingest=ingested.append)

    assert result.national and result.regions
    assert sorted(ingested) == ["national", "regions"]
    assert [record.date.day for record in store.national] == list(range(1, 11))
    assert store.regions == ("NY", "XX")
    view = compute_view(None, store)
    assert view.displayed.record.date == dt.date(2021, 3, 10)


@pytest.mark.asyncio
async def test_national_failure_does_not_block_regions(caplog) -> None:
    source = StubSource(
        national_error=requests.ConnectionError("offline"),
        states=[_entry(1, "NY"), _entry(1, "XX")],
    )
    store = DatasetStore()

    with caplog.at_level(logging.INFO, logger="covidtracker.data_services"):
        result = await refresh_store(source, store)

    assert not result.national
    assert result.regions
    assert store.national is None
    assert store.regions == ("NY", "XX")
    assert any(record.levelno == logging.ERROR for record in caplog.records)


@pytest.mark.asyncio
async def test_empty_body_leaves_slot_unset(caplog) -> None:
    source = StubSource(national=None, states=None)
    store = DatasetStore()

    with caplog.at_level(logging.WARNING, logger="covidtracker.data_services"):
        result = await refresh_store(source, store)

    assert not result.national and not result.regions
    assert not store.has_national and not store.has_regions
    assert "Did not receive a valid response body" in caplog.text


@pytest.mark.asyncio
async def test_failed_refetch_keeps_previous_snapshot() -> None:
    store = DatasetStore()
    await refresh_store(StubSource(national=[_entry(2), _entry(1)], states=[_entry(1, "NY")]), store)

    await refresh_store(StubSource(national_error=requests.ConnectionError("x"), states=None), store)

    assert len(store.national) == 2
    assert store.regions == ("NY",)


def test_whole_number_floats_are_accepted() -> None:
    (record,) = parse_daily_payload([_entry(1, positive=12.0)], NATIONAL_ENDPOINT)
    assert record.positive_increase == 12


@pytest.mark.asyncio
async def test_malformed_counts_are_not_ingested(caplog) -> None:
    source = StubSource(national=[_entry(2), _entry(1, positive=[1])], states=[_entry(1, "NY")])
    store = DatasetStore()

    with caplog.at_level(logging.WARNING, logger="covidtracker.data_services"):
        result = await refresh_store(source, store)

    assert not result.national
    assert result.regions
    assert store.national is None
    assert "positiveIncrease" in caplog.text
