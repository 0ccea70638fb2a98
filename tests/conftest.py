from __future__ import annotations

import datetime as dt
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Iterator, List

import pytest
import requests

from covidtracker.config import NATIONWIDE
from covidtracker.models import DailyRecord


RUN_E2E = os.environ.get("RUN_E2E", "0").lower() in {"1", "true", "yes"}
DATA_DIR = Path(__file__).parent / "data"


def pytest_configure(config):
    config.addinivalue_line("markers", "e2e: mark as end-to-end test")


def make_record(day: int, region: str = NATIONWIDE, positive: int = 0, negative: int = 0, death: int = 0) -> DailyRecord:
    return DailyRecord(
        date=dt.date(2021, 1, 1) + dt.timedelta(days=day - 1),
        region=region,
        positive_increase=positive,
        negative_increase=negative,
        death_increase=death,
    )


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def national_newest_first() -> List[DailyRecord]:
    """day10 .. day1, the order the API delivers."""
    return [make_record(day, positive=day * 10, negative=day * 100, death=day) for day in range(10, 0, -1)]


@pytest.fixture
def states_newest_first() -> List[DailyRecord]:
    records = []
    for day in range(5, 0, -1):
        for region in ("NY", "CA", "XX"):
            records.append(make_record(day, region=region, positive=day, negative=day * 2, death=day * 3))
    return records


def _wait_for_health(url: str, timeout: float = 25.0) -> None:
    start = time.time()
    while time.time() - start < timeout:
        try:
            response = requests.get(url, timeout=1.0)
            if response.status_code == 200:
                return
        except requests.RequestException:
            time.sleep(0.5)
    raise RuntimeError(f"Timed out waiting for NiceGUI health endpoint at {url}")


@pytest.fixture(scope="session")
def nicegui_server() -> Iterator[str]:
    if not RUN_E2E:
        pytest.skip("Set RUN_E2E=1 to run Selenium e2e tests")

    port = int(os.environ.get("E2E_APP_PORT", "8090"))

    env = os.environ.copy()
    env.setdefault("PORT", str(port))
    env.setdefault("COVIDTRACKER_DATA_DIR", str(DATA_DIR))
    env.setdefault("STORAGE_SECRET", "test-secret")
    env.setdefault("NICEGUI_RELOAD", "0")

    cmd = [sys.executable, "nicegui_app.py"]
    proc = subprocess.Popen(cmd, env=env, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    try:
        _wait_for_health(f"http://localhost:{port}/health")
        yield f"http://localhost:{port}"
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=10)
        except subprocess.TimeoutExpired:
            proc.kill()
