from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import urljoin

import requests

from .config import API_BASE_URL, NATIONAL_ENDPOINT, REQUEST_TIMEOUT, STATES_ENDPOINT


class CovidSource(Protocol):
    def get_national_daily(self) -> Any: ...

    def get_states_daily(self) -> Any: ...


class CovidTrackingClient:
    """Lightweight helper for the COVID Tracking Project API."""

    def __init__(self, base_url: str = API_BASE_URL, timeout: int = REQUEST_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _build_url(self, path: str) -> str:
        return urljoin(f"{self.base_url}/", path.lstrip("/"))

    def _get(self, path: str) -> Any:
        response = requests.get(self._build_url(path), timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def get_national_daily(self) -> Any:
        return self._get(NATIONAL_ENDPOINT)

    def get_states_daily(self) -> Any:
        return self._get(STATES_ENDPOINT)

    def __repr__(self) -> str:
        return f"CovidTrackingClient({self.base_url!r})"


class LocalCovidSource:
    """Serves previously downloaded payloads from ``national.json`` / ``states.json``."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def _load(self, filename: str) -> Any:
        with open(self.data_dir / filename, encoding="utf-8") as fh:
            return json.load(fh)

    def get_national_daily(self) -> Any:
        return self._load("national.json")

    def get_states_daily(self) -> Any:
        return self._load("states.json")

    def __repr__(self) -> str:
        return f"LocalCovidSource({str(self.data_dir)!r})"


__all__ = ["CovidSource", "CovidTrackingClient", "LocalCovidSource"]
