from __future__ import annotations

import os
from pathlib import Path
from secrets import token_hex

# Base directories
BASE_DIR = Path(__file__).resolve().parent.parent


def _int_from_env(name: str, default: int) -> int:
    """Best-effort conversion for optional integer environment settings."""
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


# Remote API
API_BASE_URL = os.environ.get("COVID_API_BASE_URL", "https://covidtracking.com/api/v1/")
NATIONAL_ENDPOINT = "us/daily.json"
STATES_ENDPOINT = "states/daily.json"
REQUEST_TIMEOUT = _int_from_env("REQUEST_TIMEOUT", 20)

# Optional directory holding national.json / states.json (offline runs and e2e tests)
_RAW_DATA_DIR = os.environ.get("COVIDTRACKER_DATA_DIR", "")
LOCAL_DATA_DIR = Path(_RAW_DATA_DIR) if _RAW_DATA_DIR else None

_RAW_STORAGE_SECRET = os.environ.get("STORAGE_SECRET")
if _RAW_STORAGE_SECRET:
    STORAGE_SECRET = _RAW_STORAGE_SECRET
    STORAGE_SECRET_FROM_ENV = True
else:
    STORAGE_SECRET = token_hex(32)
    STORAGE_SECRET_FROM_ENV = False

# Payload parsing and display
NATIONWIDE = "All (nationwide)"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
DISPLAY_DATE_FORMAT = "%b %d, %Y"

# Palette
COLOR_POSITIVE = "#EBC765"
COLOR_NEGATIVE = "#32A852"
COLOR_DEATH = "#D94F3D"

__all__ = [
    "BASE_DIR",
    "API_BASE_URL",
    "NATIONAL_ENDPOINT",
    "STATES_ENDPOINT",
    "REQUEST_TIMEOUT",
    "LOCAL_DATA_DIR",
    "STORAGE_SECRET",
    "STORAGE_SECRET_FROM_ENV",
    "NATIONWIDE",
    "DATE_FORMAT",
    "DISPLAY_DATE_FORMAT",
    "COLOR_POSITIVE",
    "COLOR_NEGATIVE",
    "COLOR_DEATH",
]
