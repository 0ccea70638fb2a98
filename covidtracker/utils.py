import datetime as dt

from .config import DISPLAY_DATE_FORMAT


def format_count(value: int) -> str:
    """Group thousands the way the metric label shows them, e.g. ``12,345``."""
    return f"{value:,}"


def format_date(day: dt.date) -> str:
    """Render a record date as ``Mar 07, 2021``."""
    return day.strftime(DISPLAY_DATE_FORMAT)
