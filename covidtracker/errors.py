from __future__ import annotations


class CovidTrackerError(Exception):
    """Base class for all dashboard errors."""


class FetchError(CovidTrackerError):
    """A dataset could not be obtained from the remote source."""

    def __init__(self, endpoint: str, message: str) -> None:
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint


class NetworkFailure(FetchError):
    """Transport, HTTP status or decoding error."""


class EmptyResponseBody(FetchError):
    """The request succeeded but carried no usable payload."""


class RegionNotFound(CovidTrackerError, KeyError):
    """The selected region is not (yet) in the region index."""

    def __init__(self, region: str) -> None:
        super().__init__(region)
        self.region = region

    def __str__(self) -> str:
        return f"Region {self.region!r} is not available"


__all__ = [
    "CovidTrackerError",
    "EmptyResponseBody",
    "FetchError",
    "NetworkFailure",
    "RegionNotFound",
]
