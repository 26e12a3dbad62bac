# stationcounts/types.py
from __future__ import annotations
from dataclasses import dataclass


ENDPOINTS = ("start", "end")


def check_endpoint(endpoint: str) -> str:
    if endpoint not in ENDPOINTS:
        raise ValueError(f"endpoint must be one of {ENDPOINTS}, got {endpoint!r}")
    return endpoint


def station_column(endpoint: str) -> str:
    return f"{check_endpoint(endpoint)}_station_name"


@dataclass
class StationCount:
    station_name: str | None
    ride_count: int


@dataclass
class CleanupReport:
    zero_counts: int = 0
    null_names: int = 0
    duplicates: int = 0

    @property
    def total(self) -> int:
        return self.zero_counts + self.null_names + self.duplicates
