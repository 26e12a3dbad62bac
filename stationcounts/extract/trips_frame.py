# stationcounts/extract/trips_frame.py
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from colorama import Fore, Style

from stationcounts.types import station_column


TRIP_COLUMNS = ["start_station_name", "end_station_name", "duration", "start_date"]


def load_trips_csv(trips_csv: str | Path) -> pd.DataFrame:
    """
    Loads a cycle_hire export with at least the columns:

      start_station_name, end_station_name, duration (seconds), start_date

    Returns a DataFrame where:
      - duration is numeric (unparseable -> NaN)
      - start_date is datetime (unparseable -> NaT)
      - blank station names are NaN
    """
    trips_csv = Path(trips_csv)
    df = pd.read_csv(trips_csv)
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in TRIP_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Trips CSV missing columns: {', '.join(missing)}")

    return prepare_trips(df)


def prepare_trips(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in ("start_station_name", "end_station_name"):
        df[col] = df[col].astype("string").str.strip().replace("", pd.NA)
    df["duration"] = pd.to_numeric(df["duration"], errors="coerce")
    df["start_date"] = pd.to_datetime(df["start_date"], errors="coerce", utc=True)
    return df


class TripFrameSource:
    """
    Same catalog as BigQuerySource, computed with pandas over an in-memory trips frame.
    """

    def __init__(self, trips: pd.DataFrame):
        missing = [c for c in TRIP_COLUMNS if c not in trips.columns]
        if missing:
            raise ValueError(f"trips frame missing columns: {', '.join(missing)}")
        self.trips = trips

    @classmethod
    def from_csv(cls, trips_csv: str | Path) -> "TripFrameSource":
        print(f"{Fore.CYAN}Loading trips from {trips_csv}…{Style.RESET_ALL}")
        return cls(load_trips_csv(trips_csv))

    # ----------------------------
    # core aggregation
    # ----------------------------
    def station_counts(self, endpoint: str, order: str = "count_desc") -> pd.DataFrame:
        col = station_column(endpoint)

        # groupby drops NaN keys, matching the explicit IS NOT NULL filter in SQL
        out = self.trips.groupby(col).size().reset_index(name="num")
        out[col] = out[col].astype(str)
        out["num"] = out["num"].astype("int64")

        if order == "count_desc":
            out = out.sort_values(["num", col], ascending=[False, True])
        elif order == "count_asc":
            out = out.sort_values(["num", col], ascending=[True, True])
        elif order == "name":
            out = out.sort_values(col)
        else:
            raise ValueError(f"unknown order {order!r}")

        return out.reset_index(drop=True)

    # ----------------------------
    # analysis catalog
    # ----------------------------
    def end_station_names(self) -> pd.DataFrame:
        return self.trips[["end_station_name"]].reset_index(drop=True)

    def long_rides(self, min_duration: int = 1200) -> pd.DataFrame:
        mask = self.trips["duration"] >= int(min_duration)
        return self.trips[mask].reset_index(drop=True)

    def distinct_stations(self, endpoint: str) -> pd.DataFrame:
        col = station_column(endpoint)
        names = sorted(self.trips[col].dropna().astype(str).unique())
        return pd.DataFrame({col: names})

    def stations_over(self, threshold: int = 100_000) -> pd.DataFrame:
        counts = self.station_counts("start").rename(columns={"num": "num_rides"})
        counts = counts[counts["num_rides"] > int(threshold)]
        return counts.reset_index(drop=True)

    def duration_by_station(self, min_rides: int = 50_000) -> pd.DataFrame:
        grouped = (
            self.trips.groupby("start_station_name")
            .agg(
                total_rides=("duration", "size"),
                avg_duration_seconds=("duration", "mean"),
            )
            .reset_index()
        )
        grouped["start_station_name"] = grouped["start_station_name"].astype(str)
        grouped = grouped[grouped["total_rides"] > int(min_rides)].copy()
        grouped["avg_duration_minutes"] = (grouped["avg_duration_seconds"] / 60).round(2)
        grouped = grouped.sort_values("avg_duration_seconds", ascending=False)
        return grouped.reset_index(drop=True)

    def rides_by_hour(self) -> pd.DataFrame:
        """
        Trips without a start_date form their own null-hour group, listed first
        as BigQuery sorts NULLs first in ascending order.
        """
        hours = self.trips["start_date"].dt.hour.astype("Int64").rename("hour_of_day")
        out = hours.value_counts(dropna=False).rename("num_rides").reset_index()
        out = out.sort_values("hour_of_day", na_position="first")
        out["num_rides"] = out["num_rides"].astype(int)
        return out.reset_index(drop=True)

    def weekday_vs_weekend(self) -> pd.DataFrame:
        trips = self.trips
        # Monday=0 .. Sunday=6; NaT is not >= 5, so it counts as Weekday
        day_type = np.where(trips["start_date"].dt.dayofweek >= 5, "Weekend", "Weekday")
        out = (
            trips.assign(day_type=day_type)
            .groupby("day_type")
            .agg(num_rides=("duration", "size"), avg_duration=("duration", "mean"))
            .reset_index()
            .sort_values("day_type")
        )
        return out.reset_index(drop=True)

    def null_counts(self) -> pd.DataFrame:
        t = self.trips
        return pd.DataFrame(
            [
                {
                    "total_rows": int(len(t)),
                    "non_null_start_stations": int(t["start_station_name"].count()),
                    "non_null_end_stations": int(t["end_station_name"].count()),
                    "non_null_durations": int(t["duration"].count()),
                }
            ]
        )

    def duration_stats(self) -> pd.DataFrame:
        d = self.trips["duration"]
        return pd.DataFrame(
            [
                {
                    "min_duration_seconds": d.min(),
                    "max_duration_seconds": d.max(),
                    "avg_duration_seconds": d.mean(),
                    # sample stddev, same as BigQuery STDDEV
                    "stddev_duration": d.std(ddof=1),
                }
            ]
        )

    def duration_anomalies(self, max_duration: int = 86_400, limit: int = 10) -> pd.DataFrame:
        t = self.trips[self.trips["duration"] > int(max_duration)]
        t = t.sort_values("duration", ascending=False).head(int(limit))
        return t[TRIP_COLUMNS].reset_index(drop=True)
