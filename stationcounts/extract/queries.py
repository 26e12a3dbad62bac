# stationcounts/extract/queries.py
"""
Standard-SQL text for the BigQuery side of the workflow.

Every builder takes the fully qualified source table ("project.dataset.table")
and returns a single SELECT statement. Values are integers validated here, so
they are inlined rather than passed as query parameters.
"""
from __future__ import annotations

from stationcounts.types import station_column


ORDERS = {
    "count_desc": "num DESC, {col}",
    "count_asc": "num, {col}",
    "name": "{col}",
}


def _table(source_table: str) -> str:
    parts = source_table.split(".")
    if len(parts) != 3 or not all(parts):
        raise ValueError(
            f"source table must look like project.dataset.table, got {source_table!r}"
        )
    return f"`{source_table}`"


def _non_negative(name: str, value: int) -> int:
    value = int(value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    return value


def station_counts_sql(source_table: str, endpoint: str, order: str = "count_desc") -> str:
    col = station_column(endpoint)
    if order not in ORDERS:
        raise ValueError(f"order must be one of {sorted(ORDERS)}, got {order!r}")
    order_by = ORDERS[order].format(col=col)
    return (
        f"SELECT {col}, COUNT(*) AS num\n"
        f"FROM {_table(source_table)}\n"
        f"WHERE {col} IS NOT NULL\n"
        f"GROUP BY {col}\n"
        f"ORDER BY {order_by}"
    )


def end_station_names_sql(source_table: str) -> str:
    return f"SELECT end_station_name\nFROM {_table(source_table)}"


def long_rides_sql(source_table: str, min_duration: int = 1200) -> str:
    min_duration = _non_negative("min_duration", min_duration)
    return (
        f"SELECT *\n"
        f"FROM {_table(source_table)}\n"
        f"WHERE duration >= {min_duration}"
    )


def distinct_stations_sql(source_table: str, endpoint: str) -> str:
    col = station_column(endpoint)
    return (
        f"SELECT {col}\n"
        f"FROM {_table(source_table)}\n"
        f"WHERE {col} IS NOT NULL\n"
        f"GROUP BY {col}\n"
        f"ORDER BY {col}"
    )


def stations_over_sql(source_table: str, threshold: int = 100_000) -> str:
    threshold = _non_negative("threshold", threshold)
    return (
        f"SELECT start_station_name, COUNT(*) AS num_rides\n"
        f"FROM {_table(source_table)}\n"
        f"WHERE start_station_name IS NOT NULL\n"
        f"GROUP BY start_station_name\n"
        f"HAVING COUNT(*) > {threshold}\n"
        f"ORDER BY num_rides DESC, start_station_name"
    )


def duration_by_station_sql(source_table: str, min_rides: int = 50_000) -> str:
    min_rides = _non_negative("min_rides", min_rides)
    return (
        f"SELECT\n"
        f"  start_station_name,\n"
        f"  COUNT(*) AS total_rides,\n"
        f"  AVG(duration) AS avg_duration_seconds,\n"
        f"  ROUND(AVG(duration) / 60, 2) AS avg_duration_minutes\n"
        f"FROM {_table(source_table)}\n"
        f"WHERE start_station_name IS NOT NULL\n"
        f"GROUP BY start_station_name\n"
        f"HAVING COUNT(*) > {min_rides}\n"
        f"ORDER BY avg_duration_seconds DESC"
    )


def rides_by_hour_sql(source_table: str) -> str:
    return (
        f"SELECT EXTRACT(HOUR FROM start_date) AS hour_of_day, COUNT(*) AS num_rides\n"
        f"FROM {_table(source_table)}\n"
        f"GROUP BY hour_of_day\n"
        f"ORDER BY hour_of_day"
    )


def weekday_vs_weekend_sql(source_table: str) -> str:
    # BigQuery DAYOFWEEK: 1 = Sunday, 7 = Saturday
    return (
        f"SELECT\n"
        f"  CASE WHEN EXTRACT(DAYOFWEEK FROM start_date) IN (1, 7) THEN 'Weekend'\n"
        f"       ELSE 'Weekday' END AS day_type,\n"
        f"  COUNT(*) AS num_rides,\n"
        f"  AVG(duration) AS avg_duration\n"
        f"FROM {_table(source_table)}\n"
        f"GROUP BY day_type\n"
        f"ORDER BY day_type"
    )


def null_counts_sql(source_table: str) -> str:
    return (
        f"SELECT\n"
        f"  COUNT(*) AS total_rows,\n"
        f"  COUNT(start_station_name) AS non_null_start_stations,\n"
        f"  COUNT(end_station_name) AS non_null_end_stations,\n"
        f"  COUNT(duration) AS non_null_durations\n"
        f"FROM {_table(source_table)}"
    )


def duration_stats_sql(source_table: str) -> str:
    return (
        f"SELECT\n"
        f"  MIN(duration) AS min_duration_seconds,\n"
        f"  MAX(duration) AS max_duration_seconds,\n"
        f"  AVG(duration) AS avg_duration_seconds,\n"
        f"  STDDEV(duration) AS stddev_duration\n"
        f"FROM {_table(source_table)}"
    )


def duration_anomalies_sql(
    source_table: str, max_duration: int = 86_400, limit: int = 10
) -> str:
    max_duration = _non_negative("max_duration", max_duration)
    limit = _non_negative("limit", limit)
    return (
        f"SELECT start_station_name, end_station_name, duration, start_date\n"
        f"FROM {_table(source_table)}\n"
        f"WHERE duration > {max_duration}\n"
        f"ORDER BY duration DESC\n"
        f"LIMIT {limit}"
    )
