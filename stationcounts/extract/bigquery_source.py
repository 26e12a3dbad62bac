# stationcounts/extract/bigquery_source.py
from __future__ import annotations

import pandas as pd
from colorama import Fore, Style
from google.cloud import bigquery

from stationcounts.config import SOURCE_TABLE
from stationcounts.extract import queries


class BigQuerySource:
    """
    Runs the aggregation catalog against a BigQuery table and returns DataFrames.

    client: a google.cloud.bigquery.Client (or anything with .query(sql).result().to_dataframe()).
    Engine errors (permissions, missing table, quota) propagate untouched.
    """

    def __init__(
        self,
        source_table: str = SOURCE_TABLE,
        *,
        client=None,
        project: str | None = None,
    ):
        self.source_table = source_table
        self.client = client if client is not None else bigquery.Client(project=project)

    def run(self, sql: str) -> pd.DataFrame:
        print(f"{Fore.CYAN}[BigQuery] running query on {self.source_table}…{Style.RESET_ALL}")
        return self.client.query(sql).result().to_dataframe()

    # ----------------------------
    # core aggregation
    # ----------------------------
    def station_counts(self, endpoint: str, order: str = "count_desc") -> pd.DataFrame:
        return self.run(queries.station_counts_sql(self.source_table, endpoint, order))

    # ----------------------------
    # analysis catalog
    # ----------------------------
    def end_station_names(self) -> pd.DataFrame:
        return self.run(queries.end_station_names_sql(self.source_table))

    def long_rides(self, min_duration: int = 1200) -> pd.DataFrame:
        return self.run(queries.long_rides_sql(self.source_table, min_duration))

    def distinct_stations(self, endpoint: str) -> pd.DataFrame:
        return self.run(queries.distinct_stations_sql(self.source_table, endpoint))

    def stations_over(self, threshold: int = 100_000) -> pd.DataFrame:
        return self.run(queries.stations_over_sql(self.source_table, threshold))

    def duration_by_station(self, min_rides: int = 50_000) -> pd.DataFrame:
        return self.run(queries.duration_by_station_sql(self.source_table, min_rides))

    def rides_by_hour(self) -> pd.DataFrame:
        return self.run(queries.rides_by_hour_sql(self.source_table))

    def weekday_vs_weekend(self) -> pd.DataFrame:
        return self.run(queries.weekday_vs_weekend_sql(self.source_table))

    def null_counts(self) -> pd.DataFrame:
        return self.run(queries.null_counts_sql(self.source_table))

    def duration_stats(self) -> pd.DataFrame:
        return self.run(queries.duration_stats_sql(self.source_table))

    def duration_anomalies(self, max_duration: int = 86_400, limit: int = 10) -> pd.DataFrame:
        return self.run(
            queries.duration_anomalies_sql(self.source_table, max_duration, limit)
        )
