# stationcounts/pipeline.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import sqlalchemy as sa
from colorama import Fore, Style

from stationcounts.config import MAX_EXPORT_BYTES, PipelineConfig
from stationcounts.export.csv_export import export_station_counts
from stationcounts.extract.bigquery_source import BigQuerySource
from stationcounts.extract.trips_frame import TripFrameSource
from stationcounts.store.loader import load_station_csv
from stationcounts.store.reconciler import clean_station_table, row_count
from stationcounts.store.schema import create_station_tables, station_tables
from stationcounts.types import ENDPOINTS, CleanupReport, check_endpoint


@dataclass
class LoadResult:
    endpoint: str
    table: str
    export_uri: str
    rows_exported: int
    rows_loaded: int
    rows_final: int
    cleanup: CleanupReport = field(default_factory=CleanupReport)


def run_station_load(
    *,
    source,
    endpoint: str,
    engine: sa.Engine,
    table: sa.Table,
    export_uri: str,
    storage_client=None,
    dedupe: bool = True,
    max_export_bytes: int = MAX_EXPORT_BYTES,
) -> LoadResult:
    """
    extract -> export -> load -> clean, for one endpoint.

    source: BigQuerySource or TripFrameSource (anything with .station_counts()).
    The table is expected to exist; rows are appended, not replaced.
    """
    check_endpoint(endpoint)
    print(f"{Fore.CYAN}Aggregating {endpoint} stations…{Style.RESET_ALL}")
    counts = source.station_counts(endpoint)

    exported = export_station_counts(
        counts, export_uri, storage_client=storage_client, max_bytes=max_export_bytes
    )

    loaded = load_station_csv(engine, table, exported.location, storage_client=storage_client)
    cleanup = clean_station_table(engine, table, dedupe=dedupe)
    final = row_count(engine, table)

    print(f"{Fore.GREEN}{table.name} ready: {final:,} stations.{Style.RESET_ALL}")

    return LoadResult(
        endpoint=endpoint,
        table=table.name,
        export_uri=exported.location,
        rows_exported=exported.rows,
        rows_loaded=loaded,
        rows_final=final,
        cleanup=cleanup,
    )


def make_source(config: PipelineConfig, *, bigquery_client=None):
    if config.trips_csv:
        return TripFrameSource.from_csv(config.trips_csv)
    return BigQuerySource(config.source_table, client=bigquery_client, project=config.project)


def run_pipeline(
    config: PipelineConfig,
    *,
    source=None,
    engine: sa.Engine | None = None,
    storage_client=None,
    bigquery_client=None,
) -> List[LoadResult]:
    """
    Both endpoints, start first. Creates the destination tables if missing.
    """
    source = source if source is not None else make_source(config, bigquery_client=bigquery_client)
    engine = engine if engine is not None else sa.create_engine(config.database_url)

    tables = dict(zip(ENDPOINTS, station_tables(*(config.table_for(e) for e in ENDPOINTS))))
    create_station_tables(engine, *tables.values())

    results = []
    for endpoint in ENDPOINTS:
        table = tables[endpoint]
        results.append(
            run_station_load(
                source=source,
                endpoint=endpoint,
                engine=engine,
                table=table,
                export_uri=config.export_uri(endpoint),
                storage_client=storage_client,
                dedupe=config.dedupe,
                max_export_bytes=config.max_export_bytes,
            )
        )
    return results
