# stationcounts/main.py

import sqlalchemy as sa

from stationcounts.config import PipelineConfig
from stationcounts.pipeline import run_pipeline
from stationcounts.store.reconciler import union_top_stations
from stationcounts.store.schema import station_tables
from stationcounts.viz.report import serve_report


def main():
    config = PipelineConfig.from_env()
    engine = sa.create_engine(config.database_url)

    # ---- extract -> export -> load -> clean, both endpoints ----
    results = run_pipeline(config, engine=engine)

    print("\nLoad summary:\n")
    for r in results:
        print(
            f"{r.endpoint:>5} | {r.table:<10} | "
            f"exported {r.rows_exported:7,d} | loaded {r.rows_loaded:7,d} | "
            f"removed {r.cleanup.total:4d} | final {r.rows_final:7,d}"
        )

    # ---- union of busy stations ----
    start_table, end_table = station_tables(config.start_table, config.end_table)
    busy = union_top_stations(engine, start_table, end_table, config.union_threshold)

    print(f"\nStations above {config.union_threshold:,} rides:\n")
    for i, row in enumerate(busy.itertuples(index=False), 1):
        print(f"{i:02d}. {row.station_name} ({row.ride_count:,})")

    # ---- UI ----
    serve_report(
        engine=engine,
        start_table=start_table,
        end_table=end_table,
        host=config.report_host,
        port=config.report_port,
        threshold=config.union_threshold,
    )


if __name__ == "__main__":
    main()
