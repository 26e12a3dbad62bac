from stationcounts.config import PipelineConfig
from stationcounts.extract.trips_frame import TripFrameSource
from stationcounts.pipeline import make_source, run_pipeline
from stationcounts.store import reconciler as rc
from stationcounts.store.schema import station_tables


HYDE = "Hyde Park Corner, Hyde Park"
WATERLOO = "Waterloo Station 3, Waterloo"
BELGROVE = "Belgrove Street , King's Cross"


def _config(tmp_path):
    return PipelineConfig(export_dir=str(tmp_path / "exports"), union_threshold=1)


def test_pipeline_loads_both_tables(trip_source, engine, tmp_path):
    results = run_pipeline(_config(tmp_path), source=trip_source, engine=engine)

    start, end = results
    assert (start.table, end.table) == ("london1", "london2")
    assert start.rows_exported == 3
    assert start.rows_loaded == 4  # header line included
    assert start.cleanup.zero_counts == 1
    assert start.rows_final == 3
    assert end.rows_final == 2
    assert (tmp_path / "exports" / "start_station_data.csv").exists()

    start_table, end_table = station_tables()
    assert [r.station_name for r in rc.fetch_station_counts(engine, start_table)] == [HYDE, BELGROVE, WATERLOO]
    assert rc.fetch_station_counts(engine, end_table)[0].ride_count == 4


def test_rerun_is_idempotent(trip_source, engine, tmp_path):
    config = _config(tmp_path)
    run_pipeline(config, source=trip_source, engine=engine)

    start, end = run_pipeline(config, source=trip_source, engine=engine)

    assert start.cleanup.duplicates == 3
    assert start.rows_final == 3
    assert end.rows_final == 2


def test_pipeline_through_gcs(trip_source, engine, storage_client):
    config = PipelineConfig(export_dir="gs://bike-exports/london")

    run_pipeline(config, source=trip_source, engine=engine, storage_client=storage_client)

    assert ("bike-exports", "london/start_station_data.csv") in storage_client.objects
    assert ("bike-exports", "london/end_station_data.csv") in storage_client.objects


def test_union_after_pipeline(trip_source, engine, tmp_path):
    config = _config(tmp_path)
    run_pipeline(config, source=trip_source, engine=engine)
    start_table, end_table = station_tables()

    df = rc.union_top_stations(engine, start_table, end_table, config.union_threshold)

    assert df.values.tolist() == [[WATERLOO, 4], [HYDE, 3]]


def test_make_source_prefers_local_trips(tmp_path, trips_df):
    path = tmp_path / "trips.csv"
    trips_df.to_csv(path, index=False)

    source = make_source(PipelineConfig(trips_csv=str(path)))

    assert isinstance(source, TripFrameSource)
    assert source.station_counts("end")["num"].tolist() == [4, 1]


def test_pipeline_uses_configured_table_names(trip_source, engine, tmp_path):
    config = PipelineConfig(
        export_dir=str(tmp_path / "exports"), start_table="starts", end_table="ends"
    )

    start, end = run_pipeline(config, source=trip_source, engine=engine)

    assert (start.table, end.table) == ("starts", "ends")
    start_table, end_table = station_tables("starts", "ends")
    assert rc.row_count(engine, start_table) == 3
    assert rc.row_count(engine, end_table) == 2
