import pandas as pd
import pytest

from stationcounts.errors import ExportTooLargeError
from stationcounts.export.csv_export import export_station_counts, station_counts_to_csv


HYDE = "Hyde Park Corner, Hyde Park"


@pytest.fixture
def counts():
    return pd.DataFrame(
        {"start_station_name": [HYDE, "Waterloo Station 3, Waterloo", "Albert Gate"], "num": [150000, 90000, 42]}
    )


def test_csv_has_header_and_preserves_order(counts):
    text = station_counts_to_csv(counts)
    lines = text.splitlines()

    assert lines[0] == "start_station_name,num"
    assert lines[1] == f'"{HYDE}",150000'
    assert lines[3] == "Albert Gate,42"
    assert text.endswith("\n")


def test_csv_without_header(counts):
    lines = station_counts_to_csv(counts, header=False).splitlines()
    assert len(lines) == 3
    assert lines[0].endswith(",150000")


def test_rejects_frames_that_are_not_two_columns():
    with pytest.raises(ValueError):
        station_counts_to_csv(pd.DataFrame({"a": [1], "b": [2], "c": [3]}))


def test_export_to_local_file(counts, tmp_path):
    dest = tmp_path / "nested" / "start_station_data.csv"

    result = export_station_counts(counts, dest)

    assert result.rows == 3
    assert result.location == str(dest)
    assert dest.read_text(encoding="utf-8").splitlines()[0] == "start_station_name,num"
    assert result.size_bytes == len(dest.read_bytes())


def test_export_to_gcs(counts, storage_client):
    result = export_station_counts(
        counts, "gs://bike-exports/london/start_station_data.csv", storage_client=storage_client
    )

    data = storage_client.objects[("bike-exports", "london/start_station_data.csv")]
    assert result.location == "gs://bike-exports/london/start_station_data.csv"
    assert data.decode("utf-8").startswith("start_station_name,num\n")


def test_export_too_large_writes_nothing(counts, tmp_path):
    dest = tmp_path / "big.csv"

    with pytest.raises(ExportTooLargeError) as exc_info:
        export_station_counts(counts, dest, max_bytes=10)

    assert exc_info.value.limit_bytes == 10
    assert not dest.exists()
