import pandas as pd
import pytest
import sqlalchemy as sa

from stationcounts.extract.trips_frame import TripFrameSource, prepare_trips
from stationcounts.store.schema import create_station_tables, station_tables


HYDE = "Hyde Park Corner, Hyde Park"
WATERLOO = "Waterloo Station 3, Waterloo"
BELGROVE = "Belgrove Street , King's Cross"


@pytest.fixture
def trips_df():
    """Seven cycle_hire rows, the last one without stations or start_date. 2017-06-03 is a Saturday."""
    raw = pd.DataFrame(
        [
            {"start_station_name": HYDE, "end_station_name": WATERLOO, "duration": 600, "start_date": "2017-06-03 08:15:00"},
            {"start_station_name": HYDE, "end_station_name": HYDE, "duration": 1500, "start_date": "2017-06-03 09:40:00"},
            {"start_station_name": HYDE, "end_station_name": WATERLOO, "duration": 90000, "start_date": "2017-06-05 08:05:00"},
            {"start_station_name": WATERLOO, "end_station_name": None, "duration": 1200, "start_date": "2017-06-05 17:30:00"},
            {"start_station_name": None, "end_station_name": WATERLOO, "duration": 300, "start_date": "2017-06-06 17:45:00"},
            {"start_station_name": BELGROVE, "end_station_name": WATERLOO, "duration": 100000, "start_date": "2017-06-04 23:10:00"},
            {"start_station_name": None, "end_station_name": None, "duration": 400, "start_date": None},
        ]
    )
    return prepare_trips(raw)


@pytest.fixture
def trip_source(trips_df):
    return TripFrameSource(trips_df)


@pytest.fixture
def engine(tmp_path):
    eng = sa.create_engine(f"sqlite:///{tmp_path / 'bike.db'}")
    yield eng
    eng.dispose()


@pytest.fixture
def tables(engine):
    start_table, end_table = station_tables("london1", "london2")
    create_station_tables(engine, start_table, end_table)
    return start_table, end_table


# ----------------------------
# fake Google Cloud clients
# ----------------------------
class FakeResult:
    def __init__(self, columns, rows):
        self.columns = list(columns)
        self.rows = [tuple(r) for r in rows]

    def to_dataframe(self):
        return pd.DataFrame.from_records(self.rows, columns=self.columns)


class FakeQueryJob:
    def __init__(self, result):
        self._result = result

    def result(self):
        return self._result


class FakeBigQueryClient:
    def __init__(self, columns, rows):
        self.columns = columns
        self.rows = rows
        self.queries = []

    def query(self, sql):
        self.queries.append(sql)
        return FakeQueryJob(FakeResult(self.columns, self.rows))


class FakeBlob:
    def __init__(self, store, key):
        self._store = store
        self._key = key

    def upload_from_string(self, data, content_type=None):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._store[self._key] = data

    def download_as_bytes(self):
        return self._store[self._key]


class FakeBucket:
    def __init__(self, store, name):
        self._store = store
        self.name = name

    def blob(self, blob_name):
        return FakeBlob(self._store, (self.name, blob_name))


class FakeStorageClient:
    def __init__(self):
        self.objects = {}

    def bucket(self, name):
        return FakeBucket(self.objects, name)


@pytest.fixture
def storage_client():
    return FakeStorageClient()


@pytest.fixture
def make_bigquery_client():
    return FakeBigQueryClient
