import pytest

from stationcounts.store import reconciler as rc
from stationcounts.store.schema import (
    backup_table,
    create_station_tables,
    describe_table,
    drop_table,
    endpoint_of,
    name_column,
    station_table,
)


def test_station_table_columns():
    t = station_table("london2", "end")
    assert [c.name for c in t.columns] == ["end_station_name", "num"]
    assert name_column(t).name == "end_station_name"
    assert endpoint_of(t) == "end"


def test_unknown_endpoint():
    with pytest.raises(ValueError):
        station_table("london3", "middle")


def test_describe_lists_columns_and_indexes(engine, tables):
    info = describe_table(engine, "london1")

    assert [c["name"] for c in info["columns"]] == ["start_station_name", "num"]
    assert "VARCHAR(255)" in info["columns"][0]["type"]
    assert {ix["name"] for ix in info["indexes"]} == {"idx_london1_station", "idx_london1_num"}


def test_backup_copies_rows_and_drop_is_idempotent(engine, tables):
    start_table, _ = tables
    rc.insert_station(engine, start_table, "A", 3)

    name = backup_table(engine, start_table)

    assert name == "london1_backup"
    backup = station_table(name, "start")
    assert rc.row_count(engine, backup) == 1

    assert drop_table(engine, name) is True
    assert drop_table(engine, name) is False


def test_create_is_idempotent(engine, tables):
    create_station_tables(engine, *tables)
    assert rc.row_count(engine, tables[0]) == 0
