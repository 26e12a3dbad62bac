# stationcounts/store/reconciler.py
"""
Cleanup, mutation and reporting over the two loaded station tables.

Every mutating function runs as one statement (or one transaction) and
returns the number of rows it touched. Engine errors are not caught.
"""
from __future__ import annotations

from typing import Dict, List

import pandas as pd
import sqlalchemy as sa
from colorama import Fore, Style

from stationcounts.store.schema import name_column
from stationcounts.types import CleanupReport, StationCount


def _read_frame(engine: sa.Engine, stmt) -> pd.DataFrame:
    with engine.connect() as conn:
        return pd.read_sql(stmt, conn)


# ============================================================
# DELETE
# ============================================================
def delete_rows(engine: sa.Engine, table: sa.Table, where) -> int:
    """
    DELETE FROM table WHERE <where>. where is a SQLAlchemy boolean expression.
    """
    if where is None:
        raise ValueError("delete_rows needs a predicate; refusing to empty the table")
    with engine.begin() as conn:
        result = conn.execute(sa.delete(table).where(where))
    return int(result.rowcount or 0)


def delete_station(engine: sa.Engine, table: sa.Table, station_name: str) -> int:
    return delete_rows(engine, table, name_column(table) == station_name)


def delete_zero_counts(engine: sa.Engine, table: sa.Table) -> int:
    """
    A zero count cannot be told apart from an imported header line, so it goes.
    """
    return delete_rows(engine, table, table.c.num == 0)


def delete_null_names(engine: sa.Engine, table: sa.Table) -> int:
    return delete_rows(engine, table, name_column(table).is_(None))


def dedupe_stations(engine: sa.Engine, table: sa.Table) -> int:
    """
    Keep exactly one row per station name, carrying its highest count.
    Returns how many rows were removed.
    """
    name = name_column(table)
    dupes_stmt = (
        sa.select(name, sa.func.max(table.c.num), sa.func.count())
        .where(name.is_not(None))
        .group_by(name)
        .having(sa.func.count() > 1)
    )

    removed = 0
    with engine.begin() as conn:
        dupes = conn.execute(dupes_stmt).all()
        for station, best, n in dupes:
            conn.execute(sa.delete(table).where(name == station))
            conn.execute(table.insert().values({name.name: station, "num": best}))
            removed += int(n) - 1

    return removed


def clean_station_table(engine: sa.Engine, table: sa.Table, *, dedupe: bool = True) -> CleanupReport:
    print(f"{Fore.CYAN}Cleaning {table.name}…{Style.RESET_ALL}")
    report = CleanupReport(
        zero_counts=delete_zero_counts(engine, table),
        null_names=delete_null_names(engine, table),
    )
    if dedupe:
        report.duplicates = dedupe_stations(engine, table)

    print(
        f"{Fore.MAGENTA}{table.name}: removed {report.zero_counts} zero-count, "
        f"{report.null_names} unnamed, {report.duplicates} duplicate rows{Style.RESET_ALL}"
    )
    return report


# ============================================================
# INSERT / UPDATE
# ============================================================
def insert_station(engine: sa.Engine, table: sa.Table, station_name: str, ride_count: int) -> int:
    if ride_count < 0:
        raise ValueError("ride_count must be >= 0")
    with engine.begin() as conn:
        conn.execute(
            table.insert().values({name_column(table).name: station_name, "num": int(ride_count)})
        )
    return 1


def increment_count(engine: sa.Engine, table: sa.Table, station_name: str, by: int = 1) -> int:
    with engine.begin() as conn:
        result = conn.execute(
            sa.update(table)
            .where(name_column(table) == station_name)
            .values(num=table.c.num + int(by))
        )
    return int(result.rowcount or 0)


def set_count(engine: sa.Engine, table: sa.Table, station_name: str, ride_count: int) -> int:
    if ride_count < 0:
        raise ValueError("ride_count must be >= 0")
    with engine.begin() as conn:
        result = conn.execute(
            sa.update(table)
            .where(name_column(table) == station_name)
            .values(num=int(ride_count))
        )
    return int(result.rowcount or 0)


# ============================================================
# READS
# ============================================================
def row_count(engine: sa.Engine, table: sa.Table) -> int:
    with engine.connect() as conn:
        return int(conn.execute(sa.select(sa.func.count()).select_from(table)).scalar_one())


def null_name_count(engine: sa.Engine, table: sa.Table) -> int:
    stmt = sa.select(sa.func.count()).select_from(table).where(name_column(table).is_(None))
    with engine.connect() as conn:
        return int(conn.execute(stmt).scalar_one())


def fetch_station_counts(engine: sa.Engine, table: sa.Table) -> List[StationCount]:
    name = name_column(table)
    stmt = sa.select(name, table.c.num).order_by(table.c.num.desc(), name)
    with engine.connect() as conn:
        return [StationCount(station_name=n, ride_count=int(c)) for n, c in conn.execute(stmt)]


def top_stations(engine: sa.Engine, table: sa.Table, n: int = 10) -> pd.DataFrame:
    name = name_column(table)
    stmt = sa.select(name, table.c.num).order_by(table.c.num.desc(), name).limit(int(n))
    return _read_frame(engine, stmt)


def low_activity(engine: sa.Engine, table: sa.Table, below: int = 1000) -> pd.DataFrame:
    name = name_column(table)
    stmt = (
        sa.select(name, table.c.num)
        .where(table.c.num < int(below))
        .order_by(table.c.num.asc(), name)
    )
    return _read_frame(engine, stmt)


def table_stats(engine: sa.Engine, table: sa.Table) -> Dict[str, float | int | None]:
    num = table.c.num
    stmt = sa.select(
        sa.func.count().label("total_stations"),
        sa.func.sum(num).label("total_rides"),
        sa.func.avg(num).label("avg_rides_per_station"),
        sa.func.min(num).label("min_rides"),
        sa.func.max(num).label("max_rides"),
    ).select_from(table)
    with engine.connect() as conn:
        row = conn.execute(stmt).mappings().one()

    out: Dict[str, float | int | None] = {}
    for k, v in row.items():
        if v is None:
            out[k] = None
        elif k == "avg_rides_per_station":
            out[k] = float(v)
        else:
            out[k] = int(v)
    return out


# ============================================================
# SET COMBINATION
# ============================================================
def union_top_stations(
    engine: sa.Engine,
    start_table: sa.Table,
    end_table: sa.Table,
    threshold: int = 100_000,
    *,
    with_type: bool = False,
    name_ties: bool = True,
) -> pd.DataFrame:
    """
    Rows above threshold from both tables, combined with UNION (identical
    rows collapse), highest count first.

    Columns: station_name, ride_count[, station_type]
    """
    threshold = int(threshold)

    def _part(table: sa.Table, label: str):
        cols = [
            name_column(table).label("station_name"),
            table.c.num.label("ride_count"),
        ]
        if with_type:
            cols.append(sa.literal(label).label("station_type"))
        return sa.select(*cols).where(table.c.num > threshold)

    u = sa.union(_part(start_table, "Start Point"), _part(end_table, "End Point"))
    order = [u.selected_columns.ride_count.desc()]
    if name_ties:
        order.append(u.selected_columns.station_name.asc())
    return _read_frame(engine, u.order_by(*order))


def union_all_export(engine: sa.Engine, start_table: sa.Table, end_table: sa.Table) -> pd.DataFrame:
    """
    Every row from both tables tagged START / END, duplicates kept.
    """
    u = sa.union_all(
        sa.select(
            sa.literal("START").label("type"),
            name_column(start_table).label("station_name"),
            start_table.c.num.label("ride_count"),
        ),
        sa.select(
            sa.literal("END").label("type"),
            name_column(end_table).label("station_name"),
            end_table.c.num.label("ride_count"),
        ),
    )
    cols = u.selected_columns
    return _read_frame(
        engine, u.order_by(cols.ride_count.desc(), cols.station_name, cols["type"].desc())
    )


def stations_in_both(
    engine: sa.Engine,
    start_table: sa.Table,
    end_table: sa.Table,
    min_rides: int = 10_000,
) -> pd.DataFrame:
    s_name, e_name = name_column(start_table), name_column(end_table)
    total = (start_table.c.num + end_table.c.num).label("total_rides")
    stmt = (
        sa.select(
            s_name.label("station_name"),
            start_table.c.num.label("start_rides"),
            end_table.c.num.label("end_rides"),
            total,
        )
        .select_from(start_table.join(end_table, s_name == e_name))
        .where(start_table.c.num > int(min_rides), end_table.c.num > int(min_rides))
        .order_by(total.desc(), s_name)
    )
    return _read_frame(engine, stmt)


def start_end_difference(
    engine: sa.Engine,
    start_table: sa.Table,
    end_table: sa.Table,
    min_start: int = 1000,
    limit: int = 20,
) -> pd.DataFrame:
    """
    Stations busier as an origin than as a destination (end count 0 when absent).
    """
    s_name, e_name = name_column(start_table), name_column(end_table)
    end_count = sa.func.coalesce(end_table.c.num, 0)
    difference = (start_table.c.num - end_count).label("difference")
    stmt = (
        sa.select(
            s_name.label("station_name"),
            start_table.c.num.label("start_count"),
            end_count.label("end_count"),
            difference,
        )
        .select_from(start_table.outerjoin(end_table, s_name == e_name))
        .where(start_table.c.num > int(min_start))
        .order_by(difference.desc(), s_name)
        .limit(int(limit))
    )
    return _read_frame(engine, stmt)


def end_only_stations(engine: sa.Engine, start_table: sa.Table, end_table: sa.Table) -> pd.DataFrame:
    s_name, e_name = name_column(start_table), name_column(end_table)
    stmt = (
        sa.select(e_name, end_table.c.num)
        .select_from(end_table.outerjoin(start_table, e_name == s_name))
        .where(s_name.is_(None))
        .order_by(end_table.c.num.desc(), e_name)
    )
    return _read_frame(engine, stmt)
