# stationcounts/store/loader.py
from __future__ import annotations

import csv
import io
import math
from pathlib import Path
from typing import Iterable, List

import sqlalchemy as sa
from colorama import Fore, Style
from tqdm import tqdm

from stationcounts.errors import SchemaMismatchError
from stationcounts.store.schema import name_column
from stationcounts.types import StationCount
from stationcounts.util.storage import read_text


def _coerce_count(raw: str, line: int) -> int:
    """
    Count cell -> int, following what a CSV import into an INT column does:

      "150000"    -> 150000
      "150000.0"  -> 150000 (fractional part truncated)
      "num"       -> 0 (non-numeric, e.g. the header cell)
    """
    raw = raw.strip()
    try:
        value = int(raw)
    except ValueError:
        try:
            as_float = float(raw)
        except ValueError:
            return 0
        if not math.isfinite(as_float):
            raise SchemaMismatchError(f"ride count {raw!r} is not a finite number", line=line)
        value = int(as_float)
    if value < 0:
        raise SchemaMismatchError(f"negative ride count {value}", line=line)
    return value


def parse_station_rows(text: str) -> List[StationCount]:
    """
    Delimited text -> StationCount rows, one per non-blank line.

    Header lines are not detected here; they come out as (header-text, 0)
    and are removed later by the zero-count cleanup.
    """
    rows: List[StationCount] = []
    reader = csv.reader(io.StringIO(text))
    for line_no, fields in enumerate(reader, start=1):
        if not fields or all(not f.strip() for f in fields):
            continue
        if len(fields) != 2:
            raise SchemaMismatchError(
                f"expected 2 columns (name, count), got {len(fields)}", line=line_no
            )
        name = fields[0].strip() or None
        rows.append(StationCount(station_name=name, ride_count=_coerce_count(fields[1], line_no)))
    return rows


def insert_rows(
    engine: sa.Engine,
    table: sa.Table,
    rows: Iterable[StationCount],
    *,
    batch_size: int = 5000,
) -> int:
    """
    Bulk insert in one transaction: either every row lands or none does.
    """
    rows = list(rows)
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")

    name_key = name_column(table).name
    payload = [{name_key: r.station_name, "num": int(r.ride_count)} for r in rows]
    if not payload:
        return 0

    batches = range(0, len(payload), batch_size)
    with engine.begin() as conn:
        for start in tqdm(batches, desc=f"Loading {table.name}", unit="batch"):
            conn.execute(table.insert(), payload[start:start + batch_size])

    return len(payload)


def load_station_csv(
    engine: sa.Engine,
    table: sa.Table,
    source: str | Path,
    *,
    storage_client=None,
    batch_size: int = 5000,
) -> int:
    """
    Load a (name, count) delimited file from a local path or gs:// URI into table.
    Returns the number of rows inserted (header artifacts included).
    """
    print(f"{Fore.CYAN}Reading {source}…{Style.RESET_ALL}")
    text = read_text(source, client=storage_client)
    rows = parse_station_rows(text)

    inserted = insert_rows(engine, table, rows, batch_size=batch_size)
    print(f"{Fore.MAGENTA}Inserted {inserted:,} rows into {table.name}{Style.RESET_ALL}")
    return inserted
