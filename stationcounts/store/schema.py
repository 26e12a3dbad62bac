# stationcounts/store/schema.py
from __future__ import annotations

from typing import Dict, List, Tuple

import sqlalchemy as sa
from colorama import Fore, Style

from stationcounts.types import station_column


STATION_NAME_LENGTH = 255


def station_table(name: str, endpoint: str, metadata: sa.MetaData | None = None) -> sa.Table:
    """
    (<endpoint>_station_name VARCHAR(255), num INT) plus one index per column.
    No keys: duplicates and header rows are cleaned up after loading.
    """
    metadata = metadata if metadata is not None else sa.MetaData()
    col = station_column(endpoint)
    return sa.Table(
        name,
        metadata,
        sa.Column(col, sa.String(STATION_NAME_LENGTH)),
        sa.Column("num", sa.Integer),
        sa.Index(f"idx_{name}_station", col),
        sa.Index(f"idx_{name}_num", "num"),
    )


def name_column(table: sa.Table) -> sa.Column:
    # first column is always the station name
    return list(table.columns)[0]


def endpoint_of(table: sa.Table) -> str:
    return name_column(table).name.split("_", 1)[0]


def station_tables(
    start_name: str = "london1",
    end_name: str = "london2",
    metadata: sa.MetaData | None = None,
) -> Tuple[sa.Table, sa.Table]:
    metadata = metadata if metadata is not None else sa.MetaData()
    return (
        station_table(start_name, "start", metadata),
        station_table(end_name, "end", metadata),
    )


def create_station_tables(engine: sa.Engine, *tables: sa.Table) -> None:
    for t in tables:
        print(f"{Fore.CYAN}Creating table {t.name} (if missing)…{Style.RESET_ALL}")
        t.create(bind=engine, checkfirst=True)


def drop_table(engine: sa.Engine, name: str) -> bool:
    """
    DROP TABLE IF EXISTS. Returns True if something was dropped.
    """
    if not sa.inspect(engine).has_table(name):
        return False
    sa.Table(name, sa.MetaData()).drop(bind=engine)
    return True


def backup_table(engine: sa.Engine, table: sa.Table, suffix: str = "_backup") -> str:
    """
    CREATE TABLE <name>_backup AS SELECT * FROM <name>. Returns the backup name.
    Fails (engine error) if the backup already exists.
    """
    backup_name = f"{table.name}{suffix}"
    quote = engine.dialect.identifier_preparer.quote
    stmt = sa.text(
        f"CREATE TABLE {quote(backup_name)} AS SELECT * FROM {quote(table.name)}"
    )
    with engine.begin() as conn:
        conn.execute(stmt)
    print(f"{Fore.GREEN}Backed up {table.name} -> {backup_name}{Style.RESET_ALL}")
    return backup_name


def describe_table(engine: sa.Engine, name: str) -> Dict[str, List[Dict]]:
    """
    Column and index listing, roughly DESCRIBE + SHOW INDEX.
    """
    insp = sa.inspect(engine)
    columns = [
        {"name": c["name"], "type": str(c["type"]), "nullable": bool(c.get("nullable", True))}
        for c in insp.get_columns(name)
    ]
    indexes = [
        {"name": ix["name"], "columns": list(ix["column_names"]), "unique": bool(ix.get("unique"))}
        for ix in insp.get_indexes(name)
    ]
    return {"columns": columns, "indexes": indexes}
