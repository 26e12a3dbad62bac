# stationcounts/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, fields


# ============================================================
# DEFAULTS
# ============================================================
SOURCE_TABLE = "bigquery-public-data.london_bicycles.cycle_hire"

DATABASE_URL = "mysql+pymysql://root@127.0.0.1:3306/bike"
START_TABLE = "london1"
END_TABLE = "london2"

EXPORT_DIR = "exports"

UNION_THRESHOLD = 100_000

# BigQuery refuses to write more than 1 GB into a single export file
MAX_EXPORT_BYTES = 1024 ** 3

ENV_PREFIX = "STATIONCOUNTS_"


@dataclass
class PipelineConfig:
    source_table: str = SOURCE_TABLE
    # billing project for BigQuery jobs (None -> client default)
    project: str | None = None
    # local trips CSV; when set the pipeline aggregates with pandas instead of BigQuery
    trips_csv: str | None = None

    database_url: str = DATABASE_URL
    start_table: str = START_TABLE
    end_table: str = END_TABLE

    # local directory or gs://bucket/prefix
    export_dir: str = EXPORT_DIR
    max_export_bytes: int = MAX_EXPORT_BYTES

    union_threshold: int = UNION_THRESHOLD
    dedupe: bool = True

    report_host: str = "127.0.0.1"
    report_port: int = 8080

    def table_for(self, endpoint: str) -> str:
        if endpoint == "start":
            return self.start_table
        if endpoint == "end":
            return self.end_table
        raise ValueError(f"unknown endpoint {endpoint!r}")

    def export_uri(self, endpoint: str) -> str:
        base = self.export_dir.rstrip("/")
        return f"{base}/{endpoint}_station_data.csv"

    @classmethod
    def from_env(cls, environ=None) -> "PipelineConfig":
        """
        Build a config from STATIONCOUNTS_* variables, e.g.

          STATIONCOUNTS_DATABASE_URL=mysql+pymysql://user:pw@10.0.0.3/bike
          STATIONCOUNTS_EXPORT_DIR=gs://my-bucket/london
          STATIONCOUNTS_UNION_THRESHOLD=50000
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            kwargs[f.name] = _coerce(raw, f.default)
        return cls(**kwargs)


def _coerce(raw: str, default):
    if isinstance(default, bool):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(default, int):
        return int(raw)
    return raw
