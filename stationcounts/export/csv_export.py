# stationcounts/export/csv_export.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from colorama import Fore, Style

from stationcounts.config import MAX_EXPORT_BYTES
from stationcounts.errors import ExportTooLargeError
from stationcounts.util.storage import write_text


@dataclass
class ExportResult:
    location: str
    rows: int
    size_bytes: int


def station_counts_to_csv(frame: pd.DataFrame, *, header: bool = True) -> str:
    """
    (name, count) frame -> CSV text, one record per line, row order preserved.
    """
    if frame.shape[1] != 2:
        raise ValueError(
            f"station counts frame must have 2 columns, got {list(frame.columns)}"
        )
    return frame.to_csv(index=False, header=header, lineterminator="\n")


def export_station_counts(
    frame: pd.DataFrame,
    destination: str | Path,
    *,
    header: bool = True,
    storage_client=None,
    max_bytes: int = MAX_EXPORT_BYTES,
) -> ExportResult:
    """
    Writes a station counts frame to a local file or a gs:// object.

    Header defaults to on, matching a BigQuery console export; the loader
    neutralizes it through the zero-count cleanup rule.
    Raises ExportTooLargeError instead of writing a partial file.
    """
    text = station_counts_to_csv(frame, header=header)
    size = len(text.encode("utf-8"))
    if size > max_bytes:
        raise ExportTooLargeError(size, max_bytes)

    print(f"{Fore.CYAN}Writing {len(frame):,} rows to {destination}…{Style.RESET_ALL}")
    location = write_text(destination, text, client=storage_client)

    return ExportResult(location=location, rows=int(len(frame)), size_bytes=size)
