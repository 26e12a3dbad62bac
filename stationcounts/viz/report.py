# stationcounts/viz/report.py
from __future__ import annotations

import html

import pandas as pd
import sqlalchemy as sa
from flask import Flask, jsonify, request

from stationcounts.config import UNION_THRESHOLD
from stationcounts.store.reconciler import table_stats, top_stations, union_top_stations


def _table_html(df: pd.DataFrame, empty: str = "no rows") -> str:
    if df.empty:
        return f'<p class="sc-empty">{html.escape(empty)}</p>'
    return df.to_html(index=False, classes="sc-table", border=0, float_format="{:,.1f}".format)


def _stats_html(name: str, stats: dict) -> str:
    rows = "\n".join(
        f"<tr><th>{html.escape(k.replace('_', ' '))}</th><td>{'' if v is None else f'{v:,.0f}'}</td></tr>"
        for k, v in stats.items()
    )
    return f"""
<div class="sc-card">
  <div class="sc-card-title">{html.escape(name)}</div>
  <table class="sc-table">{rows}</table>
</div>
"""


def build_report_app(
    *,
    engine: sa.Engine,
    start_table: sa.Table,
    end_table: sa.Table,
    threshold: int = UNION_THRESHOLD,
    top_n: int = 10,
    title: str = "London Bikeshare Station Counts",
) -> Flask:
    """
    Read-only viewer over the two loaded tables.

      /             stats, top stations per table, union above ?threshold=
      /union.json   union rows as JSON (?threshold=, ?typed=1)
    """
    app = Flask(__name__)

    def _threshold() -> int:
        t = request.args.get("threshold", threshold, type=int)
        return max(0, int(t))

    @app.route("/")
    def _index():
        t = _threshold()

        stats_html = _stats_html(start_table.name, table_stats(engine, start_table)) + _stats_html(
            end_table.name, table_stats(engine, end_table)
        )
        top_start = _table_html(top_stations(engine, start_table, top_n))
        top_end = _table_html(top_stations(engine, end_table, top_n))
        union_html = _table_html(
            union_top_stations(engine, start_table, end_table, t, with_type=True),
            empty=f"no station above {t:,} rides",
        )

        return f"""
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8" />
<title>{html.escape(title)}</title>
<style>
body {{
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
  margin: 24px;
  color: #1f2933;
}}
.sc-grid {{
  display: grid;
  grid-template-columns: 1fr 1fr;
  gap: 16px;
}}
.sc-card {{
  border: 1px solid #e4e7eb;
  border-radius: 8px;
  padding: 12px 16px;
}}
.sc-card-title {{
  font-weight: 600;
  margin-bottom: 8px;
}}
.sc-table {{
  border-collapse: collapse;
  width: 100%;
}}
.sc-table th, .sc-table td {{
  text-align: left;
  padding: 4px 8px;
  border-bottom: 1px solid #f0f2f4;
}}
.sc-empty {{
  color: #7b8794;
}}
</style>
</head>
<body>
<h1>{html.escape(title)}</h1>

<div class="sc-grid">
{stats_html}
</div>

<div class="sc-grid">
  <div class="sc-card">
    <div class="sc-card-title">Top {top_n} start stations</div>
    {top_start}
  </div>
  <div class="sc-card">
    <div class="sc-card-title">Top {top_n} end stations</div>
    {top_end}
  </div>
</div>

<div class="sc-card">
  <div class="sc-card-title">Stations above {t:,} rides (start or end)</div>
  <form method="get">
    <input type="number" name="threshold" value="{t}" min="0" step="1000" />
    <button type="submit">Apply</button>
  </form>
  {union_html}
</div>
</body>
</html>
"""

    @app.route("/union.json")
    def _union_json():
        t = _threshold()
        typed = request.args.get("typed", 0, type=int) == 1
        df = union_top_stations(engine, start_table, end_table, t, with_type=typed)
        return jsonify(
            {
                "threshold": t,
                "rows": [
                    {k: (int(v) if k == "ride_count" else v) for k, v in rec.items()}
                    for rec in df.to_dict(orient="records")
                ],
            }
        )

    return app


def serve_report(
    *,
    engine: sa.Engine,
    start_table: sa.Table,
    end_table: sa.Table,
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    threshold: int = UNION_THRESHOLD,
    title: str = "London Bikeshare Station Counts",
):
    app = build_report_app(
        engine=engine,
        start_table=start_table,
        end_table=end_table,
        threshold=threshold,
        title=title,
    )
    app.run(host=host, port=int(port), debug=bool(debug))
