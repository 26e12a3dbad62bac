import os

import sqlalchemy as sa

from stationcounts.config import PipelineConfig
from stationcounts.store.schema import station_tables
from stationcounts.viz.report import build_report_app

config = PipelineConfig.from_env()


def create_app():
  engine = sa.create_engine(config.database_url, pool_pre_ping=True)
  start_table, end_table = station_tables(config.start_table, config.end_table)
  return build_report_app(
      engine=engine,
      start_table=start_table,
      end_table=end_table,
      threshold=config.union_threshold,
  )


def main():
  port = int(os.environ.get("PORT", str(config.report_port)))

  create_app().run(
      host="0.0.0.0",  # reachable from outside the container
      port=port,
  )


if __name__ == "__main__":
  main()
