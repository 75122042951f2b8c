"""Create the feed, item and settings tables described in database/schema.sql."""
from __future__ import annotations

from pathlib import Path

from rss_pipeline.adapters.db_postgres_core import connect
from rss_pipeline.config import get_settings

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def main() -> None:
    with connect(get_settings()) as conn:
        conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
    print(f"Applied {SCHEMA_PATH.relative_to(SCHEMA_PATH.parents[1])}.")


if __name__ == "__main__":
    main()
