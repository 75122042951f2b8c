from __future__ import annotations

from typing import Optional

from rss_pipeline.adapters.db_postgres_core import PostgresAdapter

_ADAPTER: Optional[PostgresAdapter] = None


def get_adapter() -> PostgresAdapter:
    """Process-wide adapter; created on first use so imports stay free of I/O."""
    global _ADAPTER
    if _ADAPTER is None:
        _ADAPTER = PostgresAdapter()
    return _ADAPTER


__all__ = ["get_adapter"]
