"""Interactive terminal driver for the ingest wizard."""

from console.constants import INGEST_COMMITTED, INGEST_CONFIG_ERROR, INGEST_QUIT

__all__ = ["INGEST_COMMITTED", "INGEST_QUIT", "INGEST_CONFIG_ERROR"]
