"""Exit codes for the ingest console."""

INGEST_COMMITTED = 0  # Ingest ran; see the report for per-object failures
INGEST_QUIT = 1  # User cancelled (Ctrl+C or left the wizard)
INGEST_CONFIG_ERROR = 2  # Configuration rejected before any step was shown
