"""Entry point: python -m console [--config ingest.yaml] [--session ID]."""

import argparse
import sys
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from console.constants import INGEST_CONFIG_ERROR, INGEST_QUIT
from console.runner import build_engine, build_session_store, run_console
from ingest.logging_config import setup_logging
from ingest.settings import get_setting, load_settings

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _read_configuration(path: Path | None, settings: dict) -> dict[str, Any]:
    """Ingest configuration from a YAML file, or the ingest: section of settings."""
    if path is None:
        return dict(get_setting(settings, "ingest", {}) or {})
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Ingest configuration must be a YAML object: {path}")
    return data


def main(argv: list[str] | None = None) -> int:
    """Run the ingest wizard in the terminal. Returns an exit code."""
    parser = argparse.ArgumentParser(prog="python -m console", description=__doc__)
    parser.add_argument("--config", type=Path, help="YAML ingest configuration")
    parser.add_argument("--session", help="resume a saved session")
    args = parser.parse_args(argv)

    load_dotenv(_PROJECT_ROOT / ".env")
    settings = load_settings()
    setup_logging(_PROJECT_ROOT, settings)

    try:
        configuration = _read_configuration(args.config, settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Cannot read ingest configuration: {e}")
        return INGEST_CONFIG_ERROR

    engine = build_engine(_PROJECT_ROOT, settings)
    store = build_session_store(_PROJECT_ROOT, settings)
    try:
        return run_console(engine, store, configuration, session_id=args.session).exit_code
    except KeyboardInterrupt:
        print("\n\nIngest cancelled.")
        return INGEST_QUIT


if __name__ == "__main__":
    sys.exit(main())
