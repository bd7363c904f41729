"""Settings for the ingest console: built-in defaults < config/settings.yaml < INGEST_* env."""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_DEFAULTS: dict[str, Any] = {
    "steps": {
        "dir": "sandbox/steps",
    },
    "session": {
        "db_path": "sandbox/data/sessions.db",
        "timeout_sec": 1800,  # idle sessions older than this are abandoned
        "busy_timeout": 5000,
    },
    "repository": {
        "base_location": "objects",
    },
    "ingest": {
        # Used when the console is started without --config
        "models": ["ingest:basicCModel"],
        "collections": [],
    },
    "logging": {
        "file": "sandbox/logs/ingest.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 10485760,
        "backup_count": 3,
    },
}

# env var -> dotted settings path
_ENV_OVERRIDES: dict[str, str] = {
    "INGEST_LOG_LEVEL": "logging.level",
    "INGEST_STEPS_DIR": "steps.dir",
    "INGEST_SESSION_DB": "session.db_path",
}

_DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

_cached: dict[str, Any] | None = None


def _merge_into(target: dict[str, Any], overlay: dict[str, Any]) -> None:
    """Overlay nested mappings onto target in place; None values keep the default."""
    for key, value in overlay.items():
        if value is None:
            continue
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _merge_into(current, value)
        else:
            target[key] = value


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level must be a mapping", path)
        return {}
    return data


def get_default_settings() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Look up a dotted path such as 'session.timeout_sec'."""
    node: Any = settings
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def reload_settings() -> None:
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Return the merged settings. Cached until reload_settings()."""
    global _cached
    if _cached is not None:
        return _cached

    settings = get_default_settings()
    _merge_into(settings, _read_yaml((config_dir or _DEFAULT_CONFIG_DIR) / "settings.yaml"))

    for env_name, dotted in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        *parents, leaf = dotted.split(".")
        node = settings
        for key in parents:
            node = node.setdefault(key, {})
        node[leaf] = value

    _cached = settings
    return settings
