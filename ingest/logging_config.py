"""Root logger setup for the ingest console and anything embedding the engine."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# aiosqlite logs every statement at DEBUG
_QUIET_LOGGERS = ("aiosqlite", "asyncio")


def _level(value: Any, fallback: int = logging.INFO) -> int:
    return getattr(logging, str(value).upper(), fallback)


def setup_logging(project_root: Path, settings: dict[str, Any]) -> Path:
    """Send all records to a rotating log file under project_root; returns its path.

    The console stays silent unless logging.log_to_console is set, since
    questionary owns the terminal while the wizard runs. Step plugins log
    under "steps.<id>" and may get their own level via logging.steps_level.
    """
    cfg = settings.get("logging", {})
    level = _level(cfg.get("level", "INFO"))
    log_path = project_root / cfg.get("file", "sandbox/logs/ingest.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
            backupCount=int(cfg.get("backup_count", 3)),
            encoding="utf-8",
        )
    ]
    if cfg.get("log_to_console", False):
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)
    root.setLevel(level)
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        root.addHandler(h)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    if "steps_level" in cfg:
        logging.getLogger("steps").setLevel(_level(cfg["steps_level"], level))
    return log_path
