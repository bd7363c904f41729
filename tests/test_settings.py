"""Tests for settings loading and logging setup."""

import logging
import logging.handlers
from pathlib import Path

import pytest

from ingest.logging_config import setup_logging
from ingest.settings import get_default_settings, get_setting, load_settings


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)
        assert settings == get_default_settings()
        assert get_setting(settings, "session.timeout_sec") == 1800

    def test_yaml_merged_over_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text(
            "session:\n  timeout_sec: 60\ningest:\n  models: [demo:model]\n  label: Demo\n",
            encoding="utf-8",
        )
        settings = load_settings(tmp_path)
        assert get_setting(settings, "session.timeout_sec") == 60
        assert get_setting(settings, "session.busy_timeout") == 5000
        assert settings["ingest"]["models"] == ["demo:model"]
        assert settings["ingest"]["label"] == "Demo"

    def test_unreadable_yaml_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text("session: [unclosed\n", encoding="utf-8")
        assert load_settings(tmp_path) == get_default_settings()

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INGEST_STEPS_DIR", "/srv/steps")
        monkeypatch.setenv("INGEST_LOG_LEVEL", "DEBUG")
        settings = load_settings(tmp_path)
        assert get_setting(settings, "steps.dir") == "/srv/steps"
        assert get_setting(settings, "logging.level") == "DEBUG"

    def test_cached_until_reload(self, tmp_path: Path) -> None:
        first = load_settings(tmp_path)
        (tmp_path / "settings.yaml").write_text("steps:\n  dir: other\n", encoding="utf-8")
        assert load_settings(tmp_path) is first

    def test_defaults_are_copies(self) -> None:
        get_default_settings()["ingest"]["models"].append("x")
        assert get_default_settings()["ingest"]["models"] == ["ingest:basicCModel"]

    def test_get_setting_missing(self) -> None:
        assert get_setting({"a": {"b": 1}}, "a.c", "dflt") == "dflt"
        assert get_setting({"a": 1}, "a.b") is None


class TestSetupLogging:
    def test_file_handler_created(self, tmp_path: Path) -> None:
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            log_path = setup_logging(
                tmp_path,
                {"logging": {"file": "logs/test.log", "level": "debug", "steps_level": "error"}},
            )
            assert log_path == tmp_path / "logs" / "test.log"
            assert log_path.parent.is_dir()
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0], logging.handlers.RotatingFileHandler)
            assert logging.getLogger("aiosqlite").level == logging.WARNING
            assert logging.getLogger("steps").level == logging.ERROR
        finally:
            for h in root.handlers[:]:
                root.removeHandler(h)
                h.close()
            for h in saved[0]:
                root.addHandler(h)
            root.setLevel(saved[1])
            logging.getLogger("steps").setLevel(logging.NOTSET)
