# tests/test_config.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gridtick.config import Settings
from gridtick.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for suffix in (
        "APP_NAME",
        "LOG_LEVEL",
        "DATA_DIR",
        "SCHEDULER_LOG",
        "HEARTBEAT_INTERVAL_MS",
        "HEARTBEAT_OFFSET_MS",
        "HEARTBEAT_NAMES",
    ):
        monkeypatch.delenv(f"GRIDTICK_{suffix}", raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()

    assert s.app_name == "gridtick"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/gridtick")
    assert s.scheduler_log is True
    assert s.heartbeat_interval_ms == 60_000
    assert s.heartbeat_offset_ms == 0
    assert s.heartbeat_names == ["heartbeat"]


def test_values_from_env(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("GRIDTICK_DATA_DIR", str(tmp_path))
    clean_env.setenv("GRIDTICK_SCHEDULER_LOG", "off")
    clean_env.setenv("GRIDTICK_HEARTBEAT_INTERVAL_MS", "5000")
    clean_env.setenv("GRIDTICK_HEARTBEAT_OFFSET_MS", "not-a-number")
    clean_env.setenv("GRIDTICK_HEARTBEAT_NAMES", "cleanup, poll metrics")

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.scheduler_log is False
    assert s.heartbeat_interval_ms == 5000
    assert s.heartbeat_offset_ms == 0
    assert s.heartbeat_names == ["cleanup", "poll", "metrics"]


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_own_logs_and_drops_noise() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("gridtick.tasks.task_scheduler", logging.DEBUG))
    assert not f.filter(_record("asyncio", logging.WARNING))
    assert f.filter(_record("asyncio", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))


def test_setup_logging_writes_to_app_named_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    # Detach pytest's handlers so setup_logging() does not close them.
    for h in saved_handlers:
        root.removeHandler(h)
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", app_name="janitor")
        logging.getLogger("gridtick.test").debug("written to file")
        for h in root.handlers:
            h.flush()

        assert log_file == tmp_path / "logs" / "janitor.log"
        assert "written to file" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
