# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from task_planner.logging_setup import _PlannerConsoleFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("task_planner.notifications.reminder", logging.INFO, True),
        ("task_planner.tasks.audit", logging.DEBUG, True),
        ("task_planner.core.feed", logging.DEBUG, False),
        ("task_planner.core.feed", logging.WARNING, True),
        ("task_planner.connectors.matrix_notifier", logging.INFO, False),
        ("task_planner.connectors.console_connector", logging.INFO, True),
        ("nio.rooms", logging.WARNING, False),
        ("aiohttp.client", logging.ERROR, True),
        ("py.warnings", logging.WARNING, False),
    ],
)
def test_console_filter_thresholds(name: str, level: int, shown: bool) -> None:
    assert _PlannerConsoleFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("task_planner.tests").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert log_file == tmp_path / "logs" / "planner.log"
        assert "hello file" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
        logging.captureWarnings(False)
