# src/task_planner/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "planner.log"

# Longest matching prefix wins. Anything unlisted (third-party) needs ERROR.
CONSOLE_THRESHOLDS: dict[str, int] = {
    "task_planner": logging.DEBUG,
    "task_planner.core.feed": logging.WARNING,
    "task_planner.connectors.matrix_client": logging.WARNING,
    "task_planner.connectors.matrix_notifier": logging.WARNING,
    "py.warnings": logging.ERROR,
}


class _PlannerConsoleFilter(logging.Filter):
    """
    Keep the interactive prompt readable.

    Task, audit and reminder logs pass at the handler level. Snapshot feed
    chatter and Matrix delivery only show WARNING+. nio/aiohttp and captured
    warnings only show ERROR+.
    """

    def __init__(self, thresholds: dict[str, int] | None = None) -> None:
        super().__init__()
        # Sorted longest first so the most specific prefix is found first.
        items = (thresholds or CONSOLE_THRESHOLDS).items()
        self._thresholds = sorted(items, key=lambda kv: len(kv[0]), reverse=True)

    def threshold_for(self, name: str) -> int:
        for prefix, level in self._thresholds:
            if name == prefix or name.startswith(prefix + "."):
                return level
        return logging.ERROR

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.threshold_for(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/planner",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console gets filtered output for the prompt; planner.log in log_dir gets
    everything at file_level. Returns the log file path.

    Call once from main() before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_PlannerConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
