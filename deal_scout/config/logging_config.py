# deal_scout/config/logging_config.py

"""Per-run timestamped logging configuration for deal_scout.

Every launch gets its own log file inside ``logs/`` named after the
launch timestamp (e.g. ``logs/run_20260214_153045.log``). All
``deal_scout.*`` loggers propagate to the project logger configured
here, so gateway, extractor and pipeline output end up in one file.

Detail pages and deal sources are fetched on worker threads, so the
file format carries the thread name. The console only sees warnings
and errors; the CLI prints its own status lines through ``rich``.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from deal_scout.config.settings import Settings

PROJECT_LOGGER = "deal_scout"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_STDERR_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configured(
    handler: logging.Handler, level: int, fmt: str,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=_TIMESTAMP_FORMAT))
    return handler


def setup_logging(logs_dir: Path | None = None) -> Path:
    """Initialise the ``deal_scout`` logger for the current run.

    Args:
        logs_dir: Override for the log directory (defaults to
            ``Settings.LOGS_DIR``).

    Returns:
        The :class:`~pathlib.Path` of the log file for this run.
    """
    target_dir: Path = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, TUI relaunch) keep the first handlers
    if project_logger.handlers:
        return log_file

    project_logger.addHandler(
        _configured(
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.DEBUG,
            _FILE_FORMAT,
        )
    )
    project_logger.addHandler(
        _configured(
            logging.StreamHandler(sys.stderr),
            logging.WARNING,
            _STDERR_FORMAT,
        )
    )
    project_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
