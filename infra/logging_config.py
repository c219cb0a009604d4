# infra/logging_config.py
from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from infra.operational_support import TraceIdLogFilter
from infra.path import user_data_dir


def setup_logging(level: int = logging.INFO, log_dir: Path | None = None) -> Path:
    """
    Configure root logging: a rotating file under the per-user data dir plus
    the console. Every record carries the trace id of the run that emitted it.
    Returns the log file path.
    """
    log_dir = log_dir or user_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "app.log"

    logger = logging.getLogger()
    logger.setLevel(level)

    # repeated calls must not stack handlers
    logger.handlers.clear()

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,  # 1 MB per file
        backupCount=5,
        encoding="utf-8",
    )
    trace_filter = TraceIdLogFilter()
    file_handler.addFilter(trace_filter)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] trace=%(trace_id)s %(name)s - %(message)s")
    )
    logger.addHandler(file_handler)

    console = logging.StreamHandler()
    console.addFilter(trace_filter)
    console.setFormatter(logging.Formatter("%(levelname)s [trace=%(trace_id)s]: %(message)s"))
    logger.addHandler(console)

    logger.info("Logging initialized. Log file at %s", log_file)
    return log_file
