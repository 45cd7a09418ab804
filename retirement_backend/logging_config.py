"""
Logging setup for the API process.

Console output always; a rotating combined log file when a log directory is
configured.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LOGGING_CONFIGURED = False


def setup_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Configure the root logger once per process.

    Args:
        level: Root log level name (DEBUG, INFO, ...)
        log_dir: If given, also write combined.log there (10 MB x 5 backups)
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(levelname)-8s %(name)s: %(message)s"))
    root_logger.addHandler(console)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        combined_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "combined.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
            mode="a",
        )
        combined_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root_logger.addHandler(combined_handler)

    # werkzeug request lines are noise below WARNING
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
    logging.getLogger(__name__).info("Logging configured (level=%s, log_dir=%s)", level, log_dir)
