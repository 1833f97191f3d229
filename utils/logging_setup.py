import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def _resolve_level(level):
    """Accept an int, a level name, or None (falls back to LOG_LEVEL, then DEBUG)."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "DEBUG")
    if isinstance(level, str):
        resolved = getattr(logging, level.upper(), None)
        return resolved if isinstance(resolved, int) else logging.DEBUG
    return level


def get_logger(name: str, log_file: str = None, level=None):
    """
    Returns a logger with console + optional file handler.

    Args:
        name: Logger name (usually __name__)
        log_file: Optional filename in the log dir (e.g., "adapters.log").
                  The dir is LOG_DIR, defaulting to logs/
        level: Logging level; defaults to the LOG_LEVEL env variable
    """
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers if called multiple times
    if logger.handlers:
        return logger

    resolved = _resolve_level(level)
    logger.setLevel(resolved)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (several modules share one file per layer, so append)
    if log_file:
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / log_file, mode='a')
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
