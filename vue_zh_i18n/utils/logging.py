"""
Unified logging helpers for vue-zh-i18n

- One package logger ("vue_zh_i18n"); modules log through child loggers via logging.getLogger(__name__).
- Writes to stderr with a terse "LEVEL: message" format; optionally also to a rotating log file.
- Honors the log level from the extraction config ("log_level", e.g. "INFO", "DEBUG").
- Provides a small helper to compact JSON for summary log lines.
"""

import json
import logging
import logging.handlers
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional, Union

LOGGER_NAME = "vue_zh_i18n"
LOG_FORMAT = "%(levelname)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


# ---------------------------
# Level helpers
# ---------------------------

def _level_from_string(level_str: Optional[str]) -> int:
    """Map string level to logging constant; defaults to INFO on unknown."""
    level = getattr(logging, str(level_str).upper(), None)
    return level if isinstance(level, int) else logging.INFO


# ---------------------------
# Public logger factory
# ---------------------------

def get_extract_logger(
    name: str = LOGGER_NAME,
    *,
    level: Union[int, str, None] = None,
    log_file: Union[str, Path, None] = None,
    file_count: int = 5,
    max_bytes: int = 1024 * 1024,
) -> logging.Logger:
    """
    Create or return the package logger.

    Handlers are attached once; calling again only adjusts the level and adds
    the rotating file handler if a new log file is requested.
    """
    logger = logging.getLogger(name)
    if not any(getattr(h, "_vue_zh_i18n", False) for h in logger.handlers):
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        h._vue_zh_i18n = True  # type: ignore[attr-defined]
        logger.addHandler(h)

    if log_file:
        path = Path(log_file)
        known = {getattr(h, "baseFilename", None) for h in logger.handlers}
        if str(path.resolve()) not in known:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                str(path), maxBytes=max_bytes, backupCount=file_count, encoding="utf-8"
            )
            fh.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
            logger.addHandler(fh)

    if isinstance(level, str) or level is None:
        level = _level_from_string(level)
    logger.setLevel(level)
    return logger


# ---------------------------
# Format utilities
# ---------------------------

def compact_json(obj: Any, limit: int = 1200) -> str:
    """Compact JSON string for logging; truncate if too long."""
    try:
        s = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        s = str(obj)
    return s if len(s) <= limit else s[:limit] + "…(truncated)"


# ---------------------------
# Temporary level override
# ---------------------------

@contextmanager
def temporarily(level: int, name: str = LOGGER_NAME):
    """
    Temporarily raise/lower the package logger level.

    Example:
        with temporarily(logging.DEBUG):
            # noisy section
            ...
    """
    logger = logging.getLogger(name)
    old = logger.level
    try:
        logger.setLevel(level)
        yield logger
    finally:
        logger.setLevel(old)
