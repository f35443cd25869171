"""Logging setup for brainlog.

Two outputs live under ``<data dir>/logs``:

- ``local-YYYY-MM-DD.log``: the regular ``brainlog`` logger output.
- ``sync-events-YYYY-MM-DD.log``: one line per sync/backup/logout event,
  meant for a quick audit of what left and reached the device.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .utils import get_brainlog_home

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Data directory passed to setup_brainlog_logging; None means "resolve from settings"
_data_dir: Optional[Path] = None


def _log_dir() -> Path:
    log_dir = get_brainlog_home(_data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def setup_brainlog_logging(
    level: str = "INFO", data_dir: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Configure the ``brainlog`` logger with a dated file handler.

    DEBUG additionally logs to the console. Calling this more than once does
    not add duplicate handlers.

    Args:
        level: Log level name.
        data_dir: Data directory for both log files (default: from settings).
    """
    global _data_dir
    _data_dir = Path(data_dir).expanduser() if data_dir else None

    logger = logging.getLogger("brainlog")
    log_level = getattr(logging, str(level).upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logger.setLevel(log_level)

    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        file_handler = logging.FileHandler(_log_dir() / f"local-{_today()}.log", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
    if log_level <= logging.DEBUG and not has_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console)

    return logger


def log_sync_event(event_type: str, details: str, user_id: Optional[str] = None) -> None:
    """Append one event line to today's sync-events log."""
    timestamp = datetime.now(timezone.utc).isoformat()
    line = f"{timestamp} | {event_type} | user={user_id or 'anonymous'} | {details}\n"
    try:
        with open(_log_dir() / f"sync-events-{_today()}.log", "a", encoding="utf-8") as f:
            f.write(line)
    except OSError as e:
        logging.getLogger(__name__).debug(f"Failed to write sync event: {e}")


def log_sync(user_id: str, total: int, pulled: int, kept_local: int, errors: int = 0) -> None:
    log_sync_event(
        "sync",
        f"total={total}, pulled={pulled}, kept_local={kept_local}, errors={errors}",
        user_id=user_id,
    )


def log_backup(user_id: str, count: int, ok: bool) -> None:
    log_sync_event("backup", f"count={count}, ok={ok}", user_id=user_id)


def log_logout(user_id: Optional[str], wiped: bool, backup_ok: bool) -> None:
    log_sync_event("logout", f"wiped={wiped}, backup_ok={backup_ok}", user_id=user_id)
