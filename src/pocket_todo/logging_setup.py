# src/pocket_todo/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "pocket_todo"
LOG_FILE_NAME = "pocket_todo.log"

# Set on handlers we install, so a second setup call replaces ours and leaves the
# host UI's handlers alone.
_OWNED_ATTR = "_pocket_todo_owned"


class _PackageFirstFilter(logging.Filter):
    """Pass everything from our package; let other loggers through only at `other_level`+."""

    def __init__(self, other_level: int = logging.ERROR) -> None:
        super().__init__()
        self.other_level = other_level

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == PACKAGE_LOGGER or record.name.startswith(PACKAGE_LOGGER + "."):
            return True
        return record.levelno >= self.other_level


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    level = logging.getLevelName(str(name or "").upper())
    return level if isinstance(level, int) else default


def _owned(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED_ATTR, True)
    return handler


def owned_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if getattr(h, _OWNED_ATTR, False)]


def setup_logging(
    *,
    log_dir: str | Path = ".local/pocket_todo",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a full file log on the root logger.

    Safe to call again (e.g. after a settings change): handlers from the previous
    call are replaced, handlers installed by anyone else stay. Returns the log file.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for h in owned_handlers():
        root.removeHandler(h)
        h.close()
    root.setLevel(min(console_level, file_level, root.level or logging.WARNING))

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = _owned(logging.StreamHandler(sys.stderr))
    console.setLevel(console_level)
    console.addFilter(_PackageFirstFilter())

    to_file = _owned(logging.FileHandler(log_file, encoding="utf-8"))
    to_file.setLevel(file_level)

    for h in (console, to_file):
        h.setFormatter(fmt)
        root.addHandler(h)

    logging.captureWarnings(True)
    return log_file
