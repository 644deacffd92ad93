"""Application logging: one rotating file shared by every module."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.settings import LOGGING

ROOT_LOGGER = "smarttask"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _ensure_root(path: Path) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=LOGGING.max_bytes,
            backupCount=LOGGING.backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOGGING.level)
    return root


def get_logger(name: Optional[str] = None, *, path: Optional[Path] = None) -> logging.Logger:
    """Return ``smarttask`` or one of its children, attaching the file handler once."""

    root = _ensure_root(Path(path or LOGGING.path))
    if not name:
        return root
    return root.getChild(name)


def read_log(lines: int = 100, *, path: Optional[Path] = None) -> str:
    target = Path(path or LOGGING.path)
    try:
        with open(target, "r", encoding="utf-8") as fh:
            content = fh.readlines()
    except FileNotFoundError:
        return "No log entries yet."
    content = [line.rstrip("\n") for line in content[-lines:]]
    return "\n".join(content)


__all__ = ["get_logger", "read_log", "ROOT_LOGGER", "LOG_FORMAT"]
