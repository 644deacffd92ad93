"""Simple JSON-backed user preferences store."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from core.logs import get_logger
from core.settings import CALENDAR, CONFIG_PATH
from utils.datetime_utils import normalize_tz_name, resolve_tz

log = get_logger("config")

CALENDAR_MODES = ("month", "week", "day")


@dataclass
class AppConfig:
    """Calendar preferences persisted to ``config.json``."""

    week_start_day: int = CALENDAR.week_start_day
    timezone: str = CALENDAR.timezone
    calendar_mode: str = CALENDAR.mode

    def tzinfo(self):
        return resolve_tz(self.timezone)


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _load_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("Unreadable config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _normalize(config: AppConfig) -> AppConfig:
    try:
        week_start = int(config.week_start_day)
    except (TypeError, ValueError):
        week_start = -1
    if not 0 <= week_start <= 6:
        log.warning("Invalid week_start_day %r, using default", config.week_start_day)
        week_start = CALENDAR.week_start_day

    tz_name = normalize_tz_name(config.timezone)
    try:
        resolve_tz(tz_name)
    except ValueError:
        log.warning("Invalid timezone %r, using default", config.timezone)
        tz_name = CALENDAR.timezone

    mode = str(config.calendar_mode or "").lower()
    if mode not in CALENDAR_MODES:
        mode = CALENDAR.mode

    return AppConfig(week_start_day=week_start, timezone=tz_name, calendar_mode=mode)


def load_config(path: Optional[Path] = None) -> AppConfig:
    target = path or CONFIG_PATH
    data = _load_raw(target)
    defaults = AppConfig()
    return _normalize(
        AppConfig(
            week_start_day=data.get("week_start_day", defaults.week_start_day),
            timezone=data.get("timezone", defaults.timezone),
            calendar_mode=data.get("calendar_mode", defaults.calendar_mode),
        )
    )


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    target = path or CONFIG_PATH
    _ensure_parent(target)
    payload = json.dumps(asdict(_normalize(config)), ensure_ascii=False, indent=2, sort_keys=True)
    tmp = target.with_suffix(".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(target)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass


def update_config(path: Optional[Path] = None, **changes: Any) -> AppConfig:
    target = path or CONFIG_PATH
    cfg = load_config(target)
    for key, value in changes.items():
        if hasattr(cfg, key):
            setattr(cfg, key, value)
    cfg = _normalize(cfg)
    save_config(cfg, target)
    return cfg


__all__ = ["AppConfig", "CALENDAR_MODES", "load_config", "save_config", "update_config"]
