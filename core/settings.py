"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``.

    ``SMARTTASK_DATA_DIR`` in the environment wins over the platform default.
    """

    platform_id = (platform or sys.platform).lower()
    environ = dict(os.environ if env is None else env)
    override = (environ.get("SMARTTASK_DATA_DIR") or "").strip()
    if override:
        return Path(override).expanduser()

    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = home_dir / "Library" / "Application Support"
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "SmartTask"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "tasks.db"
CONFIG_PATH = DATA_DIR / "config.json"
LOG_PATH = LOG_DIR / "smarttask.log"


@dataclass(frozen=True)
class ThemeColors:
    safe_surface_bg: str = "#F1F5F9"
    outline: str = "#E5E7EB"
    surface_variant: str = "#F1F5F9"
    text_subtle: str = "#6B7280"
    today_bg: str = "#EEF2FF"
    selected_bg: str = "#DBEAFE"
    padding_bg: str = "#F8FAFC"
    chip: str = "#BFDBFE"
    chip_text: str = "#1F2937"
    unscheduled_bg: str = "#FFF59D"
    danger: str = "#DC2626"


@dataclass(frozen=True)
class CalendarUISettings:
    month_cell_height: int = 100
    week_row_height: int = 100
    hour_row_height: int = 60
    weekday_column_width: int = 56
    hours_column_width: int = 64
    side_panel_width: int = 220
    chips_spacing: int = 2
    max_chips_in_month_cell: int = 3
    dialog_width_narrow: int = 460
    dialog_width_wide: int = 620


@dataclass(frozen=True)
class CalendarDefaults:
    """Defaults used until the user saves their own preferences."""

    week_start_day: int = 0  # Monday, ``date.weekday()`` numbering
    timezone: str = "local"
    mode: str = "month"
    default_hour: int = 9


@dataclass(frozen=True)
class TaskFormSettings:
    deadline_step_minutes: int = 30
    name_max_length: int = 200


@dataclass(frozen=True)
class UISettings:
    app_title: str = APP_NAME
    theme_mode: str = "system"
    color_scheme_seed: str = "#2563EB"
    window_min_width: int = 900
    window_min_height: int = 600
    theme: ThemeColors = ThemeColors()
    calendar: CalendarUISettings = CalendarUISettings()
    task_form: TaskFormSettings = TaskFormSettings()


UI = UISettings()
CALENDAR = CalendarDefaults()


@dataclass(frozen=True)
class LogSettings:
    path: Path = LOG_PATH
    level: str = "INFO"
    max_bytes: int = 1_000_000
    backup_count: int = 3


LOGGING = LogSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "LOG_PATH",
    "UI",
    "CALENDAR",
    "LOGGING",
    "get_default_data_dir",
]
