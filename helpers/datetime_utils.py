"""Parsing and normalizing of date/time input typed into the task form."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional


def snap_minutes(value: int, *, step: int, direction: str = "forward") -> int:
    """Snap ``value`` to ``step`` minutes using the provided ``direction``.

    ``direction`` can be ``forward`` (ceil), ``nearest`` or ``backward``.
    """

    if step <= 0:
        return value
    if direction == "nearest":
        return int(round(value / step) * step)
    remainder = value % step
    if remainder == 0:
        return value
    if direction == "backward":
        return value - remainder
    # forward (ceil)
    return value + (step - remainder)


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_date_input(value: str | None, *, today: Optional[date] = None) -> Optional[date]:
    """Parse ``DD.MM.YYYY`` or ISO ``YYYY-MM-DD`` string into a ``date`` object."""

    if not value:
        return None
    text = value.strip()
    if not text:
        return None

    for fmt in ("%Y-%m-%d", "%d.%m.%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    # dd.mm without year -> current year
    if len(text) == 5 and text[2] == ".":
        day = _parse_int(text[:2])
        month = _parse_int(text[3:])
        year = (today or date.today()).year
        if day is None or month is None:
            return None
        try:
            return date(year, month, day)
        except ValueError:
            return None
    return None


def parse_time_input(
    value: str | None,
    *,
    allow_relative: bool = True,
    now: Optional[datetime] = None,
) -> Optional[time]:
    """Parse ``HH:MM`` strings or relative shortcuts like ``now+30``."""

    if not value:
        return None
    text = value.strip().lower()
    if not text:
        return None

    if allow_relative and text.startswith("now"):
        parts = text.split("+", 1)
        minutes = _parse_int(parts[1]) if len(parts) == 2 else 0
        minutes = max(minutes or 0, 0)
        base = (now or datetime.now()).replace(second=0, microsecond=0) + timedelta(minutes=minutes)
        return time(base.hour, base.minute)

    for fmt in ("%H:%M", "%H.%M"):
        try:
            dt = datetime.strptime(text, fmt)
            return time(dt.hour, dt.minute)
        except ValueError:
            continue

    # short hhmm (930 -> 09:30)
    if len(text) in {3, 4} and text.isdigit():
        hours = _parse_int(text[:-2])
        minutes = _parse_int(text[-2:])
        if hours is not None and minutes is not None and 0 <= hours <= 23 and 0 <= minutes <= 59:
            return time(hours, minutes)

    return None


def default_deadline(now: datetime, *, step_minutes: int) -> datetime:
    """Deadline pre-filled in a new task form: ``now`` rounded up to the next step."""

    base = now.replace(second=0, microsecond=0)
    total = base.hour * 60 + base.minute
    snapped = snap_minutes(total + 1, step=step_minutes, direction="forward")
    return base.replace(hour=0, minute=0) + timedelta(minutes=snapped)


def build_deadline(
    raw_date: str | None,
    raw_time: str | None,
    tz: tzinfo,
    *,
    today: Optional[date] = None,
) -> Optional[datetime]:
    """Combine form inputs into an aware deadline in ``tz``.

    A date without a time means midnight; a time without a date means today.
    Returns ``None`` when both inputs are empty or unparseable.
    """

    parsed_date = parse_date_input(raw_date, today=today)
    parsed_time = parse_time_input(raw_time)

    if parsed_date is None and parsed_time is None:
        return None
    base = parsed_date or today or datetime.now(tz).date()
    return datetime.combine(base, parsed_time or time(0, 0), tzinfo=tz)


__all__ = [
    "build_deadline",
    "default_deadline",
    "parse_date_input",
    "parse_time_input",
    "snap_minutes",
]
