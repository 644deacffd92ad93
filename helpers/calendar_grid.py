"""Calendar grid generation and task-to-slot assignment.

Everything here is pure: the functions take a snapshot of tasks plus the
calendar configuration (week start and timezone) and return new values.
Nothing reads the process locale or the clock, so repeated calls with the
same inputs return equal results.

Weekdays follow :meth:`datetime.date.weekday` numbering (0 = Monday,
6 = Sunday).
"""
from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from dateutil.relativedelta import relativedelta

from utils.datetime_utils import ensure_utc

DateLike = Union[date, datetime]

MONDAY = 0
SUNDAY = 6
HOURS_PER_DAY = 24


class CalendarMode(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class SupportsDeadline(Protocol):
    id: Any
    deadline: Optional[datetime]


@dataclass(frozen=True)
class CalendarSlot:
    """One cell of a calendar grid: a whole day, or one hour of a day."""

    day: date
    hour: Optional[int] = None
    is_current_period: bool = True
    tasks: Tuple[Any, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.tasks

    @property
    def label(self) -> str:
        if self.hour is None:
            return str(self.day.day)
        return f"{self.hour:02d}:00"


# ---------------------------------------------------------------------------
# helpers


def _check_week_start(week_start_day: int) -> int:
    if not isinstance(week_start_day, int) or not MONDAY <= week_start_day <= SUNDAY:
        raise ValueError(f"week_start_day must be 0..6, got {week_start_day!r}")
    return week_start_day


def anchor_day(anchor: DateLike, tz: tzinfo) -> date:
    """Calendar day of ``anchor``; aware datetimes are read in ``tz``."""

    if isinstance(anchor, datetime):
        if anchor.tzinfo is not None:
            return anchor.astimezone(tz).date()
        return anchor.date()
    return anchor


def local_deadline(task: SupportsDeadline, tz: tzinfo) -> Optional[datetime]:
    """The task deadline as a wall-clock datetime in ``tz``, or ``None``.

    Tasks without a usable deadline are skipped by every grid builder.
    """
    deadline = getattr(task, "deadline", None)
    if not isinstance(deadline, datetime):
        return None
    return ensure_utc(deadline).astimezone(tz)


def _sort_key(task: SupportsDeadline) -> Tuple[datetime, str]:
    return ensure_utc(task.deadline), str(getattr(task, "id", ""))


def _bucket_by_day(tasks: Iterable[SupportsDeadline], tz: tzinfo) -> Dict[date, List[SupportsDeadline]]:
    buckets: Dict[date, List[SupportsDeadline]] = defaultdict(list)
    for task in tasks:
        local = local_deadline(task, tz)
        if local is None:
            continue
        buckets[local.date()].append(task)
    for items in buckets.values():
        items.sort(key=_sort_key)
    return buckets


def week_start_of(day: date, week_start_day: int) -> date:
    offset = (day.weekday() - _check_week_start(week_start_day)) % 7
    return day - timedelta(days=offset)


def week_end_of(day: date, week_start_day: int) -> date:
    return week_start_of(day, week_start_day) + timedelta(days=6)


def _days(first: date, last: date) -> List[date]:
    # date arithmetic is in calendar days, so DST shifts never matter here
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def _month_bounds(day: date) -> Tuple[date, date]:
    return day + relativedelta(day=1), day + relativedelta(day=31)


def grid_range(anchor: DateLike, mode: CalendarMode, week_start_day: int, tz: tzinfo) -> Tuple[date, date]:
    """First and last calendar day covered by the grid for ``mode``."""

    day = anchor_day(anchor, tz)
    mode = CalendarMode(mode)
    if mode is CalendarMode.MONTH:
        first, last = _month_bounds(day)
        return week_start_of(first, week_start_day), week_end_of(last, week_start_day)
    if mode is CalendarMode.WEEK:
        return week_start_of(day, week_start_day), week_end_of(day, week_start_day)
    return day, day


# ---------------------------------------------------------------------------
# grids


def build_month_grid(
    month_anchor: DateLike,
    tasks: Iterable[SupportsDeadline],
    week_start_day: int,
    tz: tzinfo,
    *,
    dim_padding: bool = False,
) -> List[Optional[CalendarSlot]]:
    """Whole weeks covering the month of ``month_anchor``.

    Days of the month become slots. Days borrowed from the neighbouring
    months keep their grid position but are ``None`` by default; with
    ``dim_padding`` they become slots with ``is_current_period=False``
    that still carry their tasks.
    """
    day = anchor_day(month_anchor, tz)
    first, last = grid_range(day, CalendarMode.MONTH, week_start_day, tz)
    buckets = _bucket_by_day(tasks, tz)

    grid: List[Optional[CalendarSlot]] = []
    for d in _days(first, last):
        in_month = d.year == day.year and d.month == day.month
        if not in_month and not dim_padding:
            grid.append(None)
            continue
        grid.append(CalendarSlot(day=d, is_current_period=in_month, tasks=tuple(buckets.get(d, ()))))
    return grid


def build_week_grid(
    anchor: DateLike,
    tasks: Iterable[SupportsDeadline],
    week_start_day: int,
    tz: tzinfo,
) -> List[CalendarSlot]:
    first, last = grid_range(anchor, CalendarMode.WEEK, week_start_day, tz)
    buckets = _bucket_by_day(tasks, tz)
    return [CalendarSlot(day=d, tasks=tuple(buckets.get(d, ()))) for d in _days(first, last)]


def build_day_grid(anchor: DateLike, tasks: Iterable[SupportsDeadline], tz: tzinfo) -> List[CalendarSlot]:
    """24 wall-clock hour slots for the anchor's day.

    On a DST day the skipped hour stays empty and both occurrences of a
    repeated hour share one slot.
    """
    day = anchor_day(anchor, tz)
    by_hour: Dict[int, List[SupportsDeadline]] = defaultdict(list)
    for task in tasks:
        local = local_deadline(task, tz)
        if local is None or local.date() != day:
            continue
        by_hour[local.hour].append(task)
    for items in by_hour.values():
        items.sort(key=_sort_key)
    return [CalendarSlot(day=day, hour=h, tasks=tuple(by_hour.get(h, ()))) for h in range(HOURS_PER_DAY)]


# ---------------------------------------------------------------------------
# navigation


def advance(anchor: DateLike, mode: CalendarMode, steps: int) -> DateLike:
    """Move ``anchor`` by ``steps`` months, weeks or days.

    Day and week moves are undone exactly by the negated move. Month moves
    clamp the day of month (Jan 31 + 1 month is Feb 28/29), so the negated
    move only restores the anchor when its day exists in both months; the
    1st always does.
    """
    mode = CalendarMode(mode)
    if mode is CalendarMode.MONTH:
        return anchor + relativedelta(months=steps)
    if mode is CalendarMode.WEEK:
        return anchor + timedelta(days=7 * steps)
    return anchor + timedelta(days=steps)


# ---------------------------------------------------------------------------
# filtering and rescheduling


def tasks_on_day(tasks: Iterable[SupportsDeadline], day: date, tz: tzinfo) -> List[SupportsDeadline]:
    return list(_bucket_by_day(tasks, tz).get(day, ()))


def tasks_in_hour(tasks: Iterable[SupportsDeadline], day: date, hour: int, tz: tzinfo) -> List[SupportsDeadline]:
    return [t for t in tasks_on_day(tasks, day, tz) if local_deadline(t, tz).hour == hour]


def move_to_slot(
    deadline: Optional[datetime],
    day: date,
    tz: tzinfo,
    *,
    hour: Optional[int] = None,
    default_hour: int = 9,
) -> datetime:
    """New deadline after a task is dropped onto a slot.

    The local date becomes ``day`` and the time of day is preserved. A
    day-mode slot also sets the hour, keeping minutes and seconds. A task
    without a deadline lands on ``hour`` (or ``default_hour``) sharp.
    """
    if hour is not None and not 0 <= hour < HOURS_PER_DAY:
        raise ValueError(f"hour must be 0..23, got {hour!r}")

    if not isinstance(deadline, datetime):
        target_hour = default_hour if hour is None else hour
        return datetime(day.year, day.month, day.day, target_hour, tzinfo=tz)

    local = ensure_utc(deadline).astimezone(tz)
    moved = local.replace(year=day.year, month=day.month, day=day.day)
    if hour is not None:
        moved = moved.replace(hour=hour)
    return moved


def weekday_labels(week_start_day: int) -> List[str]:
    start = _check_week_start(week_start_day)
    return [calendar.day_abbr[(start + i) % 7] for i in range(7)]


@dataclass(frozen=True)
class CalendarGridBuilder:
    """Grid builders bound to one calendar configuration."""

    week_start_day: int
    tz: tzinfo

    def __post_init__(self):
        _check_week_start(self.week_start_day)

    def month(self, anchor: DateLike, tasks: Iterable[SupportsDeadline]) -> List[Optional[CalendarSlot]]:
        return build_month_grid(anchor, tasks, self.week_start_day, self.tz)

    def week(self, anchor: DateLike, tasks: Iterable[SupportsDeadline]) -> List[CalendarSlot]:
        return build_week_grid(anchor, tasks, self.week_start_day, self.tz)

    def day(self, anchor: DateLike, tasks: Iterable[SupportsDeadline]) -> List[CalendarSlot]:
        return build_day_grid(anchor, tasks, self.tz)

    def build(
        self,
        mode: CalendarMode,
        anchor: DateLike,
        tasks: Sequence[SupportsDeadline],
    ) -> Sequence[Optional[CalendarSlot]]:
        mode = CalendarMode(mode)
        if mode is CalendarMode.MONTH:
            return self.month(anchor, tasks)
        if mode is CalendarMode.WEEK:
            return self.week(anchor, tasks)
        return self.day(anchor, tasks)

    def range(self, anchor: DateLike, mode: CalendarMode) -> Tuple[date, date]:
        return grid_range(anchor, mode, self.week_start_day, self.tz)


__all__ = [
    "CalendarGridBuilder",
    "CalendarMode",
    "CalendarSlot",
    "HOURS_PER_DAY",
    "MONDAY",
    "SUNDAY",
    "advance",
    "anchor_day",
    "build_day_grid",
    "build_month_grid",
    "build_week_grid",
    "grid_range",
    "local_deadline",
    "move_to_slot",
    "tasks_in_hour",
    "tasks_on_day",
    "week_start_of",
    "weekday_labels",
]
