"""Utilities for UTC storage and local-timezone presentation of datetimes."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import tzlocal

UTC = timezone.utc

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return ``dt`` in UTC; naive values are taken to already be UTC."""

    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_local(dt: Optional[datetime], tz: tzinfo) -> Optional[datetime]:
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(tz)


def normalize_tz_name(name: Optional[str]) -> str:
    """Canonical form for timezone identifiers kept in the user config.

    ``None``/empty/``system`` map to ``local``; ``Z``/``GMT`` map to ``UTC``.
    Anything else (IANA names, ``+02:00`` offsets) is kept as given.
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"
    low = s.lower()
    if low in {"local", "system"}:
        return "local"
    if low in {"utc", "z", "gmt"}:
        return "UTC"
    return s


def resolve_tz(name: Optional[str]) -> tzinfo:
    """Resolve a timezone name into a ``tzinfo``.

    Raises ``ValueError`` for identifiers that cannot be resolved.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return UTC

    if tz_name == "local":
        # DST-aware zone, not a snapshot of the current offset
        return tzlocal.get_localzone()

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh, mm = int(hh_s), int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return timezone(timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def today_in(tz: tzinfo) -> date:
    return datetime.now(tz=tz).date()


__all__ = [
    "UTC",
    "ensure_utc",
    "normalize_tz_name",
    "resolve_tz",
    "to_local",
    "today_in",
    "utc_now",
]
