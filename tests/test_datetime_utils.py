from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from zoneinfo import ZoneInfo
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
import tzlocal

from helpers.calendar_grid import build_month_grid
from helpers.datetime_utils import (
    build_deadline,
    default_deadline,
    parse_date_input,
    parse_time_input,
    snap_minutes,
)
from utils.datetime_utils import UTC, ensure_utc, normalize_tz_name, resolve_tz, to_local


def test_parse_date_input_iso_and_dotted():
    assert parse_date_input("2023-12-01").isoformat() == "2023-12-01"
    assert parse_date_input("01.12.2023").isoformat() == "2023-12-01"
    assert parse_date_input("15.03", today=date(2024, 1, 1)) == date(2024, 3, 15)


def test_parse_date_input_rejects_garbage():
    assert parse_date_input("") is None
    assert parse_date_input("   ") is None
    assert parse_date_input("31.02", today=date(2024, 1, 1)) is None
    assert parse_date_input("tomorrow") is None


def test_parse_time_input_relative_now():
    now = datetime(2024, 1, 1, 10, 45, 12)
    assert parse_time_input("now+30", now=now) == time(11, 15)
    assert parse_time_input("NOW", now=now) == time(10, 45)
    assert parse_time_input("now+30", allow_relative=False, now=now) is None


def test_parse_time_input_formats():
    assert parse_time_input("14:30") == time(14, 30)
    assert parse_time_input("9.15") == time(9, 15)
    assert parse_time_input("930") == time(9, 30)
    assert parse_time_input("2359") == time(23, 59)
    assert parse_time_input("2560") is None
    assert parse_time_input("lunch") is None


def test_default_deadline_rounds_up_to_next_step():
    assert default_deadline(datetime(2024, 1, 1, 10, 7), step_minutes=30) == datetime(2024, 1, 1, 10, 30)
    # exactly on a step still moves forward
    assert default_deadline(datetime(2024, 1, 1, 10, 30), step_minutes=30) == datetime(2024, 1, 1, 11, 0)
    assert default_deadline(datetime(2024, 1, 1, 23, 50), step_minutes=30) == datetime(2024, 1, 2, 0, 0)


def test_build_deadline_combines_inputs_in_timezone():
    berlin = ZoneInfo("Europe/Berlin")
    dt = build_deadline("15.03.2024", "14:30", berlin)
    assert dt == datetime(2024, 3, 15, 14, 30, tzinfo=berlin)
    assert ensure_utc(dt) == datetime(2024, 3, 15, 13, 30, tzinfo=UTC)

    assert build_deadline("2024-03-15", "", UTC) == datetime(2024, 3, 15, tzinfo=UTC)
    assert build_deadline(None, "08:00", UTC, today=date(2024, 5, 1)) == datetime(2024, 5, 1, 8, tzinfo=UTC)
    assert build_deadline("", "", UTC) is None


def test_snap_minutes_rounding():
    assert snap_minutes(17, step=15, direction="nearest") == 15
    assert snap_minutes(8, step=15, direction="forward") == 15
    assert snap_minutes(22, step=15, direction="backward") == 15
    assert snap_minutes(22, step=0) == 22


def test_normalize_tz_name():
    assert normalize_tz_name(None) == "local"
    assert normalize_tz_name(" system ") == "local"
    assert normalize_tz_name("z") == "UTC"
    assert normalize_tz_name("Europe/Berlin") == "Europe/Berlin"


def test_resolve_tz_variants():
    assert resolve_tz("UTC") is UTC
    assert resolve_tz("+05:30").utcoffset(None) == timedelta(hours=5, minutes=30)
    assert resolve_tz("-0800").utcoffset(None) == timedelta(hours=-8)
    assert resolve_tz("Europe/Berlin") == ZoneInfo("Europe/Berlin")


@pytest.fixture()
def new_york_local(monkeypatch):
    monkeypatch.setenv("TZ", "America/New_York")
    tzlocal.reload_localzone()
    yield
    monkeypatch.undo()
    tzlocal.reload_localzone()


@pytest.mark.skipif(sys.platform.startswith("win"), reason="TZ variable is read on POSIX only")
def test_local_timezone_follows_dst(new_york_local):
    tz = resolve_tz("local")
    assert datetime(2024, 1, 15, 12, tzinfo=tz).utcoffset() == timedelta(hours=-5)
    assert datetime(2024, 7, 15, 12, tzinfo=tz).utcoffset() == timedelta(hours=-4)

    # 04:30 UTC on Jan 16 is still the evening of Jan 15 in winter time
    task = SimpleNamespace(id="late", deadline=datetime(2024, 1, 16, 4, 30, tzinfo=UTC))
    grid = build_month_grid(date(2024, 1, 1), [task], 0, tz)
    assert [slot.day for slot in grid if slot is not None and slot.tasks] == [date(2024, 1, 15)]


@pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "+25:00", "../etc/passwd"])
def test_resolve_tz_rejects_unknown(name):
    with pytest.raises(ValueError):
        resolve_tz(name)


def test_ensure_utc_treats_naive_as_utc():
    assert ensure_utc(None) is None
    assert ensure_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=UTC)
    plus_two = timezone(timedelta(hours=2))
    assert ensure_utc(datetime(2024, 1, 1, 12, tzinfo=plus_two)).hour == 10
    assert to_local(datetime(2024, 1, 1, 23), plus_two).date() == date(2024, 1, 2)
