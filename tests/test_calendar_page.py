from datetime import date, timezone
from pathlib import Path
from types import SimpleNamespace
import sys

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.config import AppConfig
from ui.app_shell import AppShell
from ui.pages.calendar import CalendarPage


class RecordingService:
    def __init__(self):
        self.calls = []

    def reschedule(self, task_id, day, *, tz, hour=None):
        self.calls.append((task_id, day, hour))
        return SimpleNamespace(id=task_id, deadline=None)


def _calendar(svc):
    app = SimpleNamespace(config=AppConfig(), tz=timezone.utc, svc=svc, page=SimpleNamespace())
    return CalendarPage(app)


def test_drop_reschedules_once_and_leaves_redraw_to_store_events(monkeypatch):
    svc = RecordingService()
    page = _calendar(svc)
    loads = []
    monkeypatch.setattr(page, "load", lambda: loads.append(True))

    page.current_drag_task_id = "task-1"
    page._on_drop_accept(SimpleNamespace(), date(2024, 3, 12), 15)

    assert svc.calls == [("task-1", date(2024, 3, 12), 15)]
    assert page.current_drag_task_id is None
    assert loads == []


def test_store_event_reloads_active_page_once():
    loads = []
    shell = AppShell.__new__(AppShell)
    shell._settings = SimpleNamespace(load=lambda: loads.append("settings"))
    shell._active = SimpleNamespace(load=lambda: loads.append("calendar"))

    shell._on_task_changed("task-1")
    assert loads == ["calendar"]

    shell._active = shell._settings
    shell._on_task_changed("task-1")
    assert loads == ["calendar"]
