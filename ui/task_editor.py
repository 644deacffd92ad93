# ui/task_editor.py
from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

import flet as ft

from core.settings import UI
from helpers.datetime_utils import build_deadline, default_deadline, parse_date_input, parse_time_input
from models.task import Task
from services.tasks import TaskStoreError
from ui.dialogs import close_alert_dialog, open_alert_dialog, toast
from utils.datetime_utils import to_local

FORM = UI.task_form
DIALOG_WIDTH = UI.calendar.dialog_width_wide


class TaskEditor:
    """Add/edit dialog: name is required, description and deadline are optional."""

    def __init__(self, app):
        self.app = app

    def open(
        self,
        task: Optional[Task] = None,
        *,
        parent: Optional[Task] = None,
        on_saved: Optional[Callable[[Task], None]] = None,
    ):
        tz = self.app.tz
        if task is not None:
            start = to_local(task.deadline, tz)
        else:
            start = default_deadline(datetime.now(tz), step_minutes=FORM.deadline_step_minutes)

        name_tf = ft.TextField(
            label="Task name",
            value=task.name if task else "",
            max_length=FORM.name_max_length,
            autofocus=True,
        )
        desc_tf = ft.TextField(
            label="Description",
            value=task.description if task else "",
            multiline=True,
            min_lines=2,
            max_lines=6,
        )
        date_tf = ft.TextField(
            label="Date",
            hint_text="YYYY-MM-DD",
            value=start.strftime("%Y-%m-%d") if start else "",
            width=150,
        )
        time_tf = ft.TextField(
            label="Time",
            hint_text="HH:MM",
            value=start.strftime("%H:%M") if start else "",
            width=110,
        )

        def _on_date(e):
            value = e.control.value
            if isinstance(value, (date, datetime)):
                date_tf.value = value.strftime("%Y-%m-%d")
                self.app.page.update()

        def _on_time(e):
            value = e.control.value
            if value is not None:
                time_tf.value = value.strftime("%H:%M")
                self.app.page.update()

        dp = ft.DatePicker(
            first_date=datetime(2000, 1, 1),
            last_date=datetime(2100, 12, 31),
            value=start.replace(tzinfo=None) if start else None,
            on_change=_on_date,
        )
        tp = ft.TimePicker(value=start.time() if start else None, on_change=_on_time)

        def _clear_deadline(_):
            date_tf.value = ""
            time_tf.value = ""
            self.app.page.update()

        dates_row = ft.Row(
            [
                date_tf,
                ft.IconButton(
                    icon=ft.Icons.CALENDAR_MONTH,
                    tooltip="Pick a date",
                    on_click=lambda e: self.app.page.open(dp),
                ),
                time_tf,
                ft.IconButton(
                    icon=ft.Icons.SCHEDULE,
                    tooltip="Pick a time",
                    on_click=lambda e: self.app.page.open(tp),
                ),
                ft.TextButton("No deadline", on_click=_clear_deadline),
            ],
            spacing=8,
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )

        dlg = None

        def on_save(_):
            name = (name_tf.value or "").strip()
            if not name:
                name_tf.error_text = "Name is required"
                self.app.page.update()
                return
            if date_tf.value and parse_date_input(date_tf.value) is None:
                return toast(self.app.page, "Invalid date. Example: 2024-03-15")
            if time_tf.value and parse_time_input(time_tf.value) is None:
                return toast(self.app.page, "Invalid time. Example: 09:30")
            deadline = build_deadline(date_tf.value, time_tf.value, tz)

            try:
                if task is None:
                    saved = self.app.svc.add(
                        name,
                        desc_tf.value,
                        deadline,
                        parent_id=parent.id if parent else None,
                    )
                else:
                    saved = self.app.svc.update(
                        task.id,
                        name=name,
                        description=desc_tf.value,
                        deadline=deadline,
                    )
            except TaskStoreError as exc:
                return toast(self.app.page, f"Not saved: {exc}")

            close_alert_dialog(self.app.page, dlg)
            if saved is None:
                return toast(self.app.page, "Task no longer exists")
            toast(self.app.page, "Saved")
            if on_saved:
                on_saved(saved)

        if task is not None:
            title = "Edit task"
        elif parent is not None:
            title = f"Add subtask to “{parent.name}”"
        else:
            title = "Add task"

        dlg = open_alert_dialog(
            self.app.page,
            title=title,
            content=ft.Column([name_tf, desc_tf, dates_row], spacing=12, tight=True),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_alert_dialog(self.app.page, dlg)),
                ft.FilledButton("Save", icon=ft.Icons.SAVE, on_click=on_save),
            ],
            width=DIALOG_WIDTH,
        )
        return dlg
