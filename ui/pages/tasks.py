# ui/pages/tasks.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import flet as ft

from core.settings import UI
from helpers.datetime_utils import parse_date_input
from services.tasks import TaskStoreError
from ui.dialogs import toast
from ui.task_details import format_deadline, open_task_details

THEME = UI.theme


class TasksPage:
    """Table of top-level tasks with text and day filters."""

    def __init__(self, app):
        self.app = app

        self.search_tf = ft.TextField(
            label="Search",
            hint_text="Words from the name or description",
            expand=True,
            prefix_icon=ft.Icons.SEARCH,
            on_change=self._on_filters_changed,
        )
        self.day_tf = ft.TextField(
            label="Due on",
            hint_text="YYYY-MM-DD",
            width=160,
            on_submit=self._on_filters_changed,
            on_blur=self._on_filters_changed,
        )
        self.day_picker = ft.DatePicker(
            first_date=datetime(2000, 1, 1),
            last_date=datetime(2100, 12, 31),
            on_change=self._on_day_picked,
        )
        self.day_btn = ft.IconButton(
            icon=ft.Icons.CALENDAR_MONTH,
            tooltip="Pick a date",
            on_click=lambda e: self.app.page.open(self.day_picker),
        )
        self.reset_btn = ft.TextButton("Reset", icon=ft.Icons.REFRESH, on_click=self._on_reset)

        self.result_info = ft.Text("", size=12, color=THEME.text_subtle)
        self.table = ft.DataTable(
            columns=[
                ft.DataColumn(ft.Text("Name")),
                ft.DataColumn(ft.Text("Description")),
                ft.DataColumn(ft.Text("Deadline")),
                ft.DataColumn(ft.Text("Subtasks"), numeric=True),
            ],
            rows=[],
            expand=True,
            show_checkbox_column=False,
        )

        self.view = ft.Container(
            content=ft.Column(
                [
                    ft.Text("Tasks", size=24, weight=ft.FontWeight.BOLD),
                    ft.Row(
                        [self.search_tf, self.day_tf, self.day_btn, self.reset_btn],
                        spacing=12,
                        vertical_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    self.result_info,
                    ft.Column([self.table], expand=True, scroll=ft.ScrollMode.AUTO),
                ],
                spacing=16,
                expand=True,
            ),
            expand=True,
            padding=20,
        )

    def activate_from_menu(self):
        self.load()

    # ---------- Filters ----------
    def _on_filters_changed(self, _):
        self.load()

    def _on_day_picked(self, e):
        value = e.control.value
        if isinstance(value, (date, datetime)):
            self.day_tf.value = value.strftime("%Y-%m-%d")
        self.load()

    def _on_reset(self, _):
        self.search_tf.value = ""
        self.day_tf.value = ""
        self.load()

    def _selected_day(self) -> Optional[date]:
        return parse_date_input(self.day_tf.value)

    # ---------- Data ----------
    def load(self):
        day = self._selected_day()
        try:
            tasks = self.app.svc.search(self.search_tf.value or "", day=day, tz=self.app.tz, roots_only=True)
            counts = self.app.svc.subtask_counts()
        except TaskStoreError as exc:
            toast(self.app.page, f"Could not load tasks: {exc}")
            return

        self.table.rows = [
            ft.DataRow(
                cells=[
                    ft.DataCell(ft.Text(t.name, weight=ft.FontWeight.W_500)),
                    ft.DataCell(
                        ft.Text(
                            t.description or "",
                            color=THEME.text_subtle,
                            max_lines=1,
                            overflow=ft.TextOverflow.ELLIPSIS,
                            width=320,
                        )
                    ),
                    ft.DataCell(ft.Text(format_deadline(t, self.app.tz))),
                    ft.DataCell(ft.Text(str(counts.get(t.id, 0)))),
                ],
                on_select_changed=lambda e, task=t: open_task_details(self.app, task),
            )
            for t in tasks
        ]
        if self.day_tf.value and day is None:
            self.result_info.value = "Date not recognised, showing every day"
        else:
            self.result_info.value = f"{len(tasks)} task(s)"
        self.app.page.update()
