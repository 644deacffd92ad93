# ui/pages/calendar.py
from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

import flet as ft

from core.logs import get_logger
from core.settings import UI
from helpers.calendar_grid import (
    CalendarGridBuilder,
    CalendarMode,
    CalendarSlot,
    advance,
    weekday_labels,
)
from models.task import Task
from services.tasks import TaskStoreError
from ui.dialogs import toast
from ui.task_details import open_task_details
from utils.datetime_utils import to_local, today_in

log = get_logger("ui.calendar")

# ===== settings =====
CAL_UI = UI.calendar
THEME = UI.theme

MONTH_CELL_H = CAL_UI.month_cell_height
WEEK_ROW_H = CAL_UI.week_row_height
HOUR_ROW_H = CAL_UI.hour_row_height
WEEKDAY_COL_W = CAL_UI.weekday_column_width
HOURS_COL_W = CAL_UI.hours_column_width
SIDE_PANEL_W = CAL_UI.side_panel_width
CHIPS_SPACING = CAL_UI.chips_spacing
MAX_MONTH_CHIPS = CAL_UI.max_chips_in_month_cell

CLR_OUTLINE = THEME.outline
CLR_TEXTSUB = THEME.text_subtle
CLR_TODAY_BG = THEME.today_bg
CLR_SELECTED_BG = THEME.selected_bg
CLR_PADDING_BG = THEME.padding_bg
CLR_CHIP = THEME.chip
CLR_CHIP_TXT = THEME.chip_text
CLR_UNS_BG = THEME.unscheduled_bg

DRAG_GROUP = "task"


class CalendarPage:
    """
    Month / week / day views over the same task list.
    - The grids come from helpers.calendar_grid; this class only draws them.
    - Chips are draggable; dropping one on a day keeps the time of day,
      dropping on an hour row of the day view also sets the hour.
    """

    def __init__(self, app):
        self.app = app

        self.mode = CalendarMode(self.app.config.calendar_mode)
        self.anchor: date = today_in(self.app.tz)
        self.selected: date = self.anchor

        # DnD
        self.current_drag_task_id: Optional[str] = None

        # ---------- header ----------
        self.title_text = ft.Text("", size=24, weight=ft.FontWeight.BOLD)
        self.home_btn = ft.IconButton(icon=ft.Icons.TODAY, tooltip="Today", on_click=lambda e: self.go_home())
        self.prev_btn = ft.IconButton(icon=ft.Icons.CHEVRON_LEFT, tooltip="Previous", on_click=lambda e: self.shift(-1))
        self.next_btn = ft.IconButton(icon=ft.Icons.CHEVRON_RIGHT, tooltip="Next", on_click=lambda e: self.shift(1))
        self.mode_selector = ft.SegmentedButton(
            segments=[
                ft.Segment(value=CalendarMode.MONTH.value, label=ft.Text("Month")),
                ft.Segment(value=CalendarMode.WEEK.value, label=ft.Text("Week")),
                ft.Segment(value=CalendarMode.DAY.value, label=ft.Text("Day")),
            ],
            selected={self.mode.value},
            allow_multiple_selection=False,
            on_change=self._on_mode_change,
        )

        header = ft.Row(
            controls=[
                ft.Row([self.prev_btn, self.home_btn, self.next_btn], spacing=6),
                self.title_text,
                self.mode_selector,
            ],
            alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
        )

        # ---------- unscheduled ----------
        self.unscheduled_list = ft.ListView(expand=True, spacing=6)
        self.side_panel = ft.Container(
            width=SIDE_PANEL_W,
            content=ft.Column(
                [ft.Text("Unscheduled", size=16, weight=ft.FontWeight.W_600),
                 ft.Divider(height=1),
                 self.unscheduled_list],
                expand=True, spacing=8),
            padding=10,
            border=ft.border.all(0.5, CLR_OUTLINE),
            border_radius=8,
        )

        # ---------- grid ----------
        self.grid = ft.Container(expand=True)

        self.view = ft.Container(
            content=ft.Column(
                [header, ft.Divider(height=1), ft.Row([self.side_panel, self.grid], expand=True, spacing=12)],
                spacing=12, expand=True),
            expand=True, padding=20,
        )

    # ===== public: called from the navigation rail =====
    def activate_from_menu(self):
        self.mode = CalendarMode(self.app.config.calendar_mode)
        self.mode_selector.selected = {self.mode.value}
        self.load()

    @property
    def builder(self) -> CalendarGridBuilder:
        return CalendarGridBuilder(week_start_day=self.app.config.week_start_day, tz=self.app.tz)

    # ===== navigation =====
    def go_home(self):
        self.anchor = today_in(self.app.tz)
        self.selected = self.anchor
        self.load()

    def shift(self, steps: int):
        if self.mode is CalendarMode.MONTH:
            # month navigation always starts from the 1st so it stays reversible
            self.anchor = advance(self.anchor.replace(day=1), self.mode, steps)
        else:
            self.anchor = advance(self.anchor, self.mode, steps)
        if self.mode is CalendarMode.DAY:
            self.selected = self.anchor
        self.load()

    def _on_mode_change(self, e):
        picked = next(iter(e.control.selected or []), CalendarMode.MONTH.value)
        self.set_mode(CalendarMode(picked))

    def set_mode(self, mode: CalendarMode, anchor: Optional[date] = None):
        self.mode = mode
        self.mode_selector.selected = {mode.value}
        if anchor is not None:
            self.anchor = anchor
        elif mode is not CalendarMode.MONTH:
            self.anchor = self.selected
        self.load()

    def _select_day(self, day: date):
        self.selected = day
        self.set_mode(CalendarMode.DAY, anchor=day)

    def _title(self) -> str:
        if self.mode is CalendarMode.MONTH:
            return self.anchor.strftime("%B %Y")
        if self.mode is CalendarMode.WEEK:
            first, last = self.builder.range(self.anchor, CalendarMode.WEEK)
            return f"Week {first.strftime('%d %b')} - {last.strftime('%d %b %Y')}"
        return self.anchor.strftime("%A, %d %B %Y")

    # ===== loading =====
    def load(self):
        try:
            tasks = self.app.svc.list_all()
            unscheduled = self.app.svc.list_unscheduled()
        except TaskStoreError as exc:
            toast(self.app.page, f"Could not load tasks: {exc}")
            return

        self.title_text.value = self._title()
        slots = self.builder.build(self.mode, self.anchor, tasks)

        self._build_unscheduled(unscheduled)
        if self.mode is CalendarMode.MONTH:
            self.grid.content = self._build_month(slots)
        elif self.mode is CalendarMode.WEEK:
            self.grid.content = self._build_week(slots)
        else:
            self.grid.content = self._build_day(slots)
        self.app.page.update()

    # ===== unscheduled =====
    def _build_unscheduled(self, tasks: Sequence[Task]):
        self.unscheduled_list.controls.clear()
        for t in tasks:
            chip = ft.Container(
                content=ft.Text(t.name, size=12, no_wrap=True, overflow=ft.TextOverflow.ELLIPSIS, color=CLR_CHIP_TXT),
                padding=8,
                bgcolor=CLR_UNS_BG,
                border=ft.border.all(0.5, CLR_OUTLINE), border_radius=8,
                width=SIDE_PANEL_W - 20,
                on_click=lambda e, task=t: open_task_details(self.app, task),
            )
            self.unscheduled_list.controls.append(self._draggable(t, chip))

    # ===== chips and drag & drop =====
    def _draggable(self, t: Task, content: ft.Control) -> ft.Draggable:
        return ft.Draggable(
            group=DRAG_GROUP,
            data=str(t.id),
            on_drag_start=lambda e, tid=str(t.id): self._remember_drag(tid),
            content=content,
            content_feedback=ft.Container(
                content=ft.Text(t.name, size=12),
                padding=8, bgcolor="#ffffff", border_radius=6,
                border=ft.border.all(0.5, CLR_OUTLINE),
            ),
        )

    def _chip(self, t: Task, *, show_time: bool = True) -> ft.Control:
        label = t.name
        local = to_local(t.deadline, self.app.tz)
        if show_time and local is not None:
            label = f"{local.strftime('%H:%M')} {t.name}"
        body = ft.Container(
            content=ft.Text(label, size=12, color=CLR_CHIP_TXT, no_wrap=True, overflow=ft.TextOverflow.ELLIPSIS),
            bgcolor=CLR_CHIP,
            border_radius=4,
            padding=ft.padding.symmetric(horizontal=4, vertical=2),
            on_click=lambda e, task=t: open_task_details(self.app, task),
            tooltip=t.description or None,
        )
        return self._draggable(t, body)

    def _chips(self, slot: CalendarSlot, *, limit: Optional[int] = None, show_time: bool = True) -> List[ft.Control]:
        tasks = list(slot.tasks)
        shown = tasks if limit is None else tasks[:limit]
        chips: List[ft.Control] = [self._chip(t, show_time=show_time) for t in shown]
        hidden = len(tasks) - len(shown)
        if hidden > 0:
            chips.append(ft.Text(f"+{hidden} more", size=11, color=CLR_TEXTSUB))
        return chips

    def _remember_drag(self, task_id: str):
        self.current_drag_task_id = task_id

    def _drop_target(self, content: ft.Control, day: date, hour: Optional[int] = None) -> ft.DragTarget:
        return ft.DragTarget(
            group=DRAG_GROUP,
            content=content,
            on_accept=lambda e, _d=day, _h=hour: self._on_drop_accept(e, _d, _h),
        )

    def _on_drop_accept(self, e, day: date, hour: Optional[int]):
        task_id = self.current_drag_task_id
        if task_id is None:
            src = self.app.page.get_control(getattr(e, "src_id", None))
            task_id = getattr(src, "data", None)
        self.current_drag_task_id = None
        if not task_id:
            return toast(self.app.page, "Could not tell which task was dropped")
        try:
            moved = self.app.svc.reschedule(task_id, day, tz=self.app.tz, hour=hour)
        except TaskStoreError as exc:
            return toast(self.app.page, f"Not moved: {exc}")
        if moved is None:
            return toast(self.app.page, "Task no longer exists")
        log.info("Task %s moved to %s", moved.id, moved.deadline)

    # ===== grids =====
    def _weekday_header(self) -> ft.Control:
        return ft.Row(
            [
                ft.Container(
                    content=ft.Text(label, size=12, weight=ft.FontWeight.W_600),
                    alignment=ft.alignment.center,
                    padding=ft.padding.symmetric(vertical=5),
                    bgcolor=ft.Colors.with_opacity(0.2, ft.Colors.GREY),
                    expand=1,
                )
                for label in weekday_labels(self.app.config.week_start_day)
            ],
            spacing=0,
        )

    def _frame(self, body: ft.Control) -> ft.Control:
        return ft.Container(
            content=body,
            expand=True,
            border_radius=8,
            border=ft.border.all(0.5, CLR_OUTLINE),
            padding=8,
            bgcolor="#fff",
        )

    def _build_month(self, slots: Sequence[Optional[CalendarSlot]]) -> ft.Control:
        today = today_in(self.app.tz)
        rows: List[ft.Control] = []
        for start in range(0, len(slots), 7):
            cells: List[ft.Control] = []
            for slot in slots[start:start + 7]:
                if slot is None:
                    cells.append(ft.Container(height=MONTH_CELL_H, bgcolor=CLR_PADDING_BG, expand=1,
                                              border=ft.border.all(0.5, CLR_OUTLINE)))
                    continue
                day_number = ft.TextButton(
                    slot.label,
                    style=ft.ButtonStyle(color=ft.Colors.BLUE if slot.day == today else None),
                    on_click=lambda e, d=slot.day: self._select_day(d),
                )
                cell = ft.Container(
                    content=ft.Column(
                        [day_number] + self._chips(slot, limit=MAX_MONTH_CHIPS, show_time=False),
                        spacing=CHIPS_SPACING, tight=True),
                    height=MONTH_CELL_H,
                    padding=2,
                    bgcolor=CLR_SELECTED_BG if slot.day == self.selected else None,
                    border=ft.border.all(0.5, CLR_OUTLINE),
                    on_click=lambda e, d=slot.day: self._on_cell_click(d),
                )
                cells.append(ft.Container(content=self._drop_target(cell, slot.day), expand=1))
            rows.append(ft.Row(cells, spacing=0))
        return self._frame(ft.Column([self._weekday_header()] + rows, spacing=0, scroll=ft.ScrollMode.AUTO))

    def _on_cell_click(self, day: date):
        self.selected = day
        self.load()

    def _build_week(self, slots: Sequence[CalendarSlot]) -> ft.Control:
        today = today_in(self.app.tz)
        labels = weekday_labels(self.app.config.week_start_day)
        rows: List[ft.Control] = []
        for label, slot in zip(labels, slots):
            day_label = ft.TextButton(
                f"{label}\n{slot.day.strftime('%d.%m')}",
                on_click=lambda e, d=slot.day: self._select_day(d),
            )
            row = ft.Container(
                content=ft.Row(
                    [ft.Container(day_label, width=WEEKDAY_COL_W),
                     ft.Column(self._chips(slot), spacing=CHIPS_SPACING, expand=True, scroll=ft.ScrollMode.AUTO)],
                    vertical_alignment=ft.CrossAxisAlignment.START,
                    spacing=4,
                ),
                height=WEEK_ROW_H,
                bgcolor=CLR_TODAY_BG if slot.day == today else None,
                border=ft.border.only(bottom=ft.BorderSide(0.5, CLR_OUTLINE)),
            )
            rows.append(self._drop_target(row, slot.day))
        return self._frame(ft.ListView(rows, spacing=0, expand=True))

    def _build_day(self, slots: Sequence[CalendarSlot]) -> ft.Control:
        rows: List[ft.Control] = []
        for slot in slots:
            row = ft.Container(
                content=ft.Row(
                    [ft.Container(
                        content=ft.Text(slot.label, size=12, color=CLR_TEXTSUB),
                        width=HOURS_COL_W,
                        alignment=ft.alignment.top_right,
                        padding=ft.padding.only(right=8),
                     ),
                     ft.Column(self._chips(slot), spacing=CHIPS_SPACING, expand=True, scroll=ft.ScrollMode.AUTO)],
                    vertical_alignment=ft.CrossAxisAlignment.START,
                    spacing=0,
                ),
                height=HOUR_ROW_H,
                border=ft.border.only(bottom=ft.BorderSide(0.5, CLR_OUTLINE)),
            )
            rows.append(self._drop_target(row, slot.day, slot.hour))
        return self._frame(ft.ListView(rows, spacing=0, expand=True))
