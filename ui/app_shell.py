# ui/app_shell.py
from __future__ import annotations

import flet as ft

from core.logs import get_logger
from core.settings import UI
from services.tasks import TaskService
from storage.config import AppConfig, load_config
from ui.task_editor import TaskEditor

# pages
from .pages.tasks import TasksPage
from .pages.calendar import CalendarPage
from .pages.settings import SettingsPage

log = get_logger("ui")

_EVENTS = ("after_create", "after_update", "after_delete")


class AppShell:
    def __init__(self, page: ft.Page, svc: TaskService | None = None):
        self.page = page
        self.svc = svc or TaskService()
        self.config: AppConfig = load_config()
        self.tz = self.config.tzinfo()

        # window
        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START

        self.editor = TaskEditor(self)

        # pages
        self._tasks = TasksPage(self)
        self._calendar = CalendarPage(self)
        self._settings = SettingsPage(self)
        self._pages = [self._tasks, self._calendar, self._settings]
        self._active = self._tasks

        self.content = ft.Container(expand=True)

        self.nav = ft.NavigationRail(
            selected_index=0,
            label_type=ft.NavigationRailLabelType.ALL,
            min_width=90,
            min_extended_width=200,
            group_alignment=-0.9,
            on_change=self.on_nav_change,
            leading=ft.FloatingActionButton(
                icon=ft.Icons.ADD,
                tooltip="Add task",
                on_click=lambda e: self.editor.open(),
            ),
            destinations=[
                ft.NavigationRailDestination(
                    icon=ft.Icons.TABLE_ROWS_OUTLINED,
                    selected_icon=ft.Icons.TABLE_ROWS,
                    label="Tasks",
                ),
                ft.NavigationRailDestination(
                    icon=ft.Icons.CALENDAR_MONTH_OUTLINED,
                    selected_icon=ft.Icons.CALENDAR_MONTH,
                    label="Calendar",
                ),
                ft.NavigationRailDestination(
                    icon=ft.Icons.SETTINGS_OUTLINED,
                    selected_icon=ft.Icons.SETTINGS,
                    label="Settings",
                ),
            ],
        )

        self.root = ft.Row(
            controls=[
                ft.Container(self.nav, width=96, bgcolor=UI.theme.safe_surface_bg),
                ft.VerticalDivider(width=1),
                self.content,
            ],
            expand=True,
            spacing=0,
        )

        for event in _EVENTS:
            TaskService.subscribe(event, self._on_task_changed)

    # ---------- store events ----------
    def _on_task_changed(self, task_id):
        # the settings page has nothing task-related to redraw
        if self._active is not self._settings:
            self._active.load()

    # ---------- config ----------
    def apply_config(self, cfg: AppConfig):
        self.config = cfg
        self.tz = cfg.tzinfo()
        log.info("Config applied: week starts %s, timezone %s", cfg.week_start_day, cfg.timezone)

    # ---------- mount ----------
    def mount(self):
        self.page.controls.clear()
        self.page.add(self.root)
        self.content.content = self._tasks.view
        self._tasks.activate_from_menu()
        self.page.update()

    def unmount(self):
        for event in _EVENTS:
            TaskService.unsubscribe(event, self._on_task_changed)

    # ---------- tabs ----------
    def on_nav_change(self, e: ft.ControlEvent):
        idx = int(e.control.selected_index)
        self._active = self._pages[idx] if 0 <= idx < len(self._pages) else self._tasks
        self.content.content = self._active.view
        self._active.activate_from_menu()
        self.page.update()
