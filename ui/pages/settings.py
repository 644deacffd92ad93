# ui/pages/settings.py
import calendar

import flet as ft

from core.logs import read_log
from core.settings import UI
from storage.config import CALENDAR_MODES, update_config
from ui.dialogs import toast
from utils.datetime_utils import resolve_tz


class SettingsPage:
    def __init__(self, app):
        self.app = app
        cfg = self.app.config

        self.week_start_dd = ft.Dropdown(
            label="Week starts on",
            width=220,
            value=str(cfg.week_start_day),
            options=[ft.dropdown.Option(str(i), calendar.day_name[i]) for i in range(7)],
        )
        self.timezone_tf = ft.TextField(
            label="Timezone",
            hint_text="local, UTC, Europe/Berlin, +02:00",
            value=cfg.timezone,
            width=260,
        )
        self.mode_dd = ft.Dropdown(
            label="Calendar opens in",
            width=220,
            value=cfg.calendar_mode,
            options=[ft.dropdown.Option(m, m.capitalize()) for m in CALENDAR_MODES],
        )
        self.save_btn = ft.FilledButton("Save", icon=ft.Icons.SAVE, on_click=self.save)
        self.refresh_log_btn = ft.TextButton(
            "Refresh log",
            icon=ft.Icons.ARTICLE,
            on_click=self.refresh_log,
        )

        self.log_view = ft.Text("", selectable=True, size=12, font_family="monospace")

        content = ft.Column(
            controls=[
                ft.Text("Settings", size=24, weight=ft.FontWeight.BOLD),
                ft.Row([self.week_start_dd, self.timezone_tf, self.mode_dd], spacing=12),
                self.save_btn,
                ft.Column([
                    ft.Text("Application log", size=18, weight=ft.FontWeight.W_600),
                    ft.Container(
                        ft.Column([self.log_view], scroll=ft.ScrollMode.AUTO),
                        height=240, padding=10, bgcolor=UI.theme.surface_variant,
                    ),
                    self.refresh_log_btn,
                ], spacing=8),
            ],
            expand=True,
            spacing=16,
        )

        self.view = ft.Container(content=content, expand=True, padding=20)

    def activate_from_menu(self):
        cfg = self.app.config
        self.week_start_dd.value = str(cfg.week_start_day)
        self.timezone_tf.value = cfg.timezone
        self.mode_dd.value = cfg.calendar_mode
        self.refresh_log()

    def save(self, _=None):
        tz_name = (self.timezone_tf.value or "").strip()
        try:
            resolve_tz(tz_name)
        except ValueError as exc:
            self.timezone_tf.error_text = str(exc)
            self.app.page.update()
            return
        self.timezone_tf.error_text = None
        cfg = update_config(
            week_start_day=int(self.week_start_dd.value or 0),
            timezone=tz_name,
            calendar_mode=self.mode_dd.value,
        )
        self.app.apply_config(cfg)
        toast(self.app.page, "Settings saved")

    def refresh_log(self, _=None):
        self.log_view.value = read_log(100)
        self.app.page.update()
