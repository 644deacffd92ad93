# ui/task_details.py
from __future__ import annotations

import flet as ft

from core.settings import UI
from models.task import Task
from services.tasks import TaskStoreError
from ui.dialogs import close_alert_dialog, confirm, open_alert_dialog, toast
from utils.datetime_utils import to_local

THEME = UI.theme


def format_deadline(task: Task, tz) -> str:
    local = to_local(task.deadline, tz)
    if local is None:
        return "No deadline"
    return local.strftime("%a, %d %b %Y %H:%M")


def open_task_details(app, task: Task):
    """Details, subtasks and actions (edit / add subtask / delete) for one task."""

    try:
        subtasks = app.svc.subtasks(task.id)
    except TaskStoreError as exc:
        return toast(app.page, f"Could not load subtasks: {exc}")

    dlg = None

    def _close():
        close_alert_dialog(app.page, dlg)

    def _reopen(saved: Task):
        fresh = app.svc.get(task.id)
        if fresh is not None:
            open_task_details(app, fresh)

    def on_edit(_):
        _close()
        app.editor.open(task, on_saved=_reopen)

    def on_add_subtask(_):
        _close()
        app.editor.open(parent=task, on_saved=_reopen)

    def on_delete(_):
        def _do_delete():
            try:
                removed = app.svc.delete(task.id)
            except TaskStoreError as exc:
                return toast(app.page, f"Not deleted: {exc}")
            toast(app.page, "Deleted" if removed <= 1 else f"Deleted with {removed - 1} subtask(s)")

        _close()
        extra = f" and its {len(subtasks)} subtask(s)" if subtasks else ""
        confirm(app.page, title="Delete task", message=f"Delete “{task.name}”{extra}?", on_confirm=_do_delete)

    def _open_subtask(sub: Task):
        _close()
        open_task_details(app, sub)

    if subtasks:
        sub_controls = [
            ft.ListTile(
                title=ft.Text(sub.name),
                subtitle=ft.Text(format_deadline(sub, app.tz), size=12, color=THEME.text_subtle),
                dense=True,
                on_click=lambda e, s=sub: _open_subtask(s),
            )
            for sub in subtasks
        ]
    else:
        sub_controls = [ft.Text("No subtasks", color=THEME.text_subtle)]

    content = ft.Column(
        [
            ft.Text(task.name, size=18, weight=ft.FontWeight.W_600),
            ft.Text(task.description or "—", selectable=True),
            ft.Text(f"Deadline: {format_deadline(task, app.tz)}", color=THEME.text_subtle),
            ft.Divider(height=1),
            ft.Text("Subtasks", size=14, weight=ft.FontWeight.W_600),
            ft.Column(sub_controls, spacing=2, tight=True),
        ],
        spacing=8,
        tight=True,
        scroll=ft.ScrollMode.ADAPTIVE,
    )

    dlg = open_alert_dialog(
        app.page,
        title="Task details",
        content=content,
        actions=[
            ft.TextButton("Delete", icon=ft.Icons.DELETE_OUTLINE, on_click=on_delete, style=ft.ButtonStyle(color=THEME.danger)),
            ft.TextButton("Add subtask", icon=ft.Icons.PLAYLIST_ADD, on_click=on_add_subtask),
            ft.FilledButton("Edit", icon=ft.Icons.EDIT, on_click=on_edit),
        ],
        width=UI.calendar.dialog_width_narrow,
    )
    return dlg
