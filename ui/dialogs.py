import flet as ft


def open_alert_dialog(
    page: ft.Page,
    *,
    title: str,
    content: ft.Control,
    actions: list[ft.Control] | None = None,
    width: int | None = None,
) -> ft.AlertDialog:
    dlg = ft.AlertDialog(
        modal=False,
        title=ft.Text(title),
        content=ft.Container(content=content, width=width) if width else content,
        actions=actions or [],
        actions_alignment=ft.MainAxisAlignment.END,
        inset_padding=ft.padding.all(16),
        content_padding=ft.padding.all(12),
    )
    page.open(dlg)
    return dlg


def close_alert_dialog(page: ft.Page, dlg: ft.AlertDialog | None):
    if dlg is None:
        return
    page.close(dlg)


def confirm(page: ft.Page, *, title: str, message: str, on_confirm, confirm_label: str = "Delete"):
    dlg = None

    def _yes(_):
        close_alert_dialog(page, dlg)
        on_confirm()

    dlg = open_alert_dialog(
        page,
        title=title,
        content=ft.Text(message),
        actions=[
            ft.TextButton("Cancel", on_click=lambda e: close_alert_dialog(page, dlg)),
            ft.FilledButton(confirm_label, icon=ft.Icons.DELETE_OUTLINE, on_click=_yes),
        ],
    )
    return dlg


def toast(page: ft.Page, text: str):
    page.open(ft.SnackBar(ft.Text(text)))
