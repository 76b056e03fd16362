"""Модальное окно предупреждения перед сохранением.

Кнопка скачивания активна только после того, как пользователь отметил
флажок подтверждения.
"""
from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

_DISCLAIMER = (
    "Сервис является вспомогательным инструментом: модель может найти не все лица.\n\n"
    "Ответственность за окончательную проверку и скрытие ненайденных лиц лежит на "
    "пользователе.\n\n"
    "Обязательно проверьте результат перед сохранением."
)


class ExportDialog(ctk.CTkToplevel):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.title("Перед сохранением")
        self.resizable(False, False)
        self.grid_columnconfigure((0, 1), weight=1)

        self.on_confirm_change: Optional[Callable[[bool], None]] = None
        self.on_download: Optional[Callable[[], None]] = None
        self.on_close: Optional[Callable[[], None]] = None

        self._title = ctk.CTkLabel(
            self, text="Внимание", font=ctk.CTkFont(size=18, weight="bold"), text_color="#ea580c"
        )
        self._title.grid(row=0, column=0, columnspan=2, padx=16, pady=(16, 8), sticky="w")

        self._text = ctk.CTkLabel(self, text=_DISCLAIMER, wraplength=420, justify="left", anchor="w")
        self._text.grid(row=1, column=0, columnspan=2, padx=16, pady=(0, 12), sticky="ew")

        self._confirmed = ctk.BooleanVar(value=False)
        self._checkbox = ctk.CTkCheckBox(
            self, text="Я проверил(а) результат", variable=self._confirmed, command=self._on_checkbox
        )
        self._checkbox.grid(row=2, column=0, columnspan=2, padx=16, pady=(0, 16), sticky="w")

        self._cancel_btn = ctk.CTkButton(
            self, text="Отмена", fg_color="transparent", border_width=1, command=self._emit_close
        )
        self._cancel_btn.grid(row=3, column=0, padx=(16, 6), pady=(0, 16), sticky="ew")
        self._download_btn = ctk.CTkButton(self, text="Скачать", state="disabled", command=self._emit_download)
        self._download_btn.grid(row=3, column=1, padx=(6, 16), pady=(0, 16), sticky="ew")

        self.protocol("WM_DELETE_WINDOW", self._emit_close)
        self.transient(master)
        self.after(50, self.grab_set)

    def _on_checkbox(self) -> None:
        confirmed = bool(self._confirmed.get())
        self._download_btn.configure(state="normal" if confirmed else "disabled")
        if self.on_confirm_change:
            self.on_confirm_change(confirmed)

    def _emit_download(self) -> None:
        if self.on_download:
            self.on_download()

    def _emit_close(self) -> None:
        if self.on_close:
            self.on_close()
