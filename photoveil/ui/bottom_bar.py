from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=48, **kwargs)

        # callbacks
        self.on_zoom_fit: Optional[Callable[[], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # status stretches

        self._count_value = ctk.StringVar(value="")
        self._count_label = ctk.CTkLabel(
            self, textvariable=self._count_value, font=ctk.CTkFont(weight="bold"), width=160, anchor="w"
        )
        self._count_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._status_value = ctk.StringVar(value="Откройте фото, чтобы начать.")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status_value, anchor="w")
        self._status_label.grid(row=0, column=1, padx=6, pady=8, sticky="ew")

        # busy indicator (hidden by default)
        self._progress = ctk.CTkProgressBar(self, mode="indeterminate", width=140)

        self._zoom_value = ctk.StringVar(value="100%")
        self._zoom_value_label = ctk.CTkLabel(self, textvariable=self._zoom_value, width=48, anchor="e")
        self._zoom_value_label.grid(row=0, column=3, padx=6, pady=8, sticky="e")
        self._fit_btn = ctk.CTkButton(self, text="Вписать", width=80, command=self._on_fit_click)
        self._fit_btn.grid(row=0, column=4, padx=(6, 10), pady=8, sticky="e")

        self.set_region_count(None)

    # public API (sync from controller)
    def set_region_count(self, count: Optional[int]) -> None:
        self._count_value.set("" if count is None else f"Скрыто областей: {count}")

    def set_status(self, text: str) -> None:
        self._status_value.set(text)

    def set_zoom_percent(self, percent: int) -> None:
        self._zoom_value.set(f"{percent}%")

    def set_busy(self, busy: bool) -> None:
        if busy:
            self._progress.grid(row=0, column=2, padx=6, pady=8, sticky="e")
            self._progress.start()
        else:
            self._progress.stop()
            self._progress.grid_remove()

    # events
    def _on_fit_click(self) -> None:
        if self.on_zoom_fit:
            self.on_zoom_fit()
