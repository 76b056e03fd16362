"""Боковая панель: открытие файла, информация, параметры эффекта и действия.

Принципы:
- SRP: управляет только UI параметров, не содержит алгоритмов.
- ISP: выдаёт параметры через компактные методы `set_*`, события через `on_*`.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk

from photoveil.models.image_model import ImageData, format_size_bytes
from photoveil.models.region import EffectType

_EFFECT_LABELS = {EffectType.BLUR: "Размытие", EffectType.MOSAIC: "Мозаика"}
_LABEL_TO_EFFECT = {label: effect for effect, label in _EFFECT_LABELS.items()}


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, способ скрытия, действия."""
    def __init__(self, master: ctk.CTk, intensity_range: Tuple[int, int] = (5, 80), **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_reset: Optional[Callable[[], None]] = None
        self.on_effect_change: Optional[Callable[[EffectType], None]] = None
        self.on_intensity_change: Optional[Callable[[float], None]] = None
        self.on_toggle_add_mode: Optional[Callable[[], None]] = None
        self.on_detect: Optional[Callable[[], None]] = None
        self.on_save: Optional[Callable[[], None]] = None

        # File
        self._title = ctk.CTkLabel(self, text="Фото", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть фото…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 6), sticky="ew")

        self._reset_btn = ctk.CTkButton(
            self, text="Выбрать другое фото", fg_color="transparent", border_width=1,
            command=self._emit_reset,
        )
        self._reset_btn.grid(row=2, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Info section
        self._path_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._mode_val = ctk.StringVar(value="—")
        self._info_path = ctk.CTkLabel(self, textvariable=self._path_val, wraplength=250, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_mode = ctk.CTkLabel(self, textvariable=self._mode_val, anchor="w", justify="left")
        self._info_path.grid(row=3, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=4, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_size.grid(row=5, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_mode.grid(row=6, column=0, padx=8, pady=(0, 10), sticky="ew")

        # Effect
        self._effect_title = ctk.CTkLabel(self, text="Способ скрытия", font=ctk.CTkFont(size=16, weight="bold"))
        self._effect_title.grid(row=7, column=0, padx=8, pady=(8, 4), sticky="w")

        self._effect_buttons = ctk.CTkSegmentedButton(
            self, values=list(_EFFECT_LABELS.values()), command=self._on_effect_click
        )
        self._effect_buttons.set(_EFFECT_LABELS[EffectType.BLUR])
        self._effect_buttons.grid(row=8, column=0, padx=8, pady=(0, 8), sticky="ew")

        lo, hi = intensity_range
        self._intensity_label = ctk.CTkLabel(self, text="Интенсивность:")
        self._intensity_label.grid(row=9, column=0, padx=8, pady=(4, 2), sticky="w")
        self._intensity_val = ctk.StringVar(value="")
        self._intensity_slider = ctk.CTkSlider(
            self, from_=lo, to=hi, number_of_steps=hi - lo, command=self._on_intensity_slider
        )
        self._intensity_slider.grid(row=10, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._intensity_value = ctk.CTkLabel(self, textvariable=self._intensity_val, width=48, anchor="w")
        self._intensity_value.grid(row=11, column=0, padx=8, pady=(0, 10), sticky="w")

        # Actions
        self._actions_title = ctk.CTkLabel(self, text="Области", font=ctk.CTkFont(size=16, weight="bold"))
        self._actions_title.grid(row=12, column=0, padx=8, pady=(8, 4), sticky="w")

        self._add_btn = ctk.CTkButton(self, text="+ Добавить область", command=self._emit_toggle_add_mode)
        self._add_btn.grid(row=13, column=0, padx=8, pady=(0, 4), sticky="ew")
        self._add_hint = ctk.CTkLabel(
            self,
            text="* Добавленные области можно перетаскивать мышью.",
            font=ctk.CTkFont(size=11), text_color="gray", wraplength=250, justify="left",
        )
        self._add_hint.grid(row=14, column=0, padx=8, pady=(0, 8), sticky="w")

        self._detect_btn = ctk.CTkButton(self, text="Найти лица", command=self._emit_detect)
        self._detect_btn.grid(row=15, column=0, padx=8, pady=(0, 8), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

        self._save_btn = ctk.CTkButton(
            self, text="Сохранить (PNG)", fg_color="#16a34a", hover_color="#15803d", command=self._emit_save
        )
        self._save_btn.grid(row=100, column=0, padx=8, pady=(8, 8), sticky="ew")

        self.set_image_info(None)

    # ---- public API (sync from controller) ----
    def set_image_info(self, image_data: Optional[ImageData]) -> None:
        if image_data is None:
            self._path_val.set("Файл: —")
            self._dims_val.set("Размер: —")
            self._size_val.set("Объём: —")
            self._mode_val.set("Режим: —")
            return
        name = image_data.path.name if image_data.path is not None else "—"
        self._path_val.set(f"Файл: {name}")
        self._dims_val.set(f"Размер: {image_data.width}×{image_data.height} px")
        self._size_val.set(f"Объём: {format_size_bytes(image_data.size_bytes)}")
        self._mode_val.set(f"Режим: {image_data.mode}")

    def set_effect(self, effect: EffectType) -> None:
        self._effect_buttons.set(_EFFECT_LABELS[effect])

    def set_intensity(self, value: int) -> None:
        self._intensity_slider.set(value)
        self._intensity_val.set(f"{value} px")

    def set_add_mode(self, active: bool) -> None:
        if active:
            self._add_btn.configure(text="Отмена", fg_color="#dc2626", hover_color="#b91c1c")
        else:
            self._add_btn.configure(
                text="+ Добавить область",
                fg_color=ctk.ThemeManager.theme["CTkButton"]["fg_color"],
                hover_color=ctk.ThemeManager.theme["CTkButton"]["hover_color"],
            )

    def set_controls_enabled(self, has_image: bool, busy: bool, detector_ready: bool) -> None:
        editing = "normal" if has_image and not busy else "disabled"
        self._open_btn.configure(state="disabled" if busy else "normal")
        self._reset_btn.configure(state="normal" if has_image else "disabled")
        self._add_btn.configure(state=editing)
        self._save_btn.configure(state=editing)
        self._detect_btn.configure(state=editing if detector_ready else "disabled")

    # ---- events ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _emit_reset(self) -> None:
        if self.on_reset:
            self.on_reset()

    def _on_effect_click(self, value: str) -> None:
        effect = _LABEL_TO_EFFECT.get(value)
        if effect is not None and self.on_effect_change:
            self.on_effect_change(effect)

    def _on_intensity_slider(self, value: float) -> None:
        self._intensity_val.set(f"{int(round(value))} px")
        if self.on_intensity_change:
            self.on_intensity_change(value)

    def _emit_toggle_add_mode(self) -> None:
        if self.on_toggle_add_mode:
            self.on_toggle_add_mode()

    def _emit_detect(self) -> None:
        if self.on_detect:
            self.on_detect()

    def _emit_save(self) -> None:
        if self.on_save:
            self.on_save()
