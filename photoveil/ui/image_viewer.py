"""Виджет просмотра: отображение композиции, маркеры областей и жесты указателя.

Принципы:
- SRP: отвечает только за представление и сырые события мыши; координаты
  изображения и логика жестов живут в контроллере и сеансе.
- Чистый код: чёткое разделение публичного API и внутренних обработчиков событий.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from photoveil.services.coordinate_mapper import Box

BLUR_COLOR = "#60a5fa"
MOSAIC_COLOR = "#fb923c"
PREVIEW_COLOR = "#ffffff"
DELETE_COLOR = "#ef4444"
DELETE_RADIUS = 11


@dataclass(frozen=True)
class OverlayMarker:
    """Маркер области в координатах холста."""
    region_id: Optional[str]
    x: float
    y: float
    width: float
    height: float
    color: str
    deletable: bool = True


class ImageViewer(ctk.CTkFrame):
    """Канва с композицией и эллиптическими маркерами поверх неё."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._image: Optional[Image.Image] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None

        self._scale_factor: float = 1.0
        self._fit_scale_factor: float = 1.0
        self._user_zoomed: bool = False
        self._image_top_left: Optional[Tuple[int, int]] = None

        self._markers: List[OverlayMarker] = []
        self._preview: Optional[OverlayMarker] = None
        self._hint: Optional[str] = None

        # callbacks (canvas coordinates)
        self.on_pointer_down: Optional[Callable[[float, float], None]] = None
        self.on_pointer_move: Optional[Callable[[float, float], None]] = None
        self.on_pointer_up: Optional[Callable[[float, float], None]] = None
        self.on_pointer_leave: Optional[Callable[[], None]] = None
        self.on_delete_region: Optional[Callable[[str], None]] = None
        self.on_zoom_change: Optional[Callable[[int], None]] = None
        self.on_layout_change: Optional[Callable[[], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)
        self._canvas.bind("<ButtonPress-1>", self._on_press)
        self._canvas.bind("<B1-Motion>", self._on_drag)
        self._canvas.bind("<ButtonRelease-1>", self._on_release)
        self._canvas.bind("<Leave>", self._on_leave)

        # Mouse wheel zoom (cross-platform)
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel_linux)  # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel_linux)  # Linux scroll down

    # ---- Public API ----
    def set_image(self, image: Optional[Image.Image]) -> None:
        """Устанавливает новое изображение и сбрасывает масштаб к «вписать»."""
        self._image = image
        self._markers = []
        self._preview = None
        self._user_zoomed = False
        self._compute_fit_scale()
        self._scale_factor = self._fit_scale_factor
        self._image_top_left = None  # reset to center
        self._render_image()

    def update_image(self, image: Image.Image) -> None:
        """Заменяет отображаемую композицию, сохраняя масштаб и положение."""
        self._image = image
        self._render_image()

    def set_overlay(
        self,
        markers: Sequence[OverlayMarker],
        preview: Optional[OverlayMarker] = None,
        hint: Optional[str] = None,
    ) -> None:
        """Перерисовывает только маркеры; изображение не трогается."""
        self._markers = list(markers)
        self._preview = preview
        self._hint = hint
        self._render_overlay()

    def set_cursor(self, cursor: str) -> None:
        self._canvas.configure(cursor=cursor)

    def set_zoom_to_fit(self) -> None:
        """Масштабирует изображение так, чтобы оно целиком помещалось в доступную область."""
        self._user_zoomed = False
        self._compute_fit_scale()
        self._scale_factor = self._fit_scale_factor
        self._image_top_left = None  # reset to center
        self._render_image()
        self._emit_layout_change()

    def get_zoom_percent(self) -> int:
        """Возвращает текущий масштаб в процентах."""
        return int(round(self._scale_factor * 100))

    def canvas_box(self) -> Box:
        """Экранный прямоугольник изображения в координатах холста."""
        if self._image is None:
            return Box(0.0, 0.0, 1.0, 1.0)
        ox, oy = self._image_top_left or (0, 0)
        w, h = self._scaled_size()
        return Box(float(ox), float(oy), float(w), float(h))

    def overlay_box(self) -> Box:
        """Слой маркеров совпадает с самим холстом."""
        return Box(0.0, 0.0, float(self._canvas.winfo_width()), float(self._canvas.winfo_height()))

    # ---- Internals ----
    def _scaled_size(self) -> Tuple[int, int]:
        if self._image is None:
            return 1, 1
        img_w, img_h = self._image.size
        return max(1, int(img_w * self._scale_factor)), max(1, int(img_h * self._scale_factor))

    def _on_canvas_resize(self, _event: tk.Event) -> None:
        if self._image is None:
            return
        self._compute_fit_scale()
        if not self._user_zoomed:
            self._scale_factor = self._fit_scale_factor
            self._image_top_left = None
        self._render_image()
        self._emit_layout_change()

    def _render_image(self) -> None:
        self._canvas.delete("all")
        if self._image is None:
            return

        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        scaled_w, scaled_h = self._scaled_size()

        # compute allowed top-left range
        if scaled_w <= canvas_w:
            min_x = max_x = (canvas_w - scaled_w) // 2
        else:
            min_x = canvas_w - scaled_w
            max_x = 0
        if scaled_h <= canvas_h:
            min_y = max_y = (canvas_h - scaled_h) // 2
        else:
            min_y = canvas_h - scaled_h
            max_y = 0

        if self._image_top_left is None:
            x = (canvas_w - scaled_w) // 2 if scaled_w <= canvas_w else 0
            y = (canvas_h - scaled_h) // 2 if scaled_h <= canvas_h else 0
            self._image_top_left = (x, y)
        else:
            ox, oy = self._image_top_left
            x = max(min_x, min(max_x, ox))
            y = max(min_y, min(max_y, oy))
            self._image_top_left = (x, y)

        ox, oy = self._image_top_left
        resized = self._image.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
        self._tk_image = ImageTk.PhotoImage(resized)
        self._canvas.create_image(ox, oy, image=self._tk_image, anchor="nw", tags=("image",))
        self._render_overlay()

    def _render_overlay(self) -> None:
        self._canvas.delete("overlay")
        if self._image is None:
            return
        for marker in self._markers:
            self._draw_marker(marker)
        if self._preview is not None:
            self._draw_marker(self._preview)
        if self._hint:
            canvas_w = int(self._canvas.winfo_width())
            self._canvas.create_text(
                canvas_w // 2, 24, text=self._hint, fill="#ffffff",
                font=("TkDefaultFont", 12, "bold"), tags=("overlay",),
            )

    def _draw_marker(self, marker: OverlayMarker) -> None:
        x0, y0 = marker.x, marker.y
        x1, y1 = marker.x + marker.width, marker.y + marker.height
        tags = ("overlay",) if marker.region_id is None else ("overlay", f"region:{marker.region_id}")
        self._canvas.create_oval(x0, y0, x1, y1, outline=marker.color, width=2, dash=(6, 4), tags=tags)
        if marker.region_id is None or not marker.deletable:
            return
        delete_tags = ("overlay", "delete", f"delete:{marker.region_id}")
        r = DELETE_RADIUS
        self._canvas.create_oval(x1 - r, y0 - r, x1 + r, y0 + r, fill=DELETE_COLOR, outline="", tags=delete_tags)
        self._canvas.create_text(x1, y0, text="✕", fill="#ffffff", tags=delete_tags)

    def _delete_target_at(self, cx: float, cy: float) -> Optional[str]:
        for item in self._canvas.find_overlapping(cx, cy, cx, cy):
            for tag in self._canvas.gettags(item):
                if tag.startswith("delete:"):
                    return tag.split(":", 1)[1]
        return None

    def _compute_fit_scale(self) -> None:
        if self._image is None:
            self._fit_scale_factor = 1.0
            return
        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        img_w, img_h = self._image.size
        if img_w == 0 or img_h == 0:
            self._fit_scale_factor = 1.0
            return
        scale_w = canvas_w / img_w
        scale_h = canvas_h / img_h
        self._fit_scale_factor = max(0.1, min(4.0, min(scale_w, scale_h)))

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    def _emit_layout_change(self) -> None:
        if self.on_layout_change:
            self.on_layout_change()

    # ---- Pointer ----
    def _on_press(self, event: tk.Event) -> None:
        if self._image is None:
            return
        self._canvas.focus_set()
        region_id = self._delete_target_at(event.x, event.y)
        if region_id is not None:
            # delete handle is an action, not a gesture start
            if self.on_delete_region:
                self.on_delete_region(region_id)
            return
        if self.on_pointer_down:
            self.on_pointer_down(event.x, event.y)

    def _on_drag(self, event: tk.Event) -> None:
        if self._image is not None and self.on_pointer_move:
            self.on_pointer_move(event.x, event.y)

    def _on_release(self, event: tk.Event) -> None:
        if self._image is not None and self.on_pointer_up:
            self.on_pointer_up(event.x, event.y)

    def _on_leave(self, _event: tk.Event) -> None:
        if self._image is not None and self.on_pointer_leave:
            self.on_pointer_leave()

    # ---- Mouse wheel zoom ----
    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if self._image is None:
            return
        delta = event.delta
        if delta == 0:
            return
        factor = 1.1 if delta > 0 else 1.0 / 1.1
        self._zoom_at_point(event.x, event.y, factor)

    def _on_mouse_wheel_linux(self, event: tk.Event) -> None:
        # On X11, Button-4 is up, Button-5 is down
        if self._image is None:
            return
        if getattr(event, "num", None) == 4:
            factor = 1.1
        else:
            factor = 1.0 / 1.1
        self._zoom_at_point(event.x, event.y, factor)

    def _zoom_at_point(self, cx: int, cy: int, factor: float) -> None:
        # anchor zoom under cursor; compute image coord before zoom
        if self._image_top_left is None or self._image is None:
            return
        old_scale = self._scale_factor
        new_scale = max(0.1, min(4.0, old_scale * factor))
        if abs(new_scale - old_scale) < 1e-6:
            return

        ox, oy = self._image_top_left
        ix = (cx - ox) / old_scale
        iy = (cy - oy) / old_scale

        self._scale_factor = new_scale
        self._user_zoomed = True

        # compute new top-left so that (ix,iy) stays under (cx,cy)
        nx = int(round(cx - ix * new_scale))
        ny = int(round(cy - iy * new_scale))
        self._image_top_left = (nx, ny)
        self._render_image()
        self._emit_layout_change()

        if self.on_zoom_change:
            self.on_zoom_change(self.get_zoom_percent())
