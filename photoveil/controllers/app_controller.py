"""Контроллер приложения: оркестрация UI и сеанса редактирования.

SOLID:
- SRP: класс управляет связями между UI и сеансом (без логики композиции и жестов).
- DIP: зависит от детектора как от протокола `FaceDetector`; реализация подставляется снаружи.
Clean Code:
- Обработчики компактны; вся логика редактора находится в `EditorSession`.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import filedialog, messagebox, TclError
from typing import List, Optional, Tuple

import customtkinter as ctk

from photoveil.config.settings import Settings
from photoveil.controllers.interaction import InteractionState, PointerTarget, hit_test
from photoveil.controllers.session import EditorSession
from photoveil.models.errors import DetectorUnavailableError
from photoveil.models.image_model import ImageData
from photoveil.models.region import EffectType, Region
from photoveil.services.coordinate_mapper import CoordinateMapper
from photoveil.services.detection_service import DetectedBox, FaceDetector, YuNetFaceDetector
from photoveil.services.image_service import ImageService
from photoveil.ui.bottom_bar import BottomBar
from photoveil.ui.export_dialog import ExportDialog
from photoveil.ui.image_viewer import (
    BLUR_COLOR,
    MOSAIC_COLOR,
    PREVIEW_COLOR,
    ImageViewer,
    OverlayMarker,
)
from photoveil.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

_ADD_MODE_HINT = "Проведите мышью по фото, чтобы нарисовать область"


@dataclass
class AppController:
    """Связывает элементы UI с сеансом редактирования.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка изображений через `ImageService`.
    - Перевод координат указателя в пиксели изображения через `CoordinateMapper`.
    - Запуск детекции в фоне и возврат результата в цикл Tk.
    - Диалог сохранения с подтверждением.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    settings: Settings

    _image_service: ImageService = field(default_factory=ImageService)
    _session: EditorSession = field(init=False)
    _detector: Optional[FaceDetector] = None
    _mapper: Optional[CoordinateMapper] = None
    _intensity_job: Optional[str] = None
    _export_dialog: Optional[ExportDialog] = None

    def __post_init__(self) -> None:
        self._session = EditorSession(self.settings, image_service=self._image_service)

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами и сеансом.

        Сохраняет слабую связность: компоненты UI ничего не знают друг о друге,
        общаются через контроллер.
        """
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_reset = self._handle_reset
        self.sidebar.on_effect_change = self._handle_effect_change
        self.sidebar.on_intensity_change = self._handle_intensity_change
        self.sidebar.on_toggle_add_mode = self._handle_toggle_add_mode
        self.sidebar.on_detect = self._handle_detect
        self.sidebar.on_save = self._handle_save

        self.viewer.on_pointer_down = self._handle_pointer_down
        self.viewer.on_pointer_move = self._handle_pointer_move
        self.viewer.on_pointer_up = self._handle_pointer_up
        self.viewer.on_pointer_leave = self._handle_pointer_leave
        self.viewer.on_delete_region = self._handle_delete_region
        self.viewer.on_zoom_change = self.bottom.set_zoom_percent
        self.viewer.on_layout_change = self._handle_layout_change

        self.bottom.on_zoom_fit = self.viewer.set_zoom_to_fit

        self._session.on_composite_change = self.viewer.update_image
        self._session.on_regions_change = self._handle_regions_change
        self._session.on_busy_change = self._handle_busy_change

        self.sidebar.set_effect(self._session.effect_type)
        self.sidebar.set_intensity(self._session.proposed_intensity)
        self._sync_controls()

    def load_detector(self) -> None:
        """Загружает модель детектора; при ошибке ручное редактирование остаётся доступным."""
        try:
            self._detector = YuNetFaceDetector(
                self.settings.face_model_path,
                input_size=self.settings.detection_input_size,
                score_threshold=self.settings.detection_score_threshold,
                nms_threshold=self.settings.detection_nms_threshold,
            )
        except DetectorUnavailableError as exc:
            logger.warning("Face detector unavailable: %s", exc)
            self._detector = None
            messagebox.showwarning(
                "Детектор недоступен",
                f"Не удалось загрузить модель поиска лиц.\n{exc}\n\n"
                "Области можно добавлять вручную.",
                parent=self.window,
            )
        self._sync_controls()

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        if self._session.is_busy:
            return
        try:
            file_path = filedialog.askopenfilename(
                title="Выберите фото",
                filetypes=(
                    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
                    ("All files", "*.*"),
                ),
            )
        except TclError:
            # Silent fail if dialog cannot open
            return

        if not file_path:
            return

        try:
            image_data = self._image_service.load_image(file_path)
        except (FileNotFoundError, ValueError) as exc:
            logger.warning("Failed to load %s: %s", file_path, exc)
            messagebox.showerror("Ошибка", str(exc), parent=self.window)
            return

        self._open_image(image_data)

    def _open_image(self, image_data: ImageData) -> None:
        self._session.load_image(image_data)
        self._mapper = CoordinateMapper(
            image_data.size, canvas_box=self.viewer.canvas_box, overlay_box=self.viewer.overlay_box
        )
        self.viewer.set_image(self._session.composite)
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())
        self.sidebar.set_image_info(image_data)
        self.bottom.set_status("Фото загружено.")
        self._refresh_overlay()
        self._sync_controls()
        if self._detector is not None:
            self._handle_detect()

    def _handle_reset(self) -> None:
        self._close_export_dialog()
        self._session.reset()
        self._mapper = None
        self.viewer.set_image(None)
        self.sidebar.set_image_info(None)
        self.bottom.set_region_count(None)
        self.bottom.set_status("Откройте фото, чтобы начать.")
        self._sync_controls()

    def _handle_effect_change(self, effect: EffectType) -> None:
        self._session.set_effect_type(effect)

    def _handle_intensity_change(self, value: float) -> None:
        self._session.propose_intensity(value)
        # re-arm quiescence timer on every tick
        if self._intensity_job is not None:
            self.window.after_cancel(self._intensity_job)
        self._intensity_job = self.window.after(
            self.settings.intensity_debounce_ms, self._commit_intensity
        )

    def _commit_intensity(self) -> None:
        self._intensity_job = None
        if not self._session.poll_intensity():
            # Tk timer may fire slightly ahead of the session clock
            self._session.flush_intensity()

    def _handle_toggle_add_mode(self) -> None:
        self._session.toggle_add_mode()
        self._sync_controls()
        self._refresh_overlay()

    def _handle_detect(self) -> None:
        detector = self._detector
        image = self._session.image
        if detector is None or image is None or not self._session.begin_detection():
            return
        self.bottom.set_status("Ищем лица…")
        threading.Thread(target=self._detect_worker, args=(detector, image), daemon=True).start()

    def _detect_worker(self, detector: FaceDetector, image: ImageData) -> None:
        try:
            boxes = detector.detect(image.pil_image)
        except Exception as exc:
            self.window.after(0, self._on_detection_failed, exc)
            return
        self.window.after(0, self._on_detection_done, boxes, image)

    def _on_detection_done(self, boxes: List[DetectedBox], image: ImageData) -> None:
        self._session.finish_detection(boxes, source=image)
        if self._session.image is image:
            self.bottom.set_status(f"Найдено лиц: {len(boxes)}. Проверьте результат.")

    def _on_detection_failed(self, exc: Exception) -> None:
        self._session.fail_detection(exc)
        self.bottom.set_status("Не удалось найти лица. Добавьте области вручную.")

    # ---- Pointer ----
    def _handle_pointer_down(self, cx: float, cy: float) -> None:
        if self._mapper is None:
            return
        point = self._mapper.to_image(cx, cy)
        target = None
        if not self._session.add_mode:
            region_id = hit_test(self._session.regions, point)
            if region_id is not None:
                target = PointerTarget(region_id)
        self._session.pointer_down(point, target)
        self._sync_cursor()

    def _handle_pointer_move(self, cx: float, cy: float) -> None:
        if self._mapper is None or not self._session.interaction.is_gesture_active:
            return
        self._session.pointer_move(self._mapper.to_image(cx, cy))
        self._refresh_overlay()

    def _handle_pointer_up(self, cx: float, cy: float) -> None:
        if self._mapper is None or not self._session.interaction.is_gesture_active:
            return
        self._session.pointer_up(self._mapper.to_image(cx, cy))
        self._finish_gesture()

    def _handle_pointer_leave(self) -> None:
        if not self._session.interaction.is_gesture_active:
            return
        self._session.pointer_leave()
        self._finish_gesture()

    def _finish_gesture(self) -> None:
        self._sync_controls()
        self._refresh_overlay()

    def _handle_delete_region(self, region_id: str) -> None:
        self._session.remove_region(region_id)

    # ---- Session notifications ----
    def _handle_regions_change(self, regions: Tuple[Region, ...]) -> None:
        self.bottom.set_region_count(len(regions))
        self._refresh_overlay()

    def _handle_busy_change(self, busy: bool) -> None:
        self.bottom.set_busy(busy)
        self._sync_controls()
        self._refresh_overlay()

    def _handle_layout_change(self) -> None:
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())
        self._refresh_overlay()

    # ---- Export ----
    def _handle_save(self) -> None:
        if not self._session.has_image or self._export_dialog is not None:
            return
        self._session.close_export()
        dialog = ExportDialog(self.window)
        dialog.on_confirm_change = self._session.set_export_confirmed
        dialog.on_download = self._handle_download
        dialog.on_close = self._close_export_dialog
        self._export_dialog = dialog

    def _handle_download(self) -> None:
        artifact = self._session.export()
        if artifact is None:
            return
        self._close_export_dialog()
        try:
            target = filedialog.asksaveasfilename(
                title="Сохранить фото",
                initialfile=artifact.filename,
                defaultextension=".png",
                filetypes=(("PNG", "*.png"),),
            )
        except TclError:
            return
        if not target:
            return
        try:
            Path(target).write_bytes(artifact.data)
        except OSError as exc:
            logger.error("Failed to write %s: %s", target, exc)
            messagebox.showerror("Ошибка", f"Не удалось сохранить файл:\n{exc}", parent=self.window)
            return
        self.bottom.set_status(f"Сохранено: {Path(target).name}")

    def _close_export_dialog(self) -> None:
        self._session.close_export()
        if self._export_dialog is not None:
            self._export_dialog.grab_release()
            self._export_dialog.destroy()
            self._export_dialog = None

    # ---- Helpers ----
    def _refresh_overlay(self) -> None:
        """Пересчитывает маркеры областей в координаты холста (после любого изменения раскладки)."""
        mapper = self._mapper
        if mapper is None:
            self.viewer.set_overlay([])
            return
        session = self._session
        candidate = session.drag_candidate
        deletable = not session.add_mode and not session.is_busy

        markers: List[OverlayMarker] = []
        for region in session.regions:
            shown = candidate if candidate is not None and candidate.id == region.id else region
            markers.append(self._marker_for(mapper, shown, deletable))

        preview = None
        if session.preview is not None:
            p = session.preview
            origin = mapper.to_overlay(p.x, p.y)
            w, h = mapper.size_to_overlay(p.width, p.height)
            preview = OverlayMarker(None, origin.x, origin.y, w, h, PREVIEW_COLOR, deletable=False)

        hint = _ADD_MODE_HINT if session.interaction_state == InteractionState.ARMED else None
        self.viewer.set_overlay(markers, preview=preview, hint=hint)

    def _marker_for(self, mapper: CoordinateMapper, region: Region, deletable: bool) -> OverlayMarker:
        origin = mapper.to_overlay(region.x, region.y)
        w, h = mapper.size_to_overlay(region.width, region.height)
        color = MOSAIC_COLOR if region.effect_type == EffectType.MOSAIC else BLUR_COLOR
        return OverlayMarker(region.id, origin.x, origin.y, w, h, color, deletable=deletable)

    def _sync_controls(self) -> None:
        session = self._session
        self.sidebar.set_add_mode(session.add_mode)
        self.sidebar.set_controls_enabled(
            has_image=session.has_image, busy=session.is_busy, detector_ready=self._detector is not None
        )
        self._sync_cursor()

    def _sync_cursor(self) -> None:
        state = self._session.interaction_state
        if state in (InteractionState.ARMED, InteractionState.DRAWING):
            self.viewer.set_cursor("crosshair")
        elif state == InteractionState.DRAGGING:
            self.viewer.set_cursor("fleur")
        else:
            self.viewer.set_cursor("")
