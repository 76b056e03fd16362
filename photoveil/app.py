import customtkinter as ctk

from photoveil.config.settings import Settings
from photoveil.controllers.app_controller import AppController
from photoveil.ui.image_viewer import ImageViewer
from photoveil.ui.sidebar import Sidebar
from photoveil.ui.bottom_bar import BottomBar


class PhotoVeilApp(ctk.CTk):
    def __init__(self, settings: Settings) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title("PhotoVeil")
        self.minsize(900, 600)

        # root layout: left viewer, right sidebar
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._viewer = ImageViewer(self)
        self._viewer.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self, intensity_range=(settings.intensity_min, settings.intensity_max))
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self)
        self._bottom.grid(row=1, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._controller = AppController(
            viewer=self._viewer, sidebar=self._sidebar, bottom=self._bottom, window=self, settings=settings
        )
        self._controller.bind_events()
        # model loading may show a blocking notice, so wait for the window
        self.after(100, self._controller.load_detector)
