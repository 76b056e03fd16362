"""Точка входа в приложение."""
from photoveil.app import PhotoVeilApp
from photoveil.config.settings import get_settings
from photoveil.monitoring.logging import configure_logging


def main() -> None:
    """Создаёт и запускает главное окно приложения."""
    configure_logging()
    app = PhotoVeilApp(get_settings())
    app.mainloop()


if __name__ == "__main__":
    main()
