import logging
import sys

from doceditor.core.config import settings


def setup_logging() -> None:
    """Настройка корневого логгера приложения"""
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())
    # Убираем обработчики, оставшиеся от uvicorn/предыдущего запуска
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # SQL пишем только если включен echo
    if not settings.sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
