"""Точка входа в приложение.

Запускает API панели и, если указан BOT__TOKEN, Telegram-чат в режиме polling.

Команда запуска:
    uvicorn src.main:app --host 0.0.0.0 --port 8000

Или через python:
    python -m src
"""

import logging

from src.app import create_app
from src.config.settings import settings
from src.utils.logging import setup_logging

# Ошибки уходят админу в Telegram, только если задан токен бота
setup_logging(
    level=settings.logging.level,
    timezone_name=settings.logging.timezone,
    telegram_settings=settings.logging.telegram,
    bot_token=settings.bot.token.get_secret_value() if settings.bot.token else None,
)

_logger = logging.getLogger(__name__)
_logger.info("Логирование настроено, загрузка приложения")

app = create_app()
