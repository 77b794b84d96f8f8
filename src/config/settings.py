"""Настройки приложения через переменные окружения.

ВАЖНО: Этот модуль загружает настройки из .env файла при импорте.
Для использования только классов настроек (без загрузки .env)
импортируйте из src.config.models вместо этого модуля.

Пример для тестов:
    # Изолированный импорт без побочных эффектов:
    from src.config.models import BotSettings

    # НЕ используйте в тестах (загрузит .env):
    from src.config.settings import BotSettings
"""

import sys
from pathlib import Path

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

# Путь к корню проекта (вычисляем от текущего файла)
# src/config/settings.py → src/config → src → корень проекта
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

# Если файл .env существует — используем его, иначе None (только переменные окружения)
ENV_FILE_PATH = ENV_FILE if ENV_FILE.exists() else None

# Импортируем классы настроек из models.py
# Это позволяет тестам импортировать классы без побочных эффектов
from src.config.models import (  # noqa: E402
    BotSettings,
    CORSSettings,
    DatabaseSettings,
    LoggingSettings,
    TelegramLoggingSettings,
)

__all__ = [
    "BotSettings",
    "CORSSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "TelegramLoggingSettings",
    "load_settings",
    "settings",
]

# ==============================================================================
# СЛОВАРЬ ОШИБОК НА РУССКОМ ЯЗЫКЕ
# ==============================================================================
#
# Pydantic выдаёт ошибки на английском. Здесь мы переводим их на русский,
# чтобы было понятно, что пошло не так.

FIELD_ERROR_MESSAGES: dict[str, str] = {
    "logging.level": "Некорректный LOGGING__LEVEL (DEBUG, INFO, WARNING, ERROR)",
    "cors.allow_origins": (
        "CORS__ALLOW_ORIGINS должен быть JSON-списком: "
        '["https://panel.example.com"]'
    ),
}

# Сообщение по умолчанию для неизвестных полей
DEFAULT_ERROR_MESSAGE = "Ошибка конфигурации. Проверьте файл .env или переменные окружения"


class Settings(BaseSettings):
    """Главные настройки приложения.

    Настройки загружаются из двух источников (в порядке приоритета):
    1. Переменные окружения (приоритет выше)
    2. Файл .env (если существует)
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    bot: BotSettings = BotSettings()
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()
    cors: CORSSettings = CORSSettings()


def _format_validation_error(error: ValidationError) -> str:
    """Преобразовать ошибку Pydantic в понятное русское сообщение.

    Args:
        error: Ошибка валидации от Pydantic.

    Returns:
        Понятное сообщение на русском языке.
    """
    messages: list[str] = []

    for err in error.errors():
        # Получаем путь к полю (например, ("bot", "token") -> "bot.token")
        field_path = ".".join(str(loc) for loc in err["loc"])

        if field_path in FIELD_ERROR_MESSAGES:
            messages.append(FIELD_ERROR_MESSAGES[field_path])
        else:
            messages.append(DEFAULT_ERROR_MESSAGE)
            messages.append(f"Поле: {field_path}")
            messages.append(f"Тип ошибки: {err['type']}")
            messages.append(f"Сообщение: {err['msg']}")

    return "\n".join(messages)


def load_settings() -> Settings:
    """Загрузить настройки из переменных окружения.

    Если настройки некорректны — выводит понятную ошибку на русском
    и завершает программу.

    Returns:
        Объект Settings с загруженными настройками.
    """
    try:
        return Settings()
    except ValidationError as e:
        print(_format_validation_error(e), file=sys.stderr)
        sys.exit(1)


# Загружаем настройки при импорте модуля.
settings = load_settings()
