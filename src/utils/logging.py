"""Настройка логирования.

Каналы вывода:
1. Консоль (stdout) — с цветной подсветкой уровней, если это терминал
2. Файл с ротацией — data/logs/app.log
3. Telegram — ошибки админу (опционально, LOGGING__TELEGRAM__CHAT_ID)

Формат строки:
    25-01-07 21:55:46 | INFO | bot.commands.registry | Сообщение
"""

import logging
import os
import queue
import sys
import threading
import traceback
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

import httpx
from typing_extensions import override

from src.config.constants import DATA_DIR
from src.utils.timezone import get_timezone

if TYPE_CHECKING:
    from src.config.models import TelegramLoggingSettings

LOGS_DIR = DATA_DIR / "logs"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%y-%m-%d %H:%M:%S"

# Лимит Telegram 4096 символов, остаток под заголовок
TELEGRAM_MESSAGE_MAX_LENGTH = 3500

RESET = "\033[0m"

LEVEL_COLORS: dict[str, str] = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}

LEVEL_EMOJI: dict[str, str] = {
    "WARNING": "⚠️",
    "ERROR": "🚨",
    "CRITICAL": "💀",
}

# Логгеры сторонних библиотек и их уровни (меньше шума в консоли)
LIBRARY_LEVELS: dict[str, int] = {
    "aiogram": logging.INFO,
    "aiohttp": logging.WARNING,
    "httpx": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


class TimezoneFormatter(logging.Formatter):
    """Форматтер, который показывает время в заданном часовом поясе."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        timezone_name: str = "Europe/Moscow",
    ) -> None:
        """Инициализировать форматтер.

        Args:
            fmt: Формат строки лога.
            datefmt: Формат даты/времени.
            timezone_name: Часовой пояс из базы IANA.
        """
        super().__init__(fmt, datefmt)
        self.timezone = get_timezone(timezone_name)

    @override
    def formatTime(
        self,
        record: logging.LogRecord,
        datefmt: str | None = None,
    ) -> str:
        moment = datetime.fromtimestamp(record.created, tz=self.timezone)
        return moment.strftime(datefmt or self.default_time_format)

    @override
    def format(self, record: logging.LogRecord) -> str:
        # src.bot.commands.registry -> bot.commands.registry
        original_name = record.name
        record.name = original_name.removeprefix("src.")
        try:
            return super().format(record)
        finally:
            record.name = original_name


class ColoredFormatter(TimezoneFormatter):
    """Форматтер для консоли: уровень выделяется цветом."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        timezone_name: str = "Europe/Moscow",
        use_colors: bool = True,
    ) -> None:
        super().__init__(fmt, datefmt, timezone_name)
        self.use_colors = use_colors

    @override
    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = LEVEL_COLORS.get(record.levelname)
        if not self.use_colors or color is None:
            return formatted
        return formatted.replace(
            f"| {record.levelname} |",
            f"| {color}{record.levelname}{RESET} |",
            1,
        )


class TelegramHandler(logging.Handler):
    """Отправка записей лога в Telegram через Bot API.

    Записи кладутся в очередь, а отправляет их отдельный daemon-поток,
    поэтому emit() не ждёт сеть. Слишком длинный текст обрезается
    (хвост traceback важнее начала).
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: int,
        level: int = logging.ERROR,
    ) -> None:
        """Инициализировать handler.

        Args:
            bot_token: Токен Telegram-бота.
            chat_id: ID чата для отправки (пользователь или группа).
            level: Минимальный уровень логов для отправки.
        """
        super().__init__(level)
        self._url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        self.chat_id = chat_id

        self._http_client = httpx.Client(
            timeout=httpx.Timeout(connect=5.0, read=15.0, write=15.0, pool=5.0)
        )
        self._queue: queue.Queue[logging.LogRecord | None] = queue.Queue()
        self._worker_thread = threading.Thread(
            target=self._worker,
            daemon=True,
            name="telegram-logger",
        )
        self._worker_thread.start()

    @override
    def emit(self, record: logging.LogRecord) -> None:
        self._queue.put(record)

    def _worker(self) -> None:
        """Отправлять записи из очереди, пока не придёт None."""
        while (record := self._queue.get()) is not None:
            try:
                self._http_client.post(
                    self._url,
                    data={
                        "chat_id": self.chat_id,
                        "text": self.render(record),
                        "parse_mode": "HTML",
                    },
                )
            except httpx.HTTPError as e:
                # Не через logging: иначе ошибка отправки снова попадёт в этот handler
                sys.stderr.write(f"[TelegramHandler] Ошибка отправки: {e}\n")

    @staticmethod
    def render(record: logging.LogRecord) -> str:
        """Текст сообщения в HTML-разметке Telegram."""
        emoji = LEVEL_EMOJI.get(record.levelname, "📝")
        moment = datetime.fromtimestamp(record.created, tz=UTC)
        body = record.getMessage()
        if record.exc_info:
            body += "\n\n" + "".join(traceback.format_exception(*record.exc_info))
        if len(body) > TELEGRAM_MESSAGE_MAX_LENGTH:
            body = "…" + body[-TELEGRAM_MESSAGE_MAX_LENGTH:]

        return (
            f"{emoji} <b>{record.levelname}</b> {moment:%Y-%m-%d %H:%M:%S} UTC\n"
            f"📍 {record.name}\n\n"
            f"<pre>{_escape_html(body)}</pre>"
        )

    @override
    def close(self) -> None:
        self._queue.put(None)
        self._worker_thread.join(timeout=5.0)
        self._http_client.close()
        super().close()


def _escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _should_use_colors() -> bool:
    """Цвета только в терминале и без NO_COLOR (https://no-color.org/)."""
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def setup_logging(
    level: str = "INFO",
    timezone_name: str = "Europe/Moscow",
    telegram_settings: "TelegramLoggingSettings | None" = None,
    bot_token: str | None = None,
) -> None:
    """Настроить логирование приложения.

    Повторный вызов заменяет ранее установленные handlers корневого логгера.

    Args:
        level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        timezone_name: Часовой пояс для времени в логах.
        telegram_settings: Настройки Telegram-логирования (опционально).
        bot_token: Токен бота для отправки логов в Telegram.
    """
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        ColoredFormatter(
            LOG_FORMAT,
            datefmt=DATE_FORMAT,
            timezone_name=timezone_name,
            use_colors=_should_use_colors(),
        )
    )

    # app.log + 3 резервные копии по 5 МБ
    file_handler = RotatingFileHandler(
        LOGS_DIR / "app.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        TimezoneFormatter(LOG_FORMAT, datefmt=DATE_FORMAT, timezone_name=timezone_name)
    )

    handlers: list[logging.Handler] = [console_handler, file_handler]

    if telegram_settings and telegram_settings.chat_id is not None and bot_token:
        telegram_level = logging.getLevelName(telegram_settings.level.upper())
        handlers.append(
            TelegramHandler(
                bot_token=bot_token,
                chat_id=telegram_settings.chat_id,
                level=telegram_level if isinstance(telegram_level, int) else logging.ERROR,
            )
        )

    root_logger = logging.getLogger()
    for old_handler in root_logger.handlers[:]:
        root_logger.removeHandler(old_handler)
        old_handler.close()
    root_logger.setLevel(level.upper())
    for handler in handlers:
        root_logger.addHandler(handler)

    # Uvicorn пишет в те же консоль и файл, в общем формате
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [] if name == "uvicorn" else [console_handler, file_handler]
        uvicorn_logger.propagate = False

    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> logging.Logger:
    """Получить логгер с указанным именем (обычно __name__)."""
    return logging.getLogger(name)
