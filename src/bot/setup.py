"""Настройка и инициализация компонентов бота.

Этот модуль содержит функции для настройки диспетчера aiogram:
- setup_error_handlers() — обработчики ошибок (ошибки хранилища)
- setup_handlers() — подключение роутеров
- setup_bot() — всё вместе плюс передача диспетчера команд в handlers

Использование:
    from src.bot.setup import setup_bot

    dp = create_dispatcher()
    setup_bot(dp, command_dispatcher, l10n)
"""

from aiogram import Dispatcher
from aiogram.types import ErrorEvent

from src.bot.commands.dispatcher import CommandDispatcher
from src.bot.handlers import get_main_router
from src.core.exceptions import DatabaseError
from src.utils.i18n import Localization
from src.utils.logging import get_logger

logger = get_logger(__name__)


def setup_error_handlers(dp: Dispatcher, l10n: Localization) -> None:
    """Зарегистрировать обработчики ошибок в диспетчере.

    Обрабатываемые ошибки:
    - DatabaseError — хранилище недоступно, пользователь получает
      короткое сообщение вместо молчания

    Args:
        dp: Диспетчер aiogram.
        l10n: Локализация ответов.
    """

    @dp.errors()
    async def database_error_handler(error_event: ErrorEvent) -> bool:
        """Обработать ошибку хранилища.

        Returns:
            True если ошибка обработана, False иначе.
        """
        if not isinstance(error_event.exception, DatabaseError):
            return False

        logger.error("Ошибка хранилища при обработке команды: %s", error_event.exception)
        if error_event.update.message:
            await error_event.update.message.answer(l10n.get("error.database"))
        return True

    logger.debug("Обработчики ошибок зарегистрированы: DatabaseError")


def setup_handlers(dp: Dispatcher) -> None:
    """Подключить роутеры к диспетчеру.

    Args:
        dp: Диспетчер aiogram.
    """
    dp.include_router(get_main_router())
    logger.debug("Роутеры подключены к диспетчеру")


def setup_bot(
    dp: Dispatcher,
    command_dispatcher: CommandDispatcher,
    l10n: Localization,
) -> None:
    """Полная настройка бота: зависимости, ошибки, handlers.

    Диспетчер команд кладётся в workflow data, и aiogram передаёт его
    в handlers по имени аргумента command_dispatcher.

    Args:
        dp: Диспетчер aiogram.
        command_dispatcher: Диспетчер чат-команд.
        l10n: Локализация ответов.
    """
    dp["command_dispatcher"] = command_dispatcher
    setup_error_handlers(dp, l10n)
    setup_handlers(dp)
