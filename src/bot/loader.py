"""Инициализация Bot и Dispatcher.

Этот модуль создаёт экземпляры бота и диспетчера aiogram.
FSM-состояния чат-командам не нужны, поэтому используется MemoryStorage.
"""

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from pydantic import SecretStr

from src.utils.logging import get_logger

logger = get_logger(__name__)


def create_bot(token: SecretStr | str) -> Bot:
    """Создать экземпляр бота.

    Args:
        token: Токен Telegram-бота (SecretStr из настроек или str).

    Returns:
        Настроенный экземпляр Bot.
    """
    token_str = token.get_secret_value() if isinstance(token, SecretStr) else token
    return Bot(
        token=token_str,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def create_dispatcher() -> Dispatcher:
    """Создать Dispatcher.

    Returns:
        Экземпляр Dispatcher с MemoryStorage.
    """
    logger.debug("FSM storage: MemoryStorage")
    return Dispatcher(storage=MemoryStorage())
