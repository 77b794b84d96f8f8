"""Обработчик чат-команд.

Превращает сообщения вида "!команда аргументы" (или "/команда аргументы")
в CommandEvent и передаёт их диспетчеру команд. Диспетчер синхронный
и ходит в хранилище, поэтому вызывается в пуле потоков.

Все проверки (права, ограничения, цены) делает диспетчер,
обработчик только отвечает в чат.
"""

import asyncio

from aiogram import F, Router
from aiogram.types import Message, User

from src.bot.commands.dispatcher import CommandDispatcher
from src.bot.commands.event import CommandEvent
from src.config.constants import COMMAND_PREFIXES
from src.utils.logging import get_logger

logger = get_logger(__name__)


def parse_command(text: str) -> tuple[str, tuple[str, ...]] | None:
    """Разобрать текст сообщения на имя команды и аргументы.

    "/points@my_bot add alice 10" -> ("points", ("add", "alice", "10"))

    Returns:
        (имя, аргументы) или None, если сообщение не команда.
    """
    text = text.strip()
    if not text or text[0] not in COMMAND_PREFIXES:
        return None

    parts = text[1:].split()
    if not parts:
        return None

    # В группах Telegram добавляет к команде имя бота: /cmd@bot
    name = parts[0].split("@", 1)[0].lower()
    if not name:
        return None
    return name, tuple(parts[1:])


def get_sender_name(user: User) -> str:
    """Имя отправителя в реестре: username или Telegram ID."""
    return (user.username or str(user.id)).lower()


async def on_chat_command(
    message: Message,
    command_dispatcher: CommandDispatcher,
) -> None:
    """Выполнить чат-команду.

    Args:
        message: Сообщение пользователя.
        command_dispatcher: Диспетчер команд (из workflow data диспетчера aiogram).
    """
    if not message.from_user or not message.text:
        return

    parsed = parse_command(message.text)
    if parsed is None:
        return

    name, args = parsed
    event = CommandEvent(
        sender=get_sender_name(message.from_user),
        command=name,
        args=args,
    )

    result = await asyncio.to_thread(command_dispatcher.dispatch, event)
    logger.debug("!%s от %s: %s", name, event.sender, result.status)

    if result.reply:
        # Ответы содержат ввод пользователя, поэтому без HTML-разметки бота
        await message.answer(result.reply, parse_mode=None)


def create_chat_router() -> Router:
    """Создать роутер chat.

    Роутер aiogram можно подключить только к одному родителю,
    поэтому каждый диспетчер получает свой экземпляр.
    """
    router = Router(name="chat")
    router.message(F.text)(on_chat_command)
    return router
