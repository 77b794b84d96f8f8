"""Обработчики сообщений бота.

Все команды обрабатывает один роутер chat: он разбирает сообщение
и передаёт команду диспетчеру. Какие команды есть, решает реестр,
а не набор роутеров.
"""

from aiogram import Router

from src.bot.handlers.chat import create_chat_router


def get_main_router() -> Router:
    """Создать главный роутер с обработчиком чат-команд.

    Returns:
        Главный роутер.
    """
    router = Router(name="main")
    router.include_router(create_chat_router())
    return router


__all__ = ["get_main_router"]
