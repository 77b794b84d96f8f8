"""Управление жизненным циклом приложения.

Класс ApplicationLifecycle инкапсулирует всю логику startup и shutdown:
- Создание хранилища и локализации
- Сборка компонентов (реестр, модули, диспетчер)
- Регистрация команд включённых модулей
- Запуск Telegram-чата в режиме polling (если задан токен)
- Корректная остановка всех компонентов
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from typing import TYPE_CHECKING

from src.app.components import BotComponents, build_components
from src.bot.loader import create_bot, create_dispatcher
from src.bot.setup import setup_bot
from src.db.base import create_datastore
from src.utils.i18n import Localization, init_localization
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher
    from fastapi import FastAPI

    from src.config.settings import Settings
    from src.config.yaml_config import YamlConfig
    from src.db.datastore import Datastore

logger = get_logger(__name__)


class ApplicationLifecycle:
    """Управление жизненным циклом приложения.

    Attributes:
        settings: Настройки приложения из .env
        yaml_config: Конфигурация из config.yaml
        components: Компоненты бота (создаются при startup)
        bot: Telegram Bot instance (если задан токен)
        dp: aiogram Dispatcher (если задан токен)
        polling_task: asyncio.Task для long polling
    """

    def __init__(
        self,
        settings: Settings,
        yaml_config: YamlConfig,
        store_factory: Callable[[], Datastore] = create_datastore,
    ) -> None:
        """Инициализировать lifecycle manager.

        Args:
            settings: Настройки приложения из .env
            yaml_config: Конфигурация из config.yaml
            store_factory: Фабрика хранилища (в тестах — хранилище в памяти)
        """
        self.settings = settings
        self.yaml_config = yaml_config
        self._store_factory = store_factory

        self.components: BotComponents | None = None
        self.bot: Bot | None = None
        self.dp: Dispatcher | None = None
        self.polling_task: asyncio.Task[None] | None = None

    async def startup(self, app: FastAPI) -> None:
        """Выполнить startup приложения.

        1. Хранилище и локализация (параллельно, в потоках)
        2. Сборка компонентов и регистрация команд модулей
        3. Сохранение компонентов в app.state для API панели
        4. Telegram polling, если указан BOT__TOKEN

        Args:
            app: FastAPI приложение для сохранения компонентов в app.state
        """
        logger.info("Запуск приложения...")

        store, l10n_service = await asyncio.gather(
            asyncio.to_thread(self._store_factory),
            asyncio.to_thread(init_localization, self.yaml_config.localization),
        )
        l10n = Localization(l10n_service.config.default_language, l10n_service)

        self.components = build_components(
            store, self.settings.bot, self.yaml_config, l10n
        )
        await asyncio.to_thread(self.components.module_manager.initialize)

        app.state.store = self.components.store
        app.state.stream_status = self.components.stream_status
        app.state.registry = self.components.registry
        app.state.module_manager = self.components.module_manager
        app.state.dispatcher = self.components.dispatcher
        app.state.bot_name = self.components.bot_name

        logger.info(
            "Зарегистрировано команд: %d",
            len(self.components.registry.list_commands()),
        )

        if self.settings.bot.is_enabled:
            self._start_polling(l10n)
        else:
            logger.info("BOT__TOKEN не указан: чат не подключён, работает только API")

        logger.info("✅ Приложение запущено успешно")

    def _start_polling(self, l10n: Localization) -> None:
        """Создать бота и запустить long polling фоновой задачей."""
        assert self.components is not None
        assert self.settings.bot.token is not None

        self.bot = create_bot(self.settings.bot.token)
        self.dp = create_dispatcher()
        setup_bot(self.dp, self.components.dispatcher, l10n)

        self.polling_task = asyncio.create_task(
            self.dp.start_polling(self.bot),
            name="telegram_polling",
        )
        logger.info("✅ Polling mode активирован")

    async def shutdown(self) -> None:
        """Выполнить shutdown приложения.

        Останавливает компоненты в обратном порядке:
        1. Polling task (если был запущен)
        2. Bot session
        """
        logger.info("Остановка приложения...")

        if self.polling_task is not None:
            self.polling_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.polling_task
            logger.debug("Polling остановлен")

        if self.bot is not None:
            await self.bot.session.close()
            logger.debug("Bot session закрыта")

        logger.info("✅ Приложение остановлено")
