"""Factory для создания FastAPI приложения.

Функция create_app() создаёт и настраивает FastAPI app:
- Подключает роутеры (панель, health)
- Настраивает CORS middleware для веб-панели
- Подключает lifecycle manager
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.health import router as health_router
from src.api.panel import router as panel_router
from src.app.lifecycle import ApplicationLifecycle
from src.config.settings import Settings, settings
from src.config.yaml_config import YamlConfig, yaml_config
from src.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    app_settings: Settings | None = None,
    app_yaml_config: YamlConfig | None = None,
    lifecycle: ApplicationLifecycle | None = None,
) -> FastAPI:
    """Создать и настроить FastAPI приложение.

    Args:
        app_settings: Настройки приложения (по умолчанию — из .env).
        app_yaml_config: Конфигурация (по умолчанию — из config.yaml).
        lifecycle: Lifecycle manager (в тестах — с хранилищем в памяти).

    Returns:
        Настроенное FastAPI приложение готовое к запуску
    """
    app_settings = app_settings or settings
    app_yaml_config = app_yaml_config or yaml_config
    lifecycle = lifecycle or ApplicationLifecycle(app_settings, app_yaml_config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Управление жизненным циклом приложения.

        Args:
            app: FastAPI приложение

        Yields:
            None: Приложение работает между startup и shutdown
        """
        await lifecycle.startup(app)

        yield

        await lifecycle.shutdown()

    app = FastAPI(
        title="Stream Command Bot",
        description="Реестр чат-команд и API веб-панели",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Порядок middleware в FastAPI обратный: последний добавленный выполняется первым.
    # CORS должен обработать запрос до того, как он попадёт в роутеры.
    if app_settings.cors.is_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors.allow_origins,
            allow_credentials=app_settings.cors.allow_credentials,
            allow_methods=app_settings.cors.allow_methods,
            allow_headers=app_settings.cors.allow_headers,
        )
        logger.info(
            "CORS включён для доменов: %s",
            ", ".join(app_settings.cors.allow_origins),
        )

    # Panel API: /api/panel/...
    app.include_router(panel_router)

    # Health check API: /health
    app.include_router(health_router)

    return app
